"""
Quiz Session: the state machine behind one quiz attempt.

Session Flow:
1. load()    - fetch page 1 ahead of the intro (empty category -> NO_QUESTIONS)
2. start()   - debit the entry cost, NOT_STARTED -> ACTIVE
3. select_answer() / advance() / retreat() while ACTIVE
   - the next page is prefetched in the background when the pointer is
     ``prefetch_distance`` questions from the end of the buffer
4. reaching the last question -> COMPLETE, reward settled exactly once
5. reset()   - tear everything down, back to NOT_STARTED

All state mutations happen synchronously between awaits on one event loop.
Continuations of I/O started before a reset() carry the generation they
were started in and are discarded if it no longer matches.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

from quizsession.config import SessionConfig
from quizsession.core.errors import (
    CoinDebitError,
    FetchError,
    NoContentError,
    PersistError,
    QuizSessionError,
)
from quizsession.core.models import (
    AnswerSummary,
    Notice,
    NoticeLevel,
    ProgressStats,
    Question,
    QuestionContext,
    RewardOutcome,
    SessionSummary,
)
from quizsession.study.context import build_tutor_context
from quizsession.study.progress import aggregate
from quizsession.study.rewards import RewardTiers, settle
from quizsession.study.shuffler import shuffle_options
from quizsession.study.timer import Timer

if TYPE_CHECKING:
    from quizsession.integrations.answer_recorder import AnswerRecorder
    from quizsession.integrations.coin_ledger import CoinDelta
    from quizsession.integrations.question_source import QuestionSource


class SessionStatus(str, Enum):
    """Lifecycle of a quiz session."""

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETE = "complete"


class Display(str, Enum):
    """What the render layer should show."""

    LOADING = "loading"
    INTRO = "intro"
    QUESTION = "question"
    SUMMARY = "summary"
    NO_QUESTIONS = "no_questions"


class SessionListener:
    """
    Receives session events. Subclass and override what you need.

    Listeners are notified synchronously; exceptions they raise are logged
    and do not affect the session.
    """

    def on_notice(self, notice: Notice) -> None:
        pass

    def on_context(self, context: QuestionContext) -> None:
        pass

    def on_complete(self, stats: ProgressStats, reward: RewardOutcome) -> None:
        pass


@dataclass
class SessionState:
    """Mutable state of one session instance. Replaced wholesale on reset."""

    status: SessionStatus = SessionStatus.NOT_STARTED
    questions: list[Question] = field(default_factory=list)
    current_index: int = 0
    answered_question_ids: set[str] = field(default_factory=set)
    user_answers: dict[str, str] = field(default_factory=dict)
    summaries: list[AnswerSummary] = field(default_factory=list)
    presentations: dict[str, tuple[str, ...]] = field(default_factory=dict)
    has_opened_timing: bool = False
    reward_issued: bool = False
    reward: RewardOutcome | None = None
    last_page: int = 0
    exhausted: bool = False
    no_content: bool = False
    loading: bool = False

    @property
    def is_complete(self) -> bool:
        return self.status is SessionStatus.COMPLETE


class QuizSession:
    """
    Orchestrates one quiz attempt for a category.

    Collaborators are injected: the question source, the answer recorder
    and a ``coin_delta`` coroutine function (negative to debit, positive
    to credit).
    """

    def __init__(
        self,
        category: str,
        source: QuestionSource,
        recorder: AnswerRecorder,
        coin_delta: CoinDelta,
        config: SessionConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.category = category
        self.source = source
        self.recorder = recorder
        self.coin_delta = coin_delta
        self.config = config or SessionConfig()
        self.tiers = RewardTiers(
            perfect_threshold=self.config.perfect_score_threshold,
            perfect_coins=self.config.perfect_score_coins,
            passing_threshold=self.config.passing_score_threshold,
            passing_coins=self.config.passing_score_coins,
        )
        self._rng = rng
        self.question_timer = Timer(clock)
        self.session_timer = Timer(clock)
        self.state = SessionState()
        self._generation = 0
        self._prefetch_task: asyncio.Task[bool] | None = None
        self._advancing = False
        self._starting = False
        self._listeners: list[SessionListener] = []

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def questions(self) -> list[Question]:
        return list(self.state.questions)

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def current_question(self) -> Question | None:
        if 0 <= self.state.current_index < len(self.state.questions):
            return self.state.questions[self.state.current_index]
        return None

    @property
    def summaries(self) -> list[AnswerSummary]:
        return list(self.state.summaries)

    @property
    def session_record_id(self) -> str | None:
        return self.recorder.session_record_id

    @property
    def display(self) -> Display:
        state = self.state
        if state.loading and not state.questions:
            return Display.LOADING
        if state.no_content:
            return Display.NO_QUESTIONS
        if state.status is SessionStatus.NOT_STARTED:
            return Display.INTRO
        if state.status is SessionStatus.COMPLETE:
            return Display.SUMMARY
        if self.current_question is None:
            return Display.NO_QUESTIONS
        return Display.QUESTION

    def is_answered(self, question_id: str) -> bool:
        return question_id in self.state.answered_question_ids

    def user_answer(self, question_id: str) -> str | None:
        return self.state.user_answers.get(question_id)

    def presented_options(self, question_id: str) -> tuple[str, ...]:
        """
        Shuffled options for a question, frozen on first request.

        Every later call returns the identical order for the lifetime of
        the session.
        """
        cached = self.state.presentations.get(question_id)
        if cached is not None:
            return cached
        question = next((q for q in self.state.questions if q.id == question_id), None)
        if question is None:
            return ()
        presentation = tuple(shuffle_options(question.options, self._rng))
        self.state.presentations[question_id] = presentation
        return presentation

    def question_elapsed(self) -> float:
        return self.question_timer.elapsed()

    def total_elapsed(self) -> float:
        return self.session_timer.elapsed()

    def stats(self) -> ProgressStats:
        return aggregate(self.state.summaries)

    def summary(self) -> SessionSummary:
        return SessionSummary(
            stats=self.stats(),
            reward=self.state.reward,
            summaries=list(self.state.summaries),
            total_elapsed_seconds=self.session_timer.elapsed(),
        )

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, *args: object) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception:
                logger.exception("Session listener {} failed on {}", listener, event)

    def _notify(self, level: NoticeLevel, message: str) -> None:
        self._emit("on_notice", Notice(level=level, message=message))

    def _push_context(self) -> None:
        question = self.current_question
        if question is None:
            return
        presented = self.presented_options(question.id)
        self._emit("on_context", build_tutor_context(self.category, question, presented))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def load(self) -> bool:
        """
        Fetch page 1 if nothing is loaded yet.

        Returns:
            True when questions are available
        """
        state = self.state
        if state.questions:
            return True
        if state.no_content:
            return False

        generation = self._generation
        state.loading = True
        try:
            page = await self.source.fetch_page(self.category, 1, self.config.page_size)
        except NoContentError:
            if generation == self._generation:
                state.no_content = True
                logger.info("No content for category {}", self.category)
                self._notify(NoticeLevel.ERROR, "No quiz questions found for this category.")
            return False
        except FetchError as e:
            if generation == self._generation:
                logger.warning("Initial question load failed: {}", e.message)
                self._notify(NoticeLevel.WARNING, "Failed to load quiz questions. Please try again.")
            return False
        finally:
            state.loading = False

        if generation != self._generation:
            return False
        state.questions.extend(page)
        state.last_page = 1
        if not state.questions:
            state.no_content = True
            self._notify(NoticeLevel.ERROR, "No quiz questions found for this category.")
            return False
        return True

    async def start(self) -> SessionStatus:
        """
        Charge the entry cost and enter ACTIVE.

        Raises:
            CoinDebitError: If the debit fails; the session stays NOT_STARTED
        """
        if self.state.status is not SessionStatus.NOT_STARTED or self._starting:
            return self.state.status

        self._starting = True
        try:
            if not await self.load():
                return self.state.status
            generation = self._generation
            await self._charge_entry()
        finally:
            self._starting = False

        if generation != self._generation:
            return self.state.status

        self.state.status = SessionStatus.ACTIVE
        logger.info(
            "Quiz started for {} ({} questions loaded)", self.category, len(self.state.questions)
        )
        self._notify(NoticeLevel.SUCCESS, "Quiz started! Good luck!")
        self._push_context()
        return self.state.status

    async def _charge_entry(self) -> None:
        cost = self.config.entry_cost
        if not cost:
            return
        try:
            await self.coin_delta(-cost)
        except QuizSessionError as e:
            logger.error("Entry debit of {} coins failed: {}", cost, e)
            self._notify(NoticeLevel.ERROR, "Failed to start quiz. Please try again.")
            if isinstance(e, CoinDebitError):
                raise
            raise CoinDebitError("Failed to start quiz", cause=e) from e

    async def reset(self) -> None:
        """Tear down the current attempt; a new one needs start() again."""
        self._generation += 1
        await self._cancel_prefetch()
        await self.recorder.reset()
        self.source.reset()
        self.question_timer.reset()
        self.session_timer.reset()
        self.state = SessionState()
        self._advancing = False
        logger.info("Quiz session for {} reset", self.category)

    async def close(self) -> None:
        """Release in-flight work without touching the listeners."""
        self._generation += 1
        await self._cancel_prefetch()
        await self.recorder.reset()

    def pause(self) -> None:
        self.question_timer.pause()
        self.session_timer.pause()

    def resume(self) -> None:
        if self.state.status is SessionStatus.COMPLETE:
            return
        self.question_timer.resume()
        self.session_timer.resume()

    # =========================================================================
    # Answering
    # =========================================================================

    async def select_answer(self, answer: str) -> AnswerSummary | None:
        """
        Record ``answer`` (option text) for the current question.

        A second answer for the same question is ignored. Correctness is
        judged against the canonical option 0, never the shuffled order.
        Persistence failures leave local state untouched.

        Returns:
            The new summary, or None if the call was ignored
        """
        state = self.state
        question = self.current_question
        if state.status is not SessionStatus.ACTIVE or question is None:
            return None
        if question.id in state.answered_question_ids:
            return None

        if not state.has_opened_timing:
            state.has_opened_timing = True
            self.question_timer.start()
            self.session_timer.start()

        time_spent = self.question_timer.elapsed()
        is_correct = question.is_correct(answer)
        summary = AnswerSummary(
            question_number=state.current_index + 1,
            question_id=question.id,
            question_content=question.content,
            user_answer=answer,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            time_spent_seconds=time_spent,
            explanation=question.explanation,
        )
        state.answered_question_ids.add(question.id)
        state.user_answers[question.id] = answer
        state.summaries.append(summary)
        logger.debug(
            "Q{} {} answered {} in {:.1f}s",
            summary.question_number,
            question.id,
            "correctly" if is_correct else "incorrectly",
            time_spent,
        )

        await self._persist(question, answer, is_correct, time_spent)
        return summary

    async def select_option(self, index: int) -> AnswerSummary | None:
        """Answer with the option at ``index`` of the presented order."""
        question = self.current_question
        if question is None:
            return None
        presented = self.presented_options(question.id)
        if not 0 <= index < len(presented):
            raise ValueError(f"Option index {index} out of range for {len(presented)} options")
        return await self.select_answer(presented[index])

    async def _persist(
        self,
        question: Question,
        answer: str,
        is_correct: bool,
        time_spent: float,
    ) -> None:
        generation = self._generation
        try:
            record_id = await self.recorder.ensure_session(question.category_id)
            if generation != self._generation:
                return
            await self.recorder.record_answer(
                record_id, question.id, answer, is_correct, time_spent
            )
        except PersistError as e:
            if generation == self._generation:
                self._notify(NoticeLevel.WARNING, f"{e.message}. Your progress is kept locally.")

    # =========================================================================
    # Navigation
    # =========================================================================

    async def advance(self) -> None:
        """
        Move to the next question, or complete the session.

        The session completes on the configured last question, or on the
        final loaded question once the category has no more pages. When the
        buffer ends before that, the next page is awaited instead of
        stepping out of range; if it cannot be fetched the pointer stays
        put and the next advance() retries.
        """
        state = self.state
        if state.status is not SessionStatus.ACTIVE or not state.questions:
            return

        if state.current_index >= self.config.session_length - 1:
            await self._complete()
            return

        if state.current_index >= len(state.questions) - 1:
            if self._advancing:
                return
            self._advancing = True
            try:
                grown = await self._fill_buffer()
            finally:
                self._advancing = False
            if grown is None or state is not self.state:
                return
            if not grown:
                await self._complete()
                return

        self._maybe_prefetch()

        state.current_index += 1
        self.question_timer.reset()
        if state.has_opened_timing:
            self.question_timer.start()
        logger.debug("Moved to question {}", state.current_index + 1)
        self._push_context()

    def retreat(self) -> None:
        """Step back one question. Timers are left alone."""
        state = self.state
        if state.status is not SessionStatus.ACTIVE or state.current_index == 0:
            return
        state.current_index -= 1
        self._push_context()

    # =========================================================================
    # Pagination
    # =========================================================================

    def _needs_more(self) -> bool:
        state = self.state
        return not state.exhausted and len(state.questions) < self.config.session_length

    def _maybe_prefetch(self) -> None:
        if self._prefetch_task is not None and not self._prefetch_task.done():
            return
        if not self._needs_more():
            return
        state = self.state
        if state.current_index >= len(state.questions) - self.config.prefetch_distance:
            next_page = state.last_page + 1
            logger.debug("Prefetching page {} at question {}", next_page, state.current_index + 1)
            self._prefetch_task = asyncio.ensure_future(self._fetch_more(next_page))

    async def wait_for_prefetch(self) -> None:
        """Wait for an in-flight prefetch, if any."""
        task = self._prefetch_task
        if task is not None:
            await asyncio.wait({task})

    async def _fetch_more(self, page: int) -> bool:
        """Fetch ``page`` and append it. Returns False on failure."""
        generation = self._generation
        try:
            batch = await self.source.fetch_page(self.category, page, self.config.page_size)
        except FetchError as e:
            if generation == self._generation:
                logger.warning("Prefetch of page {} failed: {}", page, e.message)
                self._notify(NoticeLevel.WARNING, "Failed to load more questions. Please try again.")
            return False

        if generation != self._generation:
            return False
        state = self.state
        state.last_page = page
        if batch:
            state.questions.extend(batch)
        elif self.source.exhausted:
            state.exhausted = True
        else:
            logger.debug("Page {} held only questions already delivered", page)
        return True

    async def _fill_buffer(self) -> bool | None:
        """
        Make sure a question exists past the current one.

        Pages made only of already delivered questions are skipped.

        Returns:
            True if the buffer grew, False if the category is exhausted,
            None if the fetch failed or the session was reset meanwhile
        """
        generation = self._generation
        state = self.state
        before = len(state.questions)

        task = self._prefetch_task
        if task is not None and not task.done():
            # asyncio.wait never raises the task's cancellation into us
            await asyncio.wait({task})
        if generation != self._generation:
            return None

        while len(state.questions) == before:
            if state.exhausted:
                return False
            if not await self._fetch_more(state.last_page + 1):
                return None
            if generation != self._generation:
                return None
        return True

    async def _cancel_prefetch(self) -> None:
        task, self._prefetch_task = self._prefetch_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})

    # =========================================================================
    # Completion
    # =========================================================================

    async def _complete(self) -> None:
        state = self.state
        if state.status is SessionStatus.COMPLETE:
            return

        state.status = SessionStatus.COMPLETE
        self.question_timer.pause()
        self.session_timer.pause()
        await self._cancel_prefetch()

        stats = aggregate(state.summaries)
        logger.info(
            "Quiz complete for {}: {}/{} correct", self.category, stats.correct, stats.total
        )

        if state.reward_issued:
            return
        state.reward_issued = True
        outcome = settle(state.summaries, self.tiers)
        state.reward = outcome

        if outcome.coins_awarded:
            try:
                await self.coin_delta(outcome.coins_awarded)
            except QuizSessionError as e:
                logger.error("Failed to credit {} coins: {}", outcome.coins_awarded, e)
                self._notify(NoticeLevel.WARNING, "Failed to award coin")
            else:
                noun = "coin" if outcome.coins_awarded == 1 else "coins"
                self._notify(
                    NoticeLevel.SUCCESS,
                    f"Congratulations! You earned {outcome.coins_awarded} {noun}!",
                )

        self._emit("on_complete", stats, outcome)
