"""
Question Source: paginated question retrieval for a category.

Fetches pages from the question service, normalises each raw question
into a canonical ``Question`` and drops questions already delivered in
this session. Option normalisation never reorders elements, so index 0
stays the correct answer.

Raw ``questionOptions`` arrive in several shapes:
- a JSON array: ["A", "B"]
- a JSON-encoded string of an array: "[\"A\",\"B\"]"
- a doubly-encoded string, or an array holding one encoded string
- strings with stray quotes/brackets left over from bad imports
"""

from __future__ import annotations

import json
import random
from typing import Any, Sequence

import httpx
from loguru import logger

from quizsession.core.errors import FetchError, MalformedOptionsError, NoContentError
from quizsession.core.models import Passage, Question
from quizsession.integrations.api_client import ApiClient
from quizsession.study.shuffler import shuffle_options

STRAY_CHARACTERS = str.maketrans("", "", '"[]')
MAX_DECODE_DEPTH = 5


def _decode(value: Any) -> Any:
    """json.loads repeatedly until the value is no longer a string."""
    for _ in range(MAX_DECODE_DEPTH):
        if not isinstance(value, str):
            return value
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise MalformedOptionsError(value, f"not valid JSON ({exc.msg})") from exc
    if isinstance(value, str):
        raise MalformedOptionsError(value, "too many levels of encoding")
    return value


def parse_options(raw: Any) -> list[str]:
    """
    Normalise a raw options payload into a clean list of option strings.

    Raises:
        MalformedOptionsError: If no array can be recovered from ``raw``
    """
    if raw is None:
        raise MalformedOptionsError(raw, "options missing")

    options = _decode(raw)
    if not isinstance(options, list):
        raise MalformedOptionsError(raw, f"expected an array, got {type(options).__name__}")

    # Legacy rows store the whole array as a single encoded element
    if len(options) == 1 and isinstance(options[0], str) and options[0].lstrip().startswith("["):
        try:
            inner = _decode(options[0])
        except MalformedOptionsError:
            inner = None
        if isinstance(inner, list):
            options = inner

    cleaned = []
    for option in options:
        if option is None:
            continue
        text = str(option).translate(STRAY_CHARACTERS).strip()
        if text:
            cleaned.append(text)
    return cleaned


def normalize_options(raw: Any, question_id: str = "") -> list[str]:
    """Lenient parse_options(): malformed payloads degrade to []."""
    try:
        return parse_options(raw)
    except MalformedOptionsError as exc:
        logger.warning("Question {}: {}", question_id or "?", exc.message)
        return []


def parse_answer_notes(raw: Any) -> tuple[str, ...]:
    """
    Parse ``questionAnswerNotes`` into a tuple of notes.

    The first note explains the correct answer. Never raises: unparseable
    text is kept as a single note.
    """
    if raw is None:
        return ()
    value = raw
    for _ in range(MAX_DECODE_DEPTH):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            break
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, list):
        return tuple(str(note) for note in value if note is not None)
    return (str(value),)


def question_from_payload(data: dict[str, Any]) -> Question:
    """Map one raw question from the API onto a canonical Question."""
    question_id = str(data.get("id") or data.get("questionID") or "")
    category = data.get("category") or {}
    context = data.get("context")

    passage = None
    if isinstance(context, dict):
        passage = Passage.from_dict(context)
    elif isinstance(context, str) and context.strip():
        passage = Passage(id=str(data.get("passageId") or ""), text=context)

    return Question(
        id=question_id,
        category_id=str(category.get("id") or data.get("categoryId") or ""),
        content_category=category.get("contentCategory") or data.get("contentCategory") or "",
        content=data.get("questionContent") or "",
        options=tuple(normalize_options(data.get("questionOptions"), question_id)),
        explanations=parse_answer_notes(data.get("questionAnswerNotes")),
        passage=passage,
    )


class QuestionSource:
    """
    Lazy, paginated supplier of questions for one category.

    Remembers which question ids it has already delivered so overlapping
    pages never produce duplicates. Call reset() when a session is torn
    down.
    """

    def __init__(
        self,
        api: ApiClient,
        page_size: int = 10,
        question_types: Sequence[str] = ("normal",),
        shuffle_questions: bool = False,
        rng: random.Random | None = None,
    ):
        self.api = api
        self.page_size = page_size
        self.question_types = list(question_types)
        self.shuffle_questions = shuffle_questions
        self._rng = rng
        self._delivered: set[str] = set()
        self.exhausted = False

    def reset(self) -> None:
        self._delivered.clear()
        self.exhausted = False

    async def fetch_page(
        self,
        category: str,
        page_number: int,
        page_size: int | None = None,
    ) -> list[Question]:
        """
        Fetch one page of questions.

        Returns:
            New questions in service order (or shuffled, if configured).
            An empty list past page 1 is either the end of the category
            (``exhausted`` is set) or a page made only of duplicates.

        Raises:
            NoContentError: If page 1 has no questions
            FetchError: On network failure or non-2xx response
        """
        size = page_size or self.page_size
        params = [
            ("conceptCategory", category.replace(" ", "_")),
            ("page", str(page_number)),
            ("pageSize", str(size)),
            ("simple", "true"),
        ]
        params.extend(("types", t) for t in self.question_types)

        try:
            response = await self.api.request(
                "GET", self.api.config.questions_endpoint, params=params
            )
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Question fetch failed for {} page {}: HTTP {}",
                category,
                page_number,
                e.response.status_code,
            )
            raise FetchError(
                "Failed to load quiz questions",
                page=page_number,
                status_code=e.response.status_code,
                cause=e,
            ) from e
        except httpx.RequestError as e:
            logger.warning("Question fetch failed for {} page {}: {}", category, page_number, e)
            raise FetchError("Failed to load quiz questions", page=page_number, cause=e) from e
        except ValueError as e:
            raise FetchError(
                "Question service returned an invalid body", page=page_number, cause=e
            ) from e

        raw_questions = payload.get("questions") if isinstance(payload, dict) else None
        if not raw_questions:
            if page_number == 1:
                raise NoContentError(category)
            logger.debug("Category {} exhausted at page {}", category, page_number)
            self.exhausted = True
            return []

        questions = []
        for raw in raw_questions:
            question = question_from_payload(raw)
            if not question.id:
                logger.warning("Skipping question without id in {} page {}", category, page_number)
                continue
            if question.id in self._delivered:
                logger.debug("Dropping duplicate question {}", question.id)
                continue
            self._delivered.add(question.id)
            questions.append(question)

        if self.shuffle_questions:
            questions = shuffle_options(questions, self._rng)

        logger.debug(
            "Fetched {} questions for {} page {}", len(questions), category, page_number
        )
        return questions
