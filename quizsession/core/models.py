"""
Domain models for quiz sessions.

Questions are immutable once fetched: options are stored as a tuple with
the canonical correct answer at index 0. Presentation order is derived
separately by the session and never written back here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Passage:
    """Text block a question may be linked to."""

    id: str
    title: str = ""
    text: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Passage:
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            text=data.get("text") or data.get("content") or "",
        )


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question in canonical form."""

    id: str
    category_id: str
    content_category: str
    content: str
    options: tuple[str, ...] = ()
    explanations: tuple[str, ...] = ()
    passage: Passage | None = None

    @property
    def correct_answer(self) -> str:
        """Canonical correct option (index 0), or '' when there are none."""
        return self.options[0] if self.options else ""

    @property
    def explanation(self) -> str:
        """Explanation for the correct answer (first note)."""
        return self.explanations[0] if self.explanations else ""

    def is_correct(self, answer: str) -> bool:
        return bool(self.options) and answer == self.options[0]


@dataclass(frozen=True)
class AnswerSummary:
    """Outcome of one answered question. Created once, never modified."""

    question_number: int  # 1-based position in the session
    question_id: str
    question_content: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    time_spent_seconds: float
    explanation: str = ""


@dataclass(frozen=True)
class RewardOutcome:
    """Coins earned by a completed session."""

    coins_awarded: int
    score: float


@dataclass(frozen=True)
class ProgressStats:
    """Aggregated statistics over a list of answer summaries."""

    correct: int = 0
    total: int = 0
    percentage: float = 0.0
    average_time_seconds: float = 0.0
    total_time_seconds: float = 0.0


class NoticeLevel(str, Enum):
    """Severity of a user-facing notice."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A toast-style message for the user."""

    level: NoticeLevel
    message: str


@dataclass(frozen=True)
class QuestionContext:
    """Payload pushed to tutoring/chat subscribers on question change."""

    content_title: str
    context: str
    question_id: str = ""


@dataclass
class SessionSummary:
    """End-of-session report."""

    stats: ProgressStats
    reward: RewardOutcome | None
    summaries: list[AnswerSummary] = field(default_factory=list)
    total_elapsed_seconds: float = 0.0
