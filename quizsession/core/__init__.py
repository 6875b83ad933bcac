"""
Core Module - Shared domain models and errors.

Components:
- models: Question, AnswerSummary, RewardOutcome, ProgressStats, notices
- errors: Error taxonomy shared by the session engine and its clients
"""

from quizsession.core.errors import (
    CoinCreditError,
    CoinDebitError,
    FetchError,
    MalformedOptionsError,
    NoContentError,
    PersistError,
    QuizSessionError,
)
from quizsession.core.models import (
    AnswerSummary,
    Notice,
    NoticeLevel,
    Passage,
    ProgressStats,
    Question,
    QuestionContext,
    RewardOutcome,
    SessionSummary,
)

__all__ = [
    # Errors
    "QuizSessionError",
    "FetchError",
    "NoContentError",
    "PersistError",
    "CoinDebitError",
    "CoinCreditError",
    "MalformedOptionsError",
    # Models
    "Passage",
    "Question",
    "AnswerSummary",
    "RewardOutcome",
    "ProgressStats",
    "Notice",
    "NoticeLevel",
    "QuestionContext",
    "SessionSummary",
]
