"""
Error taxonomy for the quiz session engine.

Every failure that crosses a component boundary is one of these. HTTP
clients translate httpx errors into them (chaining the original with
``raise ... from exc``); the session state machine catches the recoverable
ones and turns them into user-facing notices.

Recoverable:
- FetchError: question page could not be retrieved
- PersistError: session record or answer could not be written
- CoinCreditError: completion reward could not be credited

Terminal / transition-blocking:
- NoContentError: the category has no questions at all
- CoinDebitError: the entry cost could not be charged
- MalformedOptionsError: raw options could not be normalised
"""

from __future__ import annotations


class QuizSessionError(Exception):
    """Base class for quiz session engine errors."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class FetchError(QuizSessionError):
    """Raised when a question page request fails or returns non-2xx."""

    def __init__(
        self,
        message: str,
        page: int | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause)
        self.page = page
        self.status_code = status_code


class NoContentError(QuizSessionError):
    """Raised when page 1 of a category is empty."""

    def __init__(self, category: str):
        super().__init__(f"No quiz questions found for category '{category}'")
        self.category = category


class PersistError(QuizSessionError):
    """Raised when the grading/record service rejects a write."""


class CoinDebitError(QuizSessionError):
    """Raised when the entry cost cannot be charged."""


class CoinCreditError(QuizSessionError):
    """Raised when a completion reward cannot be credited."""


class MalformedOptionsError(QuizSessionError):
    """Raised when a raw options payload cannot be turned into a list."""

    def __init__(self, raw: object, reason: str = "unparseable options payload"):
        super().__init__(f"Malformed question options: {reason}")
        self.raw = raw
