"""
External integrations for the quiz session engine.

Modules:
- api_client: shared httpx client for the learning platform API
- question_source: paginated question retrieval and normalisation
- answer_recorder: session record + per-answer persistence
- coin_ledger: signed coin deltas against the user's balance
"""
from .answer_recorder import AnswerRecorder
from .api_client import ApiClient
from .coin_ledger import CoinDelta, CoinLedger
from .question_source import QuestionSource, normalize_options, parse_options

__all__ = [
    "ApiClient",
    "AnswerRecorder",
    "CoinDelta",
    "CoinLedger",
    "QuestionSource",
    "normalize_options",
    "parse_options",
]
