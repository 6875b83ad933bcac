"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
The learning platform is replaced by ``FakePlatform``, an in-memory
service served through ``httpx.MockTransport`` so the real HTTP clients
are exercised end to end.
"""
import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from loguru import logger

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quizsession.config import ApiConfig, SessionConfig  # noqa: E402
from quizsession.core.errors import CoinDebitError, CoinCreditError  # noqa: E402
from quizsession.integrations.answer_recorder import AnswerRecorder  # noqa: E402
from quizsession.integrations.api_client import ApiClient  # noqa: E402
from quizsession.integrations.question_source import QuestionSource  # noqa: E402
from quizsession.study.session import QuizSession, SessionListener  # noqa: E402

BASE_URL = "http://platform.test"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru output to warnings and above during tests."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    yield
    logger.remove()


# =============================================================================
# Fakes
# =============================================================================


def make_raw_question(number: int, options=None, notes=None, category_id: str = "cat-1") -> dict:
    """Raw question as returned by GET /api/question."""
    if options is None:
        options = json.dumps([f"Correct {number}", f"Wrong {number}a", f"Wrong {number}b", f"Wrong {number}c"])
    if notes is None:
        notes = json.dumps([f"Because {number}", "Distractor note"])
    return {
        "id": f"q{number}",
        "category": {"id": category_id, "contentCategory": "Biology"},
        "questionContent": f"Question {number}?",
        "questionOptions": options,
        "questionAnswerNotes": notes,
        "context": None,
    }


class FakePlatform:
    """In-memory question, user-test and coin services."""

    def __init__(self, total_questions: int = 30):
        self.questions = [make_raw_question(i) for i in range(1, total_questions + 1)]
        self.fetched_pages: list[int] = []
        self.failing_pages: set[int] = set()
        self.page_delay = 0.0
        self.session_creates = 0
        self.session_delay = 0.0
        self.fail_session = False
        self.responses: list[dict] = []
        self.fail_responses = False
        self.coin_calls: list[int] = []
        self.fail_coins = False
        self.balance = 10

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/question":
            if self.page_delay:
                await asyncio.sleep(self.page_delay)
            return self._questions(request)
        if path == "/api/user-test" and request.method == "POST":
            self.session_creates += 1
            if self.session_delay:
                await asyncio.sleep(self.session_delay)
            if self.fail_session:
                return httpx.Response(500, json={"error": "db down"})
            return httpx.Response(200, json={"id": f"ut-{self.session_creates}"})
        if path == "/api/user-test/response":
            if self.fail_responses:
                return httpx.Response(503, text="unavailable")
            self.responses.append(json.loads(request.content))
            return httpx.Response(201, json={})
        if path == "/api/user-info":
            if request.method == "GET":
                return httpx.Response(200, json={"score": self.balance})
            amount = json.loads(request.content)["amount"]
            self.coin_calls.append(amount)
            if self.fail_coins:
                return httpx.Response(500, text="ledger down")
            self.balance += amount
            return httpx.Response(200, json={"score": self.balance})
        return httpx.Response(404)

    def _questions(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        size = int(request.url.params["pageSize"])
        self.fetched_pages.append(page)
        if page in self.failing_pages:
            return httpx.Response(500, text="Internal Error")
        start = (page - 1) * size
        return httpx.Response(200, json={"questions": self.questions[start:start + size]})


class FakeCoins:
    """Stand-in for CoinLedger.coin_delta."""

    def __init__(self):
        self.deltas: list[int] = []
        self.fail_debit = False
        self.fail_credit = False

    async def __call__(self, amount: int) -> None:
        if amount < 0 and self.fail_debit:
            raise CoinDebitError("Failed to update score")
        if amount > 0 and self.fail_credit:
            raise CoinCreditError("Failed to update score")
        self.deltas.append(amount)


class RecordingListener(SessionListener):
    """Collects every session event."""

    def __init__(self):
        self.notices = []
        self.contexts = []
        self.completions = []

    def on_notice(self, notice):
        self.notices.append(notice)

    def on_context(self, context):
        self.contexts.append(context)

    def on_complete(self, stats, reward):
        self.completions.append((stats, reward))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def platform():
    return FakePlatform()


@pytest_asyncio.fixture
async def api(platform):
    """ApiClient wired to the fake platform."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(platform.handle), base_url=BASE_URL)
    api = ApiClient(ApiConfig(base_url=BASE_URL), client=client)
    yield api
    await client.aclose()


@pytest.fixture
def coins():
    return FakeCoins()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def make_session(api, coins, clock, listener):
    """Factory for sessions against the fake platform."""

    def _make(category: str = "Biology", **config) -> QuizSession:
        session_config = SessionConfig(**config)
        source = QuestionSource(api, page_size=session_config.page_size)
        recorder = AnswerRecorder(api)
        session = QuizSession(
            category,
            source,
            recorder,
            coins,
            config=session_config,
            clock=clock,
        )
        session.subscribe(listener)
        return session

    return _make


@pytest.fixture
def raw_question():
    """Factory for raw API question payloads."""
    return make_raw_question
