"""
Configuration settings for the quiz session engine.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with ``QUIZ_`` (e.g. ``QUIZ_API_BASE_URL``).
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseModel):
    """Connection details for the question, user-test and coin services."""

    base_url: str = "http://localhost:3000"
    api_key: str | None = None
    timeout_seconds: float = 30.0

    # Endpoints
    questions_endpoint: str = "/api/question"
    session_endpoint: str = "/api/user-test"
    response_endpoint: str = "/api/user-test/response"
    coin_endpoint: str = "/api/user-info"


@dataclass(frozen=True)
class SessionConfig:
    """Knobs the session state machine runs with."""

    session_length: int = 15
    page_size: int = 10
    prefetch_distance: int = 3
    entry_cost: int = 1
    shuffle_questions: bool = False
    perfect_score_threshold: float = 100.0
    perfect_score_coins: int = 2
    passing_score_threshold: float = 70.0
    passing_score_coins: int = 1
    response_notes: str = "From Quiz Component"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # External services
    # ========================================
    api_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the learning platform API",
    )
    api_key: str | None = Field(
        default=None,
        description="Bearer token sent with every request",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for HTTP calls",
    )
    questions_endpoint: str = Field(
        default="/api/question",
        description="Paginated question listing",
    )
    session_endpoint: str = Field(
        default="/api/user-test",
        description="Creates a gradeable session record",
    )
    response_endpoint: str = Field(
        default="/api/user-test/response",
        description="Records one answered question",
    )
    coin_endpoint: str = Field(
        default="/api/user-info",
        description="Applies a signed coin delta to the user's balance",
    )
    question_types: list[str] = Field(
        default_factory=lambda: ["normal"],
        description="Question types requested from the question service",
    )

    # ========================================
    # Session
    # ========================================
    session_length: int = Field(
        default=15,
        ge=1,
        description="Questions per session",
    )
    page_size: int = Field(
        default=10,
        ge=1,
        description="Questions requested per page",
    )
    prefetch_distance: int = Field(
        default=3,
        ge=1,
        description="Fetch the next page this many questions before the end of the buffer",
    )
    shuffle_questions: bool = Field(
        default=False,
        description="Shuffle question order within each fetched page",
    )
    response_notes: str = Field(
        default="From Quiz Component",
        description="Notes attached to each recorded response",
    )

    # ========================================
    # Coin economy
    # ========================================
    entry_cost: int = Field(
        default=1,
        ge=0,
        description="Coins debited when a session starts",
    )
    perfect_score_threshold: float = Field(
        default=100.0,
        description="Score (percent) that earns the top reward",
    )
    perfect_score_coins: int = Field(
        default=2,
        description="Coins for a perfect score",
    )
    passing_score_threshold: float = Field(
        default=70.0,
        description="Score (percent) that earns the passing reward",
    )
    passing_score_coins: int = Field(
        default=1,
        description="Coins for a passing score",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def to_api_config(self) -> ApiConfig:
        return ApiConfig(
            base_url=self.api_base_url,
            api_key=self.api_key,
            timeout_seconds=self.request_timeout_seconds,
            questions_endpoint=self.questions_endpoint,
            session_endpoint=self.session_endpoint,
            response_endpoint=self.response_endpoint,
            coin_endpoint=self.coin_endpoint,
        )

    def to_session_config(self) -> SessionConfig:
        return SessionConfig(
            session_length=self.session_length,
            page_size=self.page_size,
            prefetch_distance=self.prefetch_distance,
            entry_cost=self.entry_cost,
            shuffle_questions=self.shuffle_questions,
            perfect_score_threshold=self.perfect_score_threshold,
            perfect_score_coins=self.perfect_score_coins,
            passing_score_threshold=self.passing_score_threshold,
            passing_score_coins=self.passing_score_coins,
            response_notes=self.response_notes,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Install loguru sinks. Only entry points call this."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="10 MB", retention=5)
