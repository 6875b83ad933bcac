"""
Answer Recorder: persists answered questions to the grading service.

A session record is created lazily on the first recorded answer, so
abandoned sessions leave nothing behind. Concurrent ensure_session()
calls share one in-flight creation task (single flight), which keeps the
service at one record per session instance even under rapid
double-submission.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
from loguru import logger

from quizsession.core.errors import PersistError
from quizsession.integrations.api_client import ApiClient


class AnswerRecorder:
    """Creates the session record and writes one response per answer."""

    def __init__(self, api: ApiClient, notes: str = "From Quiz Component"):
        self.api = api
        self.notes = notes
        self._record_id: str | None = None
        self._pending: asyncio.Task[str] | None = None

    @property
    def session_record_id(self) -> str | None:
        return self._record_id

    async def ensure_session(self, category_id: str) -> str:
        """
        Return the session record id, creating the record on first use.

        Raises:
            PersistError: If the record could not be created. The next
                call will try again.
        """
        if self._record_id is not None:
            return self._record_id

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._create_session(category_id))
        task = self._pending

        try:
            record_id = await asyncio.shield(task)
        except asyncio.CancelledError:
            # Only a reset() cancels the shared task; our own cancellation propagates
            if not task.cancelled():
                raise
            raise PersistError("Session record creation was cancelled")
        except PersistError:
            if self._pending is task:
                self._pending = None
            raise

        if self._pending is task:
            self._record_id = record_id
        return record_id

    async def _create_session(self, category_id: str) -> str:
        try:
            response = await self.api.request(
                "POST",
                self.api.config.session_endpoint,
                json={"testId": category_id, "categoryId": category_id},
            )
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Failed to create session record for {}: {}", category_id, e)
            raise PersistError("Failed to create test session", cause=e) from e
        except ValueError as e:
            raise PersistError("Session service returned an invalid body", cause=e) from e

        record_id = data.get("id") if isinstance(data, dict) else None
        if not record_id:
            raise PersistError("Session service response did not include an id")

        logger.info("Created session record {} for category {}", record_id, category_id)
        return str(record_id)

    async def record_answer(
        self,
        session_record_id: str,
        question_id: str,
        user_answer: str,
        is_correct: bool,
        time_spent: float,
    ) -> None:
        """
        Persist one answer.

        Raises:
            PersistError: On network failure or non-2xx response
        """
        payload: dict[str, Any] = {
            "userTestId": session_record_id,
            "questionId": question_id,
            "userAnswer": user_answer,
            "isCorrect": is_correct,
            "timeSpent": time_spent,
            "userNotes": self.notes,
        }
        try:
            await self.api.request("POST", self.api.config.response_endpoint, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Failed to save response for question {}: {}", question_id, e)
            raise PersistError("Failed to save your answer", cause=e) from e

    async def reset(self) -> None:
        """Forget the record and cancel an in-flight creation."""
        task, self._pending = self._pending, None
        self._record_id = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                logger.debug("Discarded session record creation failed: {}", task.exception())
