"""
Shared HTTP client for the learning platform API.

Owns one httpx.AsyncClient (created lazily) that the question source,
answer recorder and coin ledger share. A pre-built client can be injected,
which is how tests plug in an ``httpx.MockTransport``.

Usage:
    async with ApiClient(settings.to_api_config()) as api:
        source = QuestionSource(api)
        page = await source.fetch_page("Biology", 1)
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from quizsession.config import ApiConfig


class ApiClient:
    """Thin wrapper around httpx.AsyncClient with auth headers applied."""

    def __init__(self, config: ApiConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "ApiClient":
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"

            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._ensure_client()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and raise for non-2xx responses.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            httpx.RequestError: On connection/timeout failure
        """
        response = await self.client.request(method, path, **kwargs)
        logger.debug("{} {} -> {}", method, path, response.status_code)
        response.raise_for_status()
        return response
