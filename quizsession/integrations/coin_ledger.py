"""
Coin ledger: applies signed coin deltas to the user's balance.

Negative deltas are entry costs (debits); positive deltas are rewards
(credits). The session engine depends only on the ``CoinDelta`` callable,
so any async function with the same signature can stand in for this class.
"""

from __future__ import annotations

from typing import Awaitable, Callable

import httpx
from loguru import logger

from quizsession.core.errors import CoinCreditError, CoinDebitError, QuizSessionError
from quizsession.integrations.api_client import ApiClient

CoinDelta = Callable[[int], Awaitable[None]]


class CoinLedger:
    """HTTP-backed coin balance."""

    def __init__(self, api: ApiClient):
        self.api = api
        self.balance: int | None = None

    async def refresh(self) -> int | None:
        """Fetch the current balance (None when the service omits it)."""
        try:
            response = await self.api.request("GET", self.api.config.coin_endpoint)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to load coin balance: {}", e)
            raise QuizSessionError("Failed to load coin balance", cause=e) from e
        if isinstance(data, dict) and data.get("score") is not None:
            self.balance = int(data["score"])
        return self.balance

    async def coin_delta(self, amount: int) -> None:
        """
        Apply ``amount`` to the balance.

        Raises:
            CoinDebitError: If a negative delta fails
            CoinCreditError: If a positive delta fails
        """
        if amount == 0:
            return

        error_cls = CoinDebitError if amount < 0 else CoinCreditError
        try:
            response = await self.api.request(
                "PUT", self.api.config.coin_endpoint, json={"amount": amount}
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Coin delta {} failed: {}", amount, e)
            raise error_cls("Failed to update score", cause=e) from e

        if isinstance(data, dict) and data.get("score") is not None:
            self.balance = int(data["score"])
        logger.info("Applied coin delta {} (balance: {})", amount, self.balance)

    async def __call__(self, amount: int) -> None:
        await self.coin_delta(amount)
