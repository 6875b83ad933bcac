"""
Reward settlement for completed quiz sessions.

Maps the final score percentage to a coin tier:

    score >= 100  -> 2 coins
    score >= 70   -> 1 coin
    otherwise     -> 0 coins

settle() is pure. Crediting the coins exactly once is the session's job
(guarded by its reward_issued flag); recomputing an outcome is harmless.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from quizsession.core.models import AnswerSummary, RewardOutcome


@dataclass(frozen=True)
class RewardTiers:
    """Score thresholds (percent) and the coins they pay."""

    perfect_threshold: float = 100.0
    perfect_coins: int = 2
    passing_threshold: float = 70.0
    passing_coins: int = 1


DEFAULT_TIERS = RewardTiers()


def calculate_score(summaries: Sequence[AnswerSummary]) -> float:
    """Percentage of correct answers; 0.0 when nothing was answered."""
    if not summaries:
        return 0.0
    correct = sum(1 for s in summaries if s.is_correct)
    return correct / len(summaries) * 100


def coins_for_score(score: float, tiers: RewardTiers = DEFAULT_TIERS) -> int:
    if score >= tiers.perfect_threshold:
        return tiers.perfect_coins
    if score >= tiers.passing_threshold:
        return tiers.passing_coins
    return 0


def settle(
    summaries: Sequence[AnswerSummary],
    tiers: RewardTiers = DEFAULT_TIERS,
) -> RewardOutcome:
    """Compute the reward for a finished session."""
    score = calculate_score(summaries)
    return RewardOutcome(coins_awarded=coins_for_score(score, tiers), score=score)
