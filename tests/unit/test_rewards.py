"""
Unit tests for reward settlement.
"""

import pytest

from quizsession.core.models import AnswerSummary
from quizsession.study.rewards import RewardTiers, calculate_score, coins_for_score, settle


def summaries(correct: int, total: int) -> list[AnswerSummary]:
    return [
        AnswerSummary(
            question_number=i + 1,
            question_id=f"q{i}",
            question_content=f"Question {i}?",
            user_answer="A" if i < correct else "B",
            correct_answer="A",
            is_correct=i < correct,
            time_spent_seconds=1.0,
        )
        for i in range(total)
    ]


class TestSettle:
    """Score tier scenarios."""

    def test_perfect_score_pays_two(self):
        outcome = settle(summaries(15, 15))

        assert outcome.coins_awarded == 2
        assert outcome.score == 100.0

    def test_passing_score_pays_one(self):
        outcome = settle(summaries(11, 15))

        assert outcome.coins_awarded == 1
        assert outcome.score == pytest.approx(73.33, abs=0.01)

    def test_failing_score_pays_nothing(self):
        outcome = settle(summaries(9, 15))

        assert outcome.coins_awarded == 0
        assert outcome.score == pytest.approx(60.0)

    def test_exactly_seventy_percent_passes(self):
        assert settle(summaries(7, 10)).coins_awarded == 1

    def test_no_answers_pays_nothing(self):
        outcome = settle([])

        assert outcome.coins_awarded == 0
        assert outcome.score == 0.0

    def test_settle_is_pure(self):
        answers = summaries(15, 15)

        assert settle(answers) == settle(answers)


class TestTiers:
    """Tests for custom tier tables."""

    @pytest.mark.parametrize(
        "score,coins",
        [(100.0, 3), (90.0, 1), (89.9, 0)],
    )
    def test_custom_tiers(self, score, coins):
        tiers = RewardTiers(perfect_threshold=100.0, perfect_coins=3, passing_threshold=90.0, passing_coins=1)

        assert coins_for_score(score, tiers) == coins

    def test_calculate_score(self):
        assert calculate_score(summaries(1, 4)) == 25.0
