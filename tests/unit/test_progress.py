"""
Unit tests for progress aggregation.
"""

import pytest

from quizsession.core.models import AnswerSummary, ProgressStats
from quizsession.study.progress import aggregate, celebration_for, format_stats


def answer(number: int, correct: bool, seconds: float) -> AnswerSummary:
    return AnswerSummary(
        question_number=number,
        question_id=f"q{number}",
        question_content="?",
        user_answer="x",
        correct_answer="x" if correct else "y",
        is_correct=correct,
        time_spent_seconds=seconds,
    )


class TestAggregate:
    """Tests for aggregate()."""

    def test_empty_is_all_zeros(self):
        stats = aggregate([])

        assert stats == ProgressStats(correct=0, total=0, percentage=0, average_time_seconds=0)
        assert stats.percentage == 0.0
        assert stats.average_time_seconds == 0.0

    def test_counts_and_averages(self):
        stats = aggregate([answer(1, True, 4.0), answer(2, False, 6.0), answer(3, True, 5.0)])

        assert stats.correct == 2
        assert stats.total == 3
        assert stats.percentage == pytest.approx(66.666, abs=0.01)
        assert stats.average_time_seconds == pytest.approx(5.0)
        assert stats.total_time_seconds == pytest.approx(15.0)

    def test_format_stats(self):
        text = format_stats(aggregate([answer(1, True, 2.0), answer(2, False, 4.0)]))

        assert text == "1 of 2 (50.0%) | avg 3.0s"


class TestCelebration:
    """Tests for celebration cues."""

    def test_perfect_is_fanfare(self):
        assert celebration_for(aggregate([answer(1, True, 1.0)])) == "fanfare"

    def test_eighty_percent_levels_up(self):
        results = [answer(i, i != 5, 1.0) for i in range(1, 6)]

        assert celebration_for(aggregate(results)) == "levelup"

    def test_below_eighty_or_empty_is_silent(self):
        assert celebration_for(aggregate([answer(1, True, 1.0), answer(2, False, 1.0)])) is None
        assert celebration_for(aggregate([])) is None
