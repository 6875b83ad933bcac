"""
Progress reporting for quiz sessions.

Aggregates answer summaries into the numbers shown on the progress panel
and the end-of-session summary:
- correct / total answered
- accuracy percentage
- average and total time per question
"""

from __future__ import annotations

from typing import Sequence

from quizsession.core.models import AnswerSummary, ProgressStats

FANFARE_PERCENTAGE = 100.0
LEVELUP_PERCENTAGE = 80.0


def aggregate(summaries: Sequence[AnswerSummary]) -> ProgressStats:
    """
    Summarise answered questions.

    Total function: an empty sequence yields all zeros rather than NaN.
    """
    total = len(summaries)
    if total == 0:
        return ProgressStats()

    correct = sum(1 for s in summaries if s.is_correct)
    total_time = sum(s.time_spent_seconds for s in summaries)
    return ProgressStats(
        correct=correct,
        total=total,
        percentage=correct / total * 100,
        average_time_seconds=total_time / total,
        total_time_seconds=total_time,
    )


def format_stats(stats: ProgressStats) -> str:
    """One-line rendering, e.g. '11 of 15 (73.3%) | avg 12.4s'."""
    return (
        f"{stats.correct} of {stats.total} ({stats.percentage:.1f}%)"
        f" | avg {stats.average_time_seconds:.1f}s"
    )


def celebration_for(stats: ProgressStats) -> str | None:
    """Cue to play for a score: 'fanfare' for perfect, 'levelup' for >= 80%."""
    if stats.total == 0:
        return None
    if stats.percentage >= FANFARE_PERCENTAGE:
        return "fanfare"
    if stats.percentage >= LEVELUP_PERCENTAGE:
        return "levelup"
    return None
