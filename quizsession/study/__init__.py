"""
Study Module for quiz sessions.

Provides:
- Quiz session state machine (QuizSession)
- Timers for per-question and whole-session timing
- Option shuffling
- Reward settlement and progress aggregation
"""

from quizsession.study.progress import aggregate
from quizsession.study.rewards import RewardTiers, settle
from quizsession.study.session import (
    Display,
    QuizSession,
    SessionListener,
    SessionState,
    SessionStatus,
)
from quizsession.study.shuffler import shuffle_options
from quizsession.study.timer import Timer

__all__ = [
    "QuizSession",
    "SessionState",
    "SessionStatus",
    "SessionListener",
    "Display",
    "Timer",
    "shuffle_options",
    "settle",
    "RewardTiers",
    "aggregate",
]
