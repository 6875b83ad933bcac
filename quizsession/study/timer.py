"""
Elapsed-time source for quiz sessions.

A Timer never ticks: elapsed time is computed on demand from the time
accumulated across pauses plus, while running, the delta since the last
start/resume. The clock is injectable so tests can drive it by hand.
"""

from __future__ import annotations

import time
from typing import Callable


class Timer:
    """Restartable, pausable stopwatch."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._accumulated = 0.0
        self._started_at: float | None = None
        self._paused = False

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    @property
    def is_paused(self) -> bool:
        return self._paused

    def start(self) -> None:
        """Start the clock. No-op while already running or paused."""
        if self._started_at is not None or self._paused:
            return
        self._started_at = self._clock()

    def reset(self) -> None:
        """Zero elapsed time and stop. The next start() begins from 0."""
        self._accumulated = 0.0
        self._started_at = None
        self._paused = False

    def pause(self) -> None:
        if self._started_at is None:
            return
        self._accumulated += self._clock() - self._started_at
        self._started_at = None
        self._paused = True

    def resume(self) -> None:
        if not self._paused:
            return
        self._paused = False
        self._started_at = self._clock()

    def elapsed(self) -> float:
        """Elapsed seconds, including the running segment if any."""
        if self._started_at is None:
            return self._accumulated
        return self._accumulated + (self._clock() - self._started_at)
