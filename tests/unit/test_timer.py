"""
Unit tests for the session Timer.
"""

from quizsession.study.timer import Timer


class TestTimer:
    """Tests for Timer start/pause/resume/reset."""

    def test_new_timer_reads_zero(self, clock):
        timer = Timer(clock)
        clock.advance(10)

        assert timer.elapsed() == 0.0
        assert timer.is_running is False

    def test_elapsed_is_computed_on_demand(self, clock):
        timer = Timer(clock)
        timer.start()
        clock.advance(2.5)

        assert timer.elapsed() == 2.5
        clock.advance(1.5)
        assert timer.elapsed() == 4.0

    def test_start_is_idempotent(self, clock):
        timer = Timer(clock)
        timer.start()
        clock.advance(3)
        timer.start()  # must not move the reference point
        clock.advance(2)

        assert timer.elapsed() == 5.0

    def test_pause_and_resume_accumulate(self, clock):
        timer = Timer(clock)
        timer.start()
        clock.advance(4)
        timer.pause()
        clock.advance(100)  # paused time is not counted

        assert timer.elapsed() == 4.0
        assert timer.is_paused is True

        timer.resume()
        clock.advance(1)
        assert timer.elapsed() == 5.0

    def test_start_while_paused_does_not_resume(self, clock):
        timer = Timer(clock)
        timer.start()
        clock.advance(1)
        timer.pause()
        timer.start()
        clock.advance(10)

        assert timer.elapsed() == 1.0

    def test_reset_zeroes_and_stops(self, clock):
        timer = Timer(clock)
        timer.start()
        clock.advance(7)
        timer.reset()

        assert timer.elapsed() == 0.0
        assert timer.is_running is False

        timer.start()
        clock.advance(2)
        assert timer.elapsed() == 2.0

    def test_pause_and_resume_are_noops_when_idle(self, clock):
        timer = Timer(clock)
        timer.pause()
        timer.resume()
        clock.advance(3)

        assert timer.elapsed() == 0.0
        assert timer.is_running is False
