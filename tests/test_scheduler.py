"""Tests for the manual and threaded schedulers."""

import threading
from datetime import timedelta

import pytest

from apps.datagen.src.infra.scheduler import TimerScheduler


class RecordingCounter:
    def __init__(self):
        self.calls = []

    def add(self, amount, attributes=None):
        self.calls.append((amount, attributes))


class TestManualScheduler:
    def test_fires_in_due_order(self, scheduler):
        fired = []
        scheduler.schedule(300, lambda: fired.append("c"))
        scheduler.schedule(100, lambda: fired.append("a"))
        scheduler.schedule(100, lambda: fired.append("b"))

        assert scheduler.advance(250) == 2
        assert fired == ["a", "b"]
        assert scheduler.advance(50) == 1
        assert fired == ["a", "b", "c"]

    def test_now_follows_callbacks(self, scheduler, now):
        seen = []
        scheduler.schedule(1_500, lambda: seen.append(scheduler.now()))

        scheduler.advance(10_000)
        assert seen == [now + timedelta(milliseconds=1_500)]
        assert scheduler.now() == now + timedelta(seconds=10)

    def test_fixed_rate(self, scheduler):
        fired = []
        scheduler.schedule_at_fixed_rate(1_000, 1_000, lambda: fired.append(scheduler.now()))

        assert scheduler.advance(3_500) == 3
        assert [b - a for a, b in zip(fired, fired[1:])] == [timedelta(seconds=1)] * 2

    def test_follow_up_scheduled_by_callback(self, scheduler):
        fired = []
        scheduler.schedule(100, lambda: scheduler.schedule(100, lambda: fired.append("late")))

        scheduler.advance(200)
        assert fired == ["late"]

    def test_cancelled_periodic_stops(self, scheduler):
        fired = []
        handle = scheduler.schedule_at_fixed_rate(100, 100, lambda: fired.append(1))

        scheduler.advance(250)
        handle.cancel()
        scheduler.advance(1_000)
        assert fired == [1, 1]

    def test_period_must_be_positive(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.schedule_at_fixed_rate(0, 0, lambda: None)


class TestTimerScheduler:
    def test_failing_callback_is_counted_and_worker_survives(self):
        failures = RecordingCounter()
        scheduler = TimerScheduler(name="test-scheduler", failures=failures)
        done = threading.Event()

        def boom():
            raise RuntimeError("boom")

        scheduler.start()
        try:
            scheduler.schedule(0, boom)
            scheduler.schedule(20, done.set)
            assert done.wait(5)
        finally:
            scheduler.stop()

        assert len(failures.calls) == 1
        assert failures.calls[0][0] == 1

    def test_periodic_callback_repeats(self):
        scheduler = TimerScheduler(name="test-periodic")
        runs = []
        enough = threading.Event()

        def tick():
            runs.append(1)
            if len(runs) >= 3:
                enough.set()

        scheduler.start()
        try:
            scheduler.schedule_at_fixed_rate(0, 10, tick)
            assert enough.wait(5)
        finally:
            scheduler.stop()
        assert scheduler.pending() == 0
