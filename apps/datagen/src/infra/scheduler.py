"""
Schedulers that fire generation callbacks.

Generators never sleep; anything that happens "later" (a cancellation, the
next click of a session, a review) is a callback handed to a scheduler.

- `TimerScheduler` runs every callback on one worker thread, so generator
  state is only ever touched from that thread.
- `ManualScheduler` keeps a virtual clock that tests advance explicitly.
"""

import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Protocol

from opentelemetry.metrics import Counter

from apps.datagen.src.core.timeutil import utc_now

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


@dataclass(order=True)
class ScheduledCall:
    """Handle for a scheduled callback; ordered by due time, then submission."""

    due: float
    seq: int
    callback: Callback = field(compare=False)
    period: Optional[float] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))


def _next_run(call: ScheduledCall, seq: "itertools.count[int]") -> ScheduledCall:
    # fixed rate: the next run is relative to the planned time, not the actual one
    call.due += call.period
    call.seq = next(seq)
    return call


class Scheduler(Protocol):
    def now(self) -> datetime:
        ...

    def schedule(self, delay_ms: int, callback: Callback) -> ScheduledCall:
        ...

    def schedule_at_fixed_rate(
        self, initial_delay_ms: int, period_ms: int, callback: Callback
    ) -> ScheduledCall:
        ...


class TimerScheduler:
    """
    Single worker thread draining a heap of due callbacks.

    A failing callback is logged and counted; it never stops the worker, and
    a periodic callback keeps its schedule.

    Args:
        name: Worker thread name.
        failures: Optional counter incremented for every failed callback.
    """

    def __init__(self, name: str = "datagen-scheduler", failures: Optional[Counter] = None) -> None:
        self._name = name
        self._failures = failures
        self._heap: List[ScheduledCall] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def now(self) -> datetime:
        return utc_now()

    def _push(self, delay_ms: int, callback: Callback, period_ms: Optional[int] = None) -> ScheduledCall:
        call = ScheduledCall(
            due=time.monotonic() + max(delay_ms, 0) / 1000.0,
            seq=next(self._seq),
            callback=callback,
            period=period_ms / 1000.0 if period_ms else None,
        )
        with self._cond:
            heapq.heappush(self._heap, call)
            self._cond.notify()
        return call

    def schedule(self, delay_ms: int, callback: Callback) -> ScheduledCall:
        return self._push(delay_ms, callback)

    def schedule_at_fixed_rate(
        self, initial_delay_ms: int, period_ms: int, callback: Callback
    ) -> ScheduledCall:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        return self._push(initial_delay_ms, callback, period_ms)

    def start(self) -> None:
        with self._cond:
            if self._running:
                return
            self._running = True
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.info("Scheduler started", extra={"thread": self._name})

    def stop(self, timeout: float = 5.0) -> None:
        with self._cond:
            self._running = False
            self._heap.clear()
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Scheduler stopped", extra={"thread": self._name})

    def pending(self) -> int:
        with self._cond:
            return len(self._heap)

    def _next_due(self) -> Optional[ScheduledCall]:
        with self._cond:
            while self._running:
                if not self._heap:
                    self._cond.wait()
                    continue
                wait = self._heap[0].due - time.monotonic()
                if wait > 0:
                    self._cond.wait(wait)
                    continue
                call = heapq.heappop(self._heap)
                if call.cancelled:
                    continue
                if call.period is not None:
                    heapq.heappush(self._heap, _next_run(call, self._seq))
                return call
        return None

    def _run(self) -> None:
        while True:
            call = self._next_due()
            if call is None:
                return
            try:
                call.callback()
            except Exception:
                logger.exception("Scheduled callback failed", extra={"callback": call.name})
                if self._failures is not None:
                    self._failures.add(1, {"callback": call.name})


class ManualScheduler:
    """
    Scheduler driven by a virtual clock, in whole milliseconds.

    Nothing runs until `advance` is called; callbacks then fire in due order
    with `now()` set to their due time. Exceptions propagate to the caller.
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._origin = start or utc_now()
        self._elapsed_ms = 0
        self._heap: List[ScheduledCall] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self._origin + timedelta(milliseconds=self._elapsed_ms)

    def _push(self, delay_ms: int, callback: Callback, period_ms: Optional[int] = None) -> ScheduledCall:
        call = ScheduledCall(
            due=self._elapsed_ms + max(delay_ms, 0),
            seq=next(self._seq),
            callback=callback,
            period=period_ms or None,
        )
        heapq.heappush(self._heap, call)
        return call

    def schedule(self, delay_ms: int, callback: Callback) -> ScheduledCall:
        return self._push(delay_ms, callback)

    def schedule_at_fixed_rate(
        self, initial_delay_ms: int, period_ms: int, callback: Callback
    ) -> ScheduledCall:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        return self._push(initial_delay_ms, callback, period_ms)

    def pending(self) -> int:
        return len(self._heap)

    def advance(self, ms: int) -> int:
        """
        Move the clock forward by `ms`, firing every callback that falls due.

        Returns:
            Number of callbacks fired.
        """
        target = self._elapsed_ms + ms
        fired = 0
        while self._heap and self._heap[0].due <= target:
            call = heapq.heappop(self._heap)
            if call.cancelled:
                continue
            self._elapsed_ms = int(call.due)
            if call.period is not None:
                heapq.heappush(self._heap, _next_run(call, self._seq))
            call.callback()
            fired += 1
        self._elapsed_ms = target
        return fired
