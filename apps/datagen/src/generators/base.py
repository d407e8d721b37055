"""
Shared behaviour for all event generators.

A generator turns a timestamp (plus settings and random draws) into one
event. Periodic generators can also replay themselves over the history
window at a fixed cadence.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Generic, List, Optional, TypeVar

from faker import Faker

from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import HISTORY_WINDOW, format_timestamp, utc_now

E = TypeVar("E")

Clock = Callable[[], datetime]


class EventGenerator:
    """
    Base for generators that need timestamps, duplicates and random draws.

    Args:
        rng: Shared random-variate source.
        fake: Shared Faker instance.
        max_delay_secs: Upper bound of the simulated publish delay.
        duplicates_ratio: Share of events emitted twice.
        timestamp_format: strftime pattern for payload timestamps.
        clock: Source of the current time.
    """

    def __init__(
        self,
        *,
        rng: RandomVariates,
        fake: Faker,
        max_delay_secs: int = 0,
        duplicates_ratio: float = 0.0,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S.%f",
        clock: Clock = utc_now,
    ) -> None:
        self.rng = rng
        self.fake = fake
        self.max_delay_secs = max_delay_secs
        self.duplicates_ratio = duplicates_ratio
        self.timestamp_format = timestamp_format
        self.clock = clock

    def now(self) -> datetime:
        """Current time shifted back by a random publish delay."""
        return self.rng.now_with_random_offset(self.max_delay_secs, self.clock())

    def should_duplicate(self) -> bool:
        return self.rng.should_do(self.duplicates_ratio)

    def append_with_duplicate(self, events: List[E], event: E) -> None:
        """Append `event`, and append it again when a duplicate is drawn."""
        events.append(event)
        if self.should_duplicate():
            events.append(event)

    def format_timestamp(self, ts: datetime) -> str:
        return format_timestamp(ts, self.timestamp_format)


class PeriodicGenerator(EventGenerator, ABC, Generic[E]):
    """
    Generator emitting one event per `interval_ms`.

    Subclasses implement `generate_event`; live generation and history
    replay are derived from it.
    """

    def __init__(self, *, interval_ms: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.interval_ms = interval_ms

    @abstractmethod
    def generate_event(self, timestamp: datetime) -> E:
        """Produce one event for `timestamp`."""

    def generate(self) -> E:
        return self.generate_event(self.now())

    def generate_history(self, now: Optional[datetime] = None) -> List[E]:
        """
        Replay the generator over the history window.

        Starts at `now - 7 days` and steps by `interval_ms` until the cursor
        reaches `now`. Duplicates follow their original immediately.
        A non-positive interval yields no history.
        """
        if self.interval_ms <= 0:
            return []

        now = now or self.clock()
        step = timedelta(milliseconds=self.interval_ms)
        timestamp = now - HISTORY_WINDOW

        history: List[E] = []
        while timestamp < now:
            self.append_with_duplicate(history, self.generate_event(timestamp))
            timestamp += step
        return history
