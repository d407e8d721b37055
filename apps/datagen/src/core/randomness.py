"""
Random-variate helpers shared by every generator.

A single `RandomVariates` instance wraps one `random.Random`, so seeding it
makes the whole engine reproducible.
"""

import random
import uuid
from datetime import datetime, timedelta
from typing import Optional, Sequence, TypeVar

from apps.datagen.src.core.timeutil import utc_now

_T = TypeVar("_T")


class RandomVariates:
    """
    Random draws used to shape generated events.

    Prices and decimal values are skewed towards the centre of their range
    (mean of three uniform draws) so they look less synthetic.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed) if seed is not None else random.Random()

    @property
    def rng(self) -> random.Random:
        return self._rng

    def _centred(self) -> float:
        return (self._rng.random() + self._rng.random() + self._rng.random()) / 3.0

    def random_int(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return self._rng.randint(low, high)

    def random_double(self, low: float, high: float, skewed: bool = True) -> float:
        """Value in [low, high] rounded to one decimal place."""
        r = self._centred() if skewed else self._rng.random()
        return round(low + (high - low) * r, 1)

    def random_price(self, low: float, high: float) -> float:
        """Value in [low, high] rounded to two decimal places."""
        return round(low + (high - low) * self._centred(), 2)

    def should_do(self, ratio: float) -> bool:
        """True with probability `ratio`; 0 never fires and 1 always does."""
        return self._rng.random() < ratio

    def random_item(self, items: Sequence[_T]) -> _T:
        """
        Uniform pick from a non-empty sequence.

        Raises:
            IndexError: if `items` is empty.
        """
        return self._rng.choice(items)

    def random_boolean(self) -> bool:
        return self._rng.random() < 0.5

    def random_string(self, chars: str, length: int) -> str:
        return "".join(self._rng.choice(chars) for _ in range(length))

    def uniform(self) -> float:
        """Float in [0, 1)."""
        return self._rng.random()

    def uuid(self) -> str:
        """Random (version 4) UUID drawn from the seeded generator."""
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def now_with_random_offset(self, max_offset_secs: int, now: Optional[datetime] = None) -> datetime:
        """
        Current time minus a random delay, to simulate late-arriving events.

        Args:
            max_offset_secs: Upper bound of the delay; 0 returns `now` as-is.
            now: Reference time, defaults to the wall clock.
        """
        now = now or utc_now()
        if max_offset_secs == 0:
            return now
        return now - timedelta(seconds=self.random_int(0, max_offset_secs))
