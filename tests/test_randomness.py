"""Tests for the random-variate helpers and timestamp utilities."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import epoch_day, epoch_millis, format_timestamp


class TestRandomVariates:
    def test_random_int_is_inclusive(self, rng):
        values = {rng.random_int(1, 3) for _ in range(500)}
        assert values == {1, 2, 3}

    def test_random_double_has_one_decimal(self, rng):
        for _ in range(200):
            value = rng.random_double(19.5, 23.5)
            assert 19.5 <= value <= 23.5
            assert round(value, 1) == value

    def test_random_price_has_two_decimals(self, rng):
        for _ in range(200):
            value = rng.random_price(14.99, 59.99)
            assert 14.99 <= value <= 59.99
            assert round(value, 2) == value

    def test_should_do_extremes(self, rng):
        assert not any(rng.should_do(0.0) for _ in range(200))
        assert all(rng.should_do(1.0) for _ in range(200))

    def test_random_item_rejects_empty(self, rng):
        with pytest.raises(IndexError):
            rng.random_item([])

    def test_random_string_uses_alphabet(self, rng):
        value = rng.random_string("ab", 20)
        assert len(value) == 20
        assert set(value) <= {"a", "b"}

    def test_uuid_is_version_4(self, rng):
        assert uuid.UUID(rng.uuid()).version == 4

    def test_seed_makes_draws_reproducible(self):
        first, second = RandomVariates(99), RandomVariates(99)
        assert [first.uuid() for _ in range(5)] == [second.uuid() for _ in range(5)]
        assert first.random_price(1, 10) == second.random_price(1, 10)

    def test_random_offset_never_in_the_future(self, rng, now):
        for _ in range(100):
            shifted = rng.now_with_random_offset(300, now)
            assert now - timedelta(seconds=300) <= shifted <= now

    def test_zero_offset_returns_reference_time(self, rng, now):
        assert rng.now_with_random_offset(0, now) == now


class TestTimeutil:
    def test_format_renders_milliseconds(self):
        ts = datetime(2024, 3, 1, 8, 5, 9, 123456, tzinfo=timezone.utc)
        assert format_timestamp(ts, "%Y-%m-%d %H:%M:%S.%f") == "2024-03-01 08:05:09.123"

    def test_epoch_helpers(self):
        ts = datetime(1970, 1, 2, 0, 0, 1, tzinfo=timezone.utc)
        assert epoch_day(ts) == 1
        assert epoch_millis(ts) == 86_401_000
