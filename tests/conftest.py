"""Shared fixtures: seeded random sources, settings and a virtual-clock scheduler."""

from datetime import datetime, timezone

import pytest

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.generators.fakers import build_faker
from apps.datagen.src.infra.record_queue import RecordQueue
from apps.datagen.src.infra.scheduler import ManualScheduler
from apps.datagen.src.tasks.base import EventEmitter

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_settings():
    """Factory for settings with nested overrides, e.g. cancellations={"ratio": 1.0}."""

    def _make(**overrides):
        return DatagenSettings(seed=42, **overrides)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def rng():
    return RandomVariates(1234)


@pytest.fixture
def fake():
    return build_faker(seed=1234)


@pytest.fixture
def scheduler():
    return ManualScheduler(start=NOW)


@pytest.fixture
def queue():
    return RecordQueue()


@pytest.fixture
def emitter(queue, rng):
    return EventEmitter(queue, rng)
