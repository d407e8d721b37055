"""
Building blocks for live generation tasks.

A task is a callable the scheduler fires every `interval_ms`. It emits records
through an `EventEmitter` and hands follow-ups (cancellations, reviews, the
next click of a session) back to the scheduler.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.domain.models import DatagenEvent
from apps.datagen.src.domain.records import EventRecord
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.base import PeriodicGenerator
from apps.datagen.src.infra.record_queue import RecordQueue
from apps.datagen.src.infra.scheduler import Scheduler

logger = logging.getLogger(__name__)


class EventEmitter:
    """Wraps payloads into records and queues them, duplicating some."""

    def __init__(self, queue: RecordQueue, rng: RandomVariates) -> None:
        self._queue = queue
        self._rng = rng

    def emit(
        self,
        topic: EventTopic,
        payload: DatagenEvent,
        duplicates_ratio: float = 0.0,
        origin: str = "",
    ) -> EventRecord:
        record = EventRecord.of(topic, payload, origin or None)
        self._queue.enqueue(record)
        if self._rng.should_do(duplicates_ratio):
            # the duplicate is the very same record, queued right after it
            self._queue.enqueue(record)
        return record


class Task(ABC):
    """
    Args:
        interval_ms: Period between runs; 0 disables the task.
        emitter: Destination of the generated records.
        scheduler: Used for delayed follow-ups.
    """

    name: str = "task"

    def __init__(self, interval_ms: int, emitter: EventEmitter, scheduler: Scheduler) -> None:
        self.interval_ms = interval_ms
        self.emitter = emitter
        self.scheduler = scheduler

    @property
    def enabled(self) -> bool:
        return self.interval_ms > 0

    @abstractmethod
    def run(self) -> None:
        """Generate one round of events."""

    def __call__(self) -> None:
        self.run()

    def emit(self, topic: EventTopic, payload: DatagenEvent, duplicates_ratio: float = 0.0) -> EventRecord:
        return self.emitter.emit(topic, payload, duplicates_ratio, origin=self.name)

    def later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.scheduler.schedule(delay_ms, callback)


class PeriodicTask(Task):
    """Emits one event of a periodic generator per run."""

    def __init__(
        self,
        name: str,
        generator: PeriodicGenerator,
        topic: EventTopic,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(generator.interval_ms, emitter, scheduler)
        self.name = name
        self.generator = generator
        self.topic = topic

    def run(self) -> None:
        self.emit(self.topic, self.generator.generate(), self.generator.duplicates_ratio)
