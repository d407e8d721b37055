"""
Shared envelope for every generated record.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from apps.datagen.src.domain.topics import EventTopic
from libs.models.events import DatagenEvent


@dataclass(frozen=True)
class EventRecord:
    """
    One event ready for delivery.

    Attributes:
        topic: Logical destination, resolved to a Kafka topic by the producer.
        key: Record key taken from the payload's key field.
        payload: The event model itself.
        timestamp: Authoritative event time, used for ordering and as the
            Kafka record timestamp.
        origin: Name of the generator or task that produced the record.
    """

    topic: EventTopic
    key: str
    payload: DatagenEvent
    timestamp: datetime
    origin: Optional[str] = None

    @classmethod
    def of(
        cls,
        topic: EventTopic,
        payload: DatagenEvent,
        origin: Optional[str] = None,
    ) -> "EventRecord":
        return cls(
            topic=topic,
            key=payload.record_key,
            payload=payload,
            timestamp=payload.event_time,
            origin=origin,
        )

    @property
    def timestamp_ms(self) -> int:
        return int(self.timestamp.timestamp() * 1000)
