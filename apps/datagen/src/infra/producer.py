"""
Kafka producer for generated datagen records.
"""

import logging
import time
from typing import Any, Iterable, Optional

from confluent_kafka import SerializingProducer
from confluent_kafka.serialization import StringSerializer

from apps.datagen.src.core.config import TopicSettings
from apps.datagen.src.domain.records import EventRecord
from apps.datagen.src.infra.serializers import TopicValueSerializer
from libs.config import KafkaConfig
from libs.observability.instrumentation import get_producer_instruments
from libs.observability.tracing import get_tracer


class KafkaEventProducer:
    """
    Produces `EventRecord`s to their configured Kafka topics.

    Responsibilities:
    - Resolve each record's topic hint into a topic name.
    - Serialize keys as UTF-8 strings and values with the per-topic JSON
      Schema serializer.
    - Count produced/failed records and record produce latency.

    Produce errors are logged and counted, never raised to the caller.
    """

    def __init__(
        self,
        cfg: KafkaConfig,
        topics: TopicSettings,
        value_serializer: TopicValueSerializer,
    ) -> None:
        self.log = logging.getLogger("KafkaEventProducer")
        self._topics = topics
        self._tracer = get_tracer("loosehanger-datagen-producer")

        # OTel metrics instruments (counters + histogram)
        self._produced, self._failures, self._latency = get_producer_instruments()

        self._producer = SerializingProducer(
            {
                "bootstrap.servers": cfg.bootstrap_servers,
                "client.id": cfg.client_id,
                "key.serializer": StringSerializer("utf_8"),
                "value.serializer": value_serializer,
                "compression.type": "lz4",
                "linger.ms": 50,
                "batch.size": 32768,
            }
        )

    def _on_delivery(self, err: Optional[Any], msg: Any) -> None:
        if err is not None:
            self._failures.add(1, {"stage": "delivery"})
            self.log.error(
                "Delivery failed",
                extra={"error": str(err), "topic": msg.topic() if msg is not None else None},
            )

    def produce(self, record: EventRecord) -> bool:
        """
        Hand one record to Kafka.

        Returns:
            True if the record was accepted by the client, False otherwise.
        """
        topic = self._topics.name_for(record.topic)
        start = time.perf_counter()

        with self._tracer.start_as_current_span("produce_event") as span:
            span.set_attribute("messaging.destination.name", topic)
            span.set_attribute("messaging.kafka.message.key", record.key)
            try:
                try:
                    self._send(topic, record)
                except BufferError:
                    # local queue full: serve delivery reports, then retry once
                    self._producer.poll(1)
                    self._send(topic, record)
                self._produced.add(1, {"topic": topic})
                return True
            except Exception as exc:
                self.log.error(
                    "Produce error",
                    extra={"error": str(exc), "topic": topic, "key": record.key},
                )
                self._failures.add(1, {"stage": "produce", "topic": topic})
                return False
            finally:
                latency_ms = (time.perf_counter() - start) * 1000
                self._latency.record(latency_ms)

    def _send(self, topic: str, record: EventRecord) -> None:
        self._producer.produce(
            topic=topic,
            key=record.key,
            value=record.payload,
            timestamp=record.timestamp_ms,
            on_delivery=self._on_delivery,
        )

    def produce_all(self, records: Iterable[EventRecord]) -> int:
        """Produce records in order; returns how many were accepted."""
        accepted = 0
        for record in records:
            if self.produce(record):
                accepted += 1
            # Trigger delivery report callbacks
            self._producer.poll(0)
        return accepted

    def poll(self, timeout: float = 0) -> None:
        self._producer.poll(timeout)

    def flush(self, timeout: float = 10) -> int:
        """
        Wait for outstanding deliveries.

        Returns:
            Number of messages still queued after the timeout.
        """
        try:
            remaining = self._producer.flush(timeout)
        except Exception:
            self.log.exception("Error during producer flush")
            return -1
        if remaining:
            self.log.warning("Messages still queued after flush", extra={"remaining": remaining})
        return remaining
