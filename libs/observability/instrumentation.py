"""
Observability bootstrap utilities for logging, tracing, and metrics.

This module provides:
- a unified initialization entrypoint (`init_observability`)
- stable metric instruments for the Kafka producer and the generation engine
"""

import logging
from typing import NamedTuple, Optional

from opentelemetry.metrics import Counter, Histogram

from libs.config import OTELConfig
from libs.observability.logging import init_logging
from libs.observability.metrics import get_meter, init_metrics
from libs.observability.tracing import init_tracing


class ProducerInstruments(NamedTuple):
    produced: Counter
    failures: Counter
    latency: Histogram


class GenerationInstruments(NamedTuple):
    generated: Counter
    task_failures: Counter


def init_observability(level: int = logging.INFO, cfg: Optional[OTELConfig] = None) -> None:
    """
    Initialize logging, tracing, and metrics for the current service.

    Call once during service startup.

    Args:
        level: Logging verbosity level for the root logger.
        cfg: OTEL settings; defaults are used when omitted.
    """
    cfg = cfg or OTELConfig()
    init_logging(level=level, cfg=cfg)
    init_tracing(cfg)
    init_metrics(cfg)


def get_producer_instruments() -> ProducerInstruments:
    """
    Create OpenTelemetry instruments for the Kafka producer.

    Returns:
        produced: Counter for records handed to Kafka.
        failures: Counter for produce calls or deliveries that failed.
        latency: Histogram of produce call latency (ms).
    """
    meter = get_meter()

    return ProducerInstruments(
        produced=meter.create_counter(
            name="datagen_events_produced",
            description="Count of records handed to the Kafka producer",
            unit="1",
        ),
        failures=meter.create_counter(
            name="datagen_events_failed",
            description="Count of failed produce attempts or deliveries",
            unit="1",
        ),
        latency=meter.create_histogram(
            name="datagen_produce_latency_ms",
            description="Kafka produce call latency in milliseconds",
            unit="ms",
        ),
    )


def get_generation_instruments() -> GenerationInstruments:
    """
    Create OpenTelemetry instruments for the generation engine.

    Returns:
        generated: Counter of records enqueued, tagged by topic.
        task_failures: Counter of scheduled callbacks that raised.
    """
    meter = get_meter()

    return GenerationInstruments(
        generated=meter.create_counter(
            name="datagen_events_generated",
            description="Count of generated records, by topic",
            unit="1",
        ),
        task_failures=meter.create_counter(
            name="datagen_task_failures",
            description="Count of scheduled generation callbacks that raised",
            unit="1",
        ),
    )
