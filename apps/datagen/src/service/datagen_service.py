"""
Long-running datagen service.

Responsibilities:
- Ensure topics and schemas exist and build the producer (with retry)
- Backfill the history window on the very first start
- Run the live generation tasks on the scheduler thread
- Deliver generated records to Kafka from the main loop
"""

from __future__ import annotations

import logging
import signal
import time
from typing import Callable, List, Optional

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.infra.offsets import has_prior_run_evidence
from apps.datagen.src.infra.producer import KafkaEventProducer
from apps.datagen.src.infra.record_queue import RecordQueue
from apps.datagen.src.infra.scheduler import TimerScheduler
from apps.datagen.src.infra.schema_registry import build_schema_registry_client, register_schemas
from apps.datagen.src.infra.topics import ensure_topics
from apps.datagen.src.service.history import HistoryBackfill
from apps.datagen.src.tasks.base import Task
from libs.config import AppConfig
from libs.observability.tracing import get_tracer


class DatagenService:
    """
    Generates and delivers the synthetic event streams.

    Generation happens on the scheduler's worker thread and only ever
    enqueues records; delivery happens on the calling thread, which drains
    the queue every `poll_interval_sec`.
    """

    def __init__(
        self,
        app_config: AppConfig,
        settings: DatagenSettings,
        scheduler: TimerScheduler,
        queue: RecordQueue,
        tasks: List[Task],
        backfill: HistoryBackfill,
        producer_factory: Callable[[], KafkaEventProducer],
        logger: logging.Logger,
    ) -> None:
        """
        Args:
            app_config: Global configuration (Kafka, OTEL, service).
            settings: Generation settings.
            scheduler: Runs the live tasks.
            queue: Records generated by the tasks, waiting for delivery.
            tasks: Live tasks; disabled ones are never scheduled.
            backfill: History generator for the first start.
            producer_factory: Builds the Kafka producer once Kafka is reachable.
            logger: Logger instance.
        """
        self._app_cfg = app_config
        self._cfg = settings
        self._scheduler = scheduler
        self._queue = queue
        self._tasks = tasks
        self._backfill = backfill
        self._producer_factory = producer_factory
        self._log = logger

        self._tracer = get_tracer("loosehanger-datagen-service")
        self._producer: Optional[KafkaEventProducer] = None

        self._running: bool = True
        signal.signal(signal.SIGINT, self._stop)
        signal.signal(signal.SIGTERM, self._stop)

    def _stop(self, *_: object) -> None:
        """
        Signal handler; the main loop exits after its current iteration.
        """
        self._log.info("Shutdown signal received. Stopping datagen service.")
        self._running = False

    def _prepare_kafka(self) -> None:
        """
        Ensure:
        - every datagen topic exists
        - every topic's value schema is registered
        - a producer is ready
        """
        with self._tracer.start_as_current_span("prepare_kafka"):
            topic_names = self._cfg.topics.all_names()
            ensure_topics(self._app_cfg.kafka, topic_names)
            register_schemas(build_schema_registry_client(self._app_cfg.kafka), self._cfg.topics)
            self._producer = self._producer_factory()
            self._log.info("Kafka topics, schemas and producer ready.", extra={"topics": topic_names})

    def _startup_with_retry(self) -> None:
        """
        Startup phase with simple exponential backoff.

        Retries Kafka preparation until success or the service is stopped.
        """
        attempt = 0
        while self._running:
            try:
                self._prepare_kafka()
                return
            except Exception as exc:  # noqa: BLE001
                wait_sec = min(60.0, 5.0 * (2**attempt))
                self._log.exception(
                    "Failed to prepare Kafka during startup.",
                    extra={
                        "attempt": attempt + 1,
                        "wait_sec": wait_sec,
                        "error": str(exc),
                    },
                )
                time.sleep(wait_sec)
                attempt += 1

    def _backfill_history(self, producer: KafkaEventProducer) -> None:
        if not self._cfg.history.enabled:
            self._log.info("History backfill disabled.")
            return
        if has_prior_run_evidence(self._app_cfg.kafka, self._cfg.topics.all_names()):
            return

        records = self._backfill.generate()
        accepted = producer.produce_all(records)
        remaining = producer.flush(timeout=60)
        self._log.info(
            "History backfill delivered.",
            extra={"records": len(records), "accepted": accepted, "remaining": remaining},
        )

    def _schedule_tasks(self) -> None:
        enabled = [task for task in self._tasks if task.enabled]
        for task in enabled:
            self._scheduler.schedule_at_fixed_rate(task.interval_ms, task.interval_ms, task)
        self._log.info(
            "Scheduled generation tasks.",
            extra={
                "tasks": {task.name: task.interval_ms for task in enabled},
                "disabled": [task.name for task in self._tasks if not task.enabled],
            },
        )

    def _deliver(self, producer: KafkaEventProducer) -> int:
        records = self._queue.drain()
        if not records:
            producer.poll(0)
            return 0
        return producer.produce_all(records)

    def run(self) -> None:
        """
        Main loop.

        - Prepares Kafka on startup (with retry).
        - Backfills history when no previous run left data behind.
        - Starts the live tasks and delivers their records until stopped.
        """
        self._log.info(
            "Datagen service started.",
            extra={
                "bootstrap_servers": self._app_cfg.kafka.bootstrap_servers,
                "seed": self._cfg.seed,
            },
        )

        self._startup_with_retry()
        producer = self._producer
        if producer is None:
            return

        self._backfill_history(producer)

        self._schedule_tasks()
        self._scheduler.start()

        try:
            while self._running:
                try:
                    self._deliver(producer)
                except Exception as exc:  # noqa: BLE001
                    self._log.exception(
                        "Unexpected error while delivering records.",
                        extra={"error": str(exc)},
                    )
                time.sleep(self._cfg.poll_interval_sec)
        finally:
            self._scheduler.stop()
            delivered = self._deliver(producer)
            remaining = producer.flush()
            self._log.info(
                "Datagen service stopped.",
                extra={"final_batch": delivered, "remaining": remaining},
            )
