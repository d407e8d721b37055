"""
Entrypoint for the datagen service.
"""

import logging

from apps.datagen.src.core.bootstrap import (
    build_generators,
    build_producer,
    build_random_sources,
    build_size_issue_products,
    build_tasks,
)
from apps.datagen.src.core.config import get_datagen_settings
from apps.datagen.src.infra.record_queue import RecordQueue
from apps.datagen.src.infra.scheduler import TimerScheduler
from apps.datagen.src.service.datagen_service import DatagenService
from apps.datagen.src.service.history import HistoryBackfill
from apps.datagen.src.tasks.base import EventEmitter
from libs.config import AppConfig
from libs.observability import get_generation_instruments, get_logger, init_observability


def build_service(app_config: AppConfig) -> DatagenService:
    """
    Wire settings, generators, tasks and delivery into a runnable service.
    """
    settings = get_datagen_settings()
    rng, fake = build_random_sources(settings)
    size_issue_products = build_size_issue_products(settings, rng)

    generated, task_failures = get_generation_instruments()
    queue = RecordQueue(generated=generated)
    scheduler = TimerScheduler(failures=task_failures)

    generators = build_generators(settings, rng, fake, size_issue_products, clock=scheduler.now)
    tasks = build_tasks(generators, settings, EventEmitter(queue, rng), scheduler)

    return DatagenService(
        app_config=app_config,
        settings=settings,
        scheduler=scheduler,
        queue=queue,
        tasks=tasks,
        backfill=HistoryBackfill(settings, rng, fake, size_issue_products),
        producer_factory=lambda: build_producer(app_config, settings),
        logger=get_logger("DatagenService"),
    )


def main() -> None:
    """
    Main entrypoint for the datagen service.
    Initializes observability and runs generation until stopped.
    """
    app_config = AppConfig.load()
    level = logging.getLevelName(app_config.service.log_level.upper())
    init_observability(level=level if isinstance(level, int) else logging.INFO, cfg=app_config.otel)

    service = build_service(app_config)
    service.run()


if __name__ == "__main__":
    main()
