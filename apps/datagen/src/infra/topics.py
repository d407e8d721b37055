"""
Kafka topic management for the datagen service.
"""

import logging
from typing import Iterable

from confluent_kafka.admin import AdminClient, NewTopic

from libs.config import KafkaConfig

logger = logging.getLogger(__name__)


def ensure_topics(cfg: KafkaConfig, topic_names: Iterable[str]) -> None:
    """
    Ensure that every datagen topic exists.

    Args:
        cfg: Kafka settings (bootstrap servers, partitions, replication).
        topic_names: Concrete topic names to check.

    Behavior:
        - Existing topics are left untouched.
        - Missing topics are created with the configured partitions and
          replication factor; failures are logged, not raised.
    """
    admin = AdminClient({"bootstrap.servers": cfg.bootstrap_servers})

    metadata = admin.list_topics(timeout=10)
    existing = set(metadata.topics.keys())

    missing = [name for name in dict.fromkeys(topic_names) if name not in existing]
    if not missing:
        logger.info("All Kafka topics already exist.", extra={"topics": sorted(existing)})
        return

    logger.info(
        "Creating Kafka topics.",
        extra={
            "topics": missing,
            "num_partitions": cfg.topic_partitions,
            "replication_factor": cfg.topic_replication_factor,
        },
    )

    futures = admin.create_topics(
        [
            NewTopic(
                name,
                num_partitions=cfg.topic_partitions,
                replication_factor=cfg.topic_replication_factor,
            )
            for name in missing
        ]
    )

    for topic, future in futures.items():
        try:
            future.result()
            logger.info("Created Kafka topic.", extra={"topic": topic})
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Topic creation failed.",
                extra={"topic": topic, "error": str(exc)},
            )
