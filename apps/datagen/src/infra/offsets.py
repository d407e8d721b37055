"""
Detects whether the generator has produced data before.

History is only backfilled on the very first start, i.e. when none of the
datagen topics holds a single record yet.
"""

import logging
from typing import Iterable

from confluent_kafka import Consumer, KafkaException, TopicPartition

from libs.config import KafkaConfig

logger = logging.getLogger(__name__)


def has_prior_run_evidence(cfg: KafkaConfig, topic_names: Iterable[str], timeout: float = 10.0) -> bool:
    """
    True if any partition of any datagen topic has a high watermark above 0.

    When the cluster cannot be queried the answer is True, so history is
    never replayed on top of existing data.
    """
    consumer = Consumer(
        {
            "bootstrap.servers": cfg.bootstrap_servers,
            "group.id": f"{cfg.client_id}-offsets-probe",
            "enable.auto.commit": False,
        }
    )
    try:
        metadata = consumer.list_topics(timeout=timeout)
        for name in topic_names:
            topic = metadata.topics.get(name)
            if topic is None:
                continue
            for partition in topic.partitions:
                offsets = consumer.get_watermark_offsets(
                    TopicPartition(name, partition), timeout=timeout
                )
                if offsets is None:
                    logger.warning(
                        "Timed out reading topic offsets; assuming a previous run",
                        extra={"topic": name, "partition": partition},
                    )
                    return True
                _, high = offsets
                if high > 0:
                    logger.info(
                        "Found existing records; skipping history backfill",
                        extra={"topic": name, "partition": partition, "high_watermark": high},
                    )
                    return True
        return False
    except KafkaException as exc:
        logger.warning(
            "Could not read topic offsets; assuming a previous run",
            extra={"error": str(exc)},
        )
        return True
    finally:
        consumer.close()
