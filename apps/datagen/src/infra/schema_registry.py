"""
Schema Registry registration for the datagen JSON schemas.

Every topic gets a `<topic>-value` subject whose JSON schema is derived from
the pydantic event model, so the registry always matches the code.
"""

import logging

from confluent_kafka.schema_registry import Schema, SchemaRegistryClient

from apps.datagen.src.core.config import TopicSettings
from apps.datagen.src.domain.schemas import json_schema_for, value_subject
from apps.datagen.src.domain.topics import EventTopic
from libs.config import KafkaConfig

logger = logging.getLogger(__name__)


def build_schema_registry_client(cfg: KafkaConfig) -> SchemaRegistryClient:
    return SchemaRegistryClient({"url": cfg.schema_registry_url})


def register_schemas(client: SchemaRegistryClient, topics: TopicSettings) -> None:
    """
    Register one JSON schema per datagen topic.

    Notes:
        - Safe to call repeatedly (Schema Registry is idempotent).
        - Failures are logged as warnings; the serializer registers on
          first use anyway.
    """
    for topic in EventTopic:
        subject = value_subject(topics.name_for(topic))
        schema = Schema(json_schema_for(topic), "JSON")

        try:
            schema_id = client.register_schema(subject, schema)
            logger.info(
                "Schema registered successfully.",
                extra={"subject": subject, "schema_id": schema_id},
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Schema registration failed; subject may already exist.",
                extra={"subject": subject, "error": str(exc)},
            )

    logger.info("Schema registration completed.")
