"""
JSON Schema serializers for event values.

One `JSONSerializer` per topic, each bound to the schema derived from that
topic's event model, behind a single callable the SerializingProducer can use.
"""

import logging
from typing import Any, Dict, Optional

from confluent_kafka.schema_registry import SchemaRegistryClient
from confluent_kafka.schema_registry.json_schema import JSONSerializer
from confluent_kafka.serialization import SerializationContext

from apps.datagen.src.core.config import TopicSettings
from apps.datagen.src.domain.schemas import json_schema_for
from apps.datagen.src.domain.topics import EventTopic
from libs.models.events import DatagenEvent

logger = logging.getLogger(__name__)


def event_to_dict(event: DatagenEvent, ctx: SerializationContext) -> Dict[str, Any]:
    """
    Serializer hook converting a pydantic event into its wire dict.

    Args:
        event: Event payload.
        ctx: Serialization context (unused).
    """
    return event.model_dump(mode="json")


class TopicValueSerializer:
    """
    Dispatches value serialization to the serializer of the record's topic.

    Raises:
        KeyError: for a topic that is not a datagen topic.
    """

    def __init__(self, serializers: Dict[str, JSONSerializer]) -> None:
        self._serializers = serializers

    def __call__(self, event: Optional[DatagenEvent], ctx: SerializationContext) -> Optional[bytes]:
        if event is None:
            return None
        return self._serializers[ctx.topic](event, ctx)


def build_value_serializer(client: SchemaRegistryClient, topics: TopicSettings) -> TopicValueSerializer:
    serializers = {
        topics.name_for(topic): JSONSerializer(
            json_schema_for(topic),
            client,
            to_dict=event_to_dict,
        )
        for topic in EventTopic
    }
    logger.info("Value serializers ready", extra={"topics": sorted(serializers)})
    return TopicValueSerializer(serializers)
