"""
Logical mapping from topic hints to event models and Schema Registry subjects.

No I/O happens here; this is pure configuration used by infra.schema_registry
and infra.serializers.
"""

import json
from typing import Any, Dict, Type, get_args

from pydantic import BaseModel

from apps.datagen.src.domain.topics import EventTopic
from libs.models.events import (
    AbandonedOrder,
    BadgeIn,
    Cancellation,
    ClickEvent,
    NewCustomer,
    OnlineOrder,
    Order,
    OutOfStock,
    ProductReview,
    ReturnRequest,
    SensorReading,
    StockMovement,
    Transaction,
)

TOPIC_TO_MODEL: Dict[EventTopic, Type[BaseModel]] = {
    EventTopic.ORDERS: Order,
    EventTopic.CANCELLATIONS: Cancellation,
    EventTopic.STOCK_MOVEMENTS: StockMovement,
    EventTopic.BADGE_INS: BadgeIn,
    EventTopic.NEW_CUSTOMERS: NewCustomer,
    EventTopic.SENSOR_READINGS: SensorReading,
    EventTopic.ONLINE_ORDERS: OnlineOrder,
    EventTopic.OUT_OF_STOCKS: OutOfStock,
    EventTopic.RETURN_REQUESTS: ReturnRequest,
    EventTopic.PRODUCT_REVIEWS: ProductReview,
    EventTopic.TRANSACTIONS: Transaction,
    EventTopic.CLICK_TRACKING: ClickEvent,
    EventTopic.ABANDONED_ORDERS: AbandonedOrder,
}


def value_subject(topic_name: str) -> str:
    """Schema Registry subject for the values of a Kafka topic."""
    return f"{topic_name}-value"


def _nested_models(model: Type[BaseModel]) -> Dict[str, Type[BaseModel]]:
    """Every model reachable from `model`'s fields, keyed by class name."""
    found: Dict[str, Type[BaseModel]] = {}
    pending = [model]
    while pending:
        current = pending.pop()
        if current.__name__ in found:
            continue
        found[current.__name__] = current
        for field in current.model_fields.values():
            stack = [field.annotation]
            while stack:
                tp = stack.pop()
                if isinstance(tp, type) and issubclass(tp, BaseModel):
                    pending.append(tp)
                stack.extend(get_args(tp))
    return found


def _strip_fields(model: Type[BaseModel], schema: Dict[str, Any]) -> None:
    properties = schema.get("properties", {})
    required = schema.get("required", [])
    for name, field in model.model_fields.items():
        if not field.exclude:
            continue
        properties.pop(name, None)
        if name in required:
            required.remove(name)


def _strip_excluded(model: Type[BaseModel], schema: Dict[str, Any]) -> Dict[str, Any]:
    models = _nested_models(model)
    _strip_fields(model, schema)
    for name, definition in schema.get("$defs", {}).items():
        if name in models:
            _strip_fields(models[name], definition)
    return schema


def json_schema_for(topic: EventTopic) -> str:
    """
    JSON schema describing the wire payload of a topic.

    Args:
        topic: Topic hint.

    Returns:
        The schema as a JSON string, ready for the Schema Registry.
    """
    model = TOPIC_TO_MODEL[topic]
    schema = _strip_excluded(model, model.model_json_schema(mode="serialization"))
    return json.dumps(schema)
