"""Tests for the topic-to-schema mapping."""

import json

import pytest

from apps.datagen.src.domain.schemas import TOPIC_TO_MODEL, json_schema_for, value_subject
from apps.datagen.src.domain.topics import EventTopic


def schema(topic):
    return json.loads(json_schema_for(topic))


class TestJsonSchemas:
    def test_every_topic_has_a_model(self):
        assert set(TOPIC_TO_MODEL) == set(EventTopic)

    @pytest.mark.parametrize("topic", list(EventTopic))
    def test_event_time_is_not_on_the_wire(self, topic):
        properties = schema(topic)["properties"]
        assert "event_time" not in properties
        assert "event_time" not in schema(topic).get("required", [])

    def test_cancellation_carries_only_order_id(self):
        properties = schema(EventTopic.CANCELLATIONS)["properties"]
        assert "orderid" in properties
        assert "order" not in properties

    def test_online_order_drops_items(self):
        properties = schema(EventTopic.ONLINE_ORDERS)["properties"]
        assert "products" in properties
        assert "items" not in properties

    def test_nested_return_item_stripped(self):
        definitions = schema(EventTopic.RETURN_REQUESTS)["$defs"]
        assert "item" not in definitions["ProductReturn"]["properties"]
        assert "product" in definitions["ProductReturn"]["properties"]

    def test_value_subject(self):
        assert value_subject("ORDERS.NEW") == "ORDERS.NEW-value"
