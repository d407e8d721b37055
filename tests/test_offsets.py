"""Tests for the prior-run check on the datagen topics."""

from types import SimpleNamespace

import pytest
from confluent_kafka import KafkaException

from apps.datagen.src.infra import offsets
from apps.datagen.src.infra.offsets import has_prior_run_evidence
from libs.config import KafkaConfig

TOPICS = ["ORDERS.NEW", "CANCELLATIONS"]


class FakeConsumer:
    """Answers metadata and watermark queries from fixed tables."""

    topics = {"ORDERS.NEW": [0, 1], "CANCELLATIONS": [0]}
    watermarks = {}
    list_error = None

    def __init__(self, config):
        self.config = config
        self.closed = False
        FakeConsumer.instances.append(self)

    def list_topics(self, timeout):
        if self.list_error is not None:
            raise self.list_error
        topics = {name: SimpleNamespace(partitions=dict.fromkeys(parts)) for name, parts in self.topics.items()}
        return SimpleNamespace(topics=topics)

    def get_watermark_offsets(self, partition, timeout):
        return self.watermarks.get((partition.topic, partition.partition), (0, 0))

    def close(self):
        self.closed = True


@pytest.fixture
def consumer(monkeypatch):
    FakeConsumer.instances = []
    FakeConsumer.watermarks = {}
    FakeConsumer.list_error = None
    monkeypatch.setattr(offsets, "Consumer", FakeConsumer)
    return FakeConsumer


@pytest.fixture
def cfg():
    return KafkaConfig(bootstrap_servers="localhost:9092")


class TestHasPriorRunEvidence:
    def test_empty_topics(self, consumer, cfg):
        assert not has_prior_run_evidence(cfg, TOPICS, timeout=1)
        assert consumer.instances[0].closed

    def test_records_in_any_partition(self, consumer, cfg):
        consumer.watermarks = {("ORDERS.NEW", 1): (0, 12)}
        assert has_prior_run_evidence(cfg, TOPICS, timeout=1)

    def test_missing_topics_are_skipped(self, consumer, cfg):
        assert not has_prior_run_evidence(cfg, ["ORDERS.ABANDONED"], timeout=1)

    def test_watermark_timeout_counts_as_prior_run(self, consumer, cfg):
        consumer.watermarks = {("ORDERS.NEW", 0): None}

        assert has_prior_run_evidence(cfg, TOPICS, timeout=1)
        assert consumer.instances[0].closed

    def test_kafka_error_counts_as_prior_run(self, consumer, cfg):
        consumer.list_error = KafkaException("broker down")
        assert has_prior_run_evidence(cfg, TOPICS, timeout=1)
