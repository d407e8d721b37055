"""Tests for generation settings validation."""

import pytest
from pydantic import ValidationError

from apps.datagen.src.core.config import DatagenSettings, TopicSettings
from apps.datagen.src.domain.topics import EventTopic


class TestDatagenSettings:
    def test_defaults_are_valid(self):
        settings = DatagenSettings()
        assert settings.orders.small_min <= settings.orders.large_max
        assert settings.timings.online_orders == 0

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("DATAGEN__TIMINGS__ORDERS", "1000")
        monkeypatch.setenv("DATAGEN__CANCELLATIONS__RATIO", "0.5")
        settings = DatagenSettings()
        assert settings.timings.orders == 1000
        assert settings.cancellations.ratio == 0.5

    @pytest.mark.parametrize(
        "overrides",
        [
            {"cancellations": {"ratio": 1.5}},
            {"duplicates": {"orders": -0.1}},
            {"duplicates": {"click_tracking": 2.0}},
            {"online": {"out_of_stock_ratio": 1.01}},
            {"returns": {"review_ratio": -1.0}},
        ],
    )
    def test_ratio_out_of_range(self, overrides):
        with pytest.raises(ValidationError):
            DatagenSettings(**overrides)

    def test_inverted_range(self):
        with pytest.raises(ValidationError, match="small_min must not be greater than small_max"):
            DatagenSettings(orders={"small_min": 6, "small_max": 5})

    def test_reduced_price_must_stay_positive(self):
        with pytest.raises(ValidationError):
            DatagenSettings(products={"min_price": 5.0, "max_price_variation": 9.99})

    def test_suspicious_delay_leaves_room_for_small_order(self):
        with pytest.raises(ValidationError):
            DatagenSettings(suspicious={"min_delay_ms": 10_000, "max_delay_ms": 20_000})

    def test_empty_reference_list_rejected(self):
        with pytest.raises(ValidationError):
            DatagenSettings(locations={"regions": []})


class TestTopicSettings:
    def test_every_hint_resolves(self):
        topics = TopicSettings()
        assert topics.name_for(EventTopic.ORDERS) == "ORDERS.NEW"
        assert topics.name_for(EventTopic.CLICK_TRACKING) == "CLICKTRACKING"
        assert len(topics.all_names()) == len(EventTopic)

    def test_renamed_topic(self):
        topics = TopicSettings(orders="shop.orders")
        assert topics.name_for(EventTopic.ORDERS) == "shop.orders"
