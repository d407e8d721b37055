"""Tests for the suspicious and false-positive order patterns."""

import pytest

from apps.datagen.src.core.timeutil import HISTORY_WINDOW
from apps.datagen.src.generators.orders import CancellationGenerator, OrderGenerator
from apps.datagen.src.generators.suspicious import (
    FalsePositiveOrderGenerator,
    SuspiciousOrderGenerator,
)

DAY_MS = 86_400_000


@pytest.fixture
def order_generators(settings, rng, fake, now):
    def clock():
        return now

    return OrderGenerator(settings, rng, fake, clock), CancellationGenerator(settings, rng, fake, clock)


class TestSuspiciousSequence:
    @pytest.fixture
    def pattern(self, settings, order_generators):
        return SuspiciousOrderGenerator(settings, *order_generators)

    def test_large_orders_share_the_product(self, pattern, settings, now):
        for _ in range(20):
            chain = pattern.generate_sequence(now)
            large = chain.orders[:-1]

            assert 1 <= len(large) <= settings.suspicious.max_cancelled
            for order in large:
                assert order.description == large[0].description
                assert order.price == large[0].price
                assert order.region == large[0].region
                assert settings.orders.large_min <= order.quantity <= settings.orders.large_max

    def test_every_large_order_is_cancelled(self, pattern, now):
        chain = pattern.generate_sequence(now)
        large = chain.orders[:-1]

        assert [c.orderid for c in chain.cancellations] == [o.id for o in large]
        for order, cancellation in zip(large, chain.cancellations):
            assert cancellation.event_time > order.event_time

    def test_small_order_from_roster_at_lower_price(self, pattern, settings, now):
        for _ in range(20):
            chain = pattern.generate_sequence(now)
            anchor, small = chain.orders[0], chain.orders[-1]

            assert small.customer in settings.suspicious.customers
            assert small.price < anchor.price
            assert small.description == anchor.description
            assert small.region == anchor.region
            assert settings.orders.small_min <= small.quantity <= settings.orders.small_max
            assert small.event_time > chain.cancellations[-1].event_time

    def test_history_one_sequence_per_slot(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"suspicious_orders": DAY_MS})
        pattern = SuspiciousOrderGenerator(
            settings, OrderGenerator(settings, rng, fake), CancellationGenerator(settings, rng, fake)
        )
        history = pattern.generate_history(now)

        roster_orders = [o for o in history.orders if o.customer in settings.suspicious.customers]
        assert len(roster_orders) == 7
        assert all(o.event_time > now - HISTORY_WINDOW for o in history.orders)

    def test_disabled_pattern_has_no_history(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"suspicious_orders": 0})
        pattern = SuspiciousOrderGenerator(
            settings, OrderGenerator(settings, rng, fake), CancellationGenerator(settings, rng, fake)
        )
        history = pattern.generate_history(now)
        assert history.orders == []
        assert history.cancellations == []


class TestFalsePositives:
    @pytest.fixture
    def pattern(self, settings, order_generators):
        return FalsePositiveOrderGenerator(settings, *order_generators)

    def test_same_customer_buys_cheaper_before_cancelling(self, pattern, now):
        for _ in range(20):
            chain = pattern.generate_sequence(now)
            anchor, small = chain.orders
            (cancellation,) = chain.cancellations

            assert cancellation.orderid == anchor.id
            assert small.customerid == anchor.customerid
            assert small.customer == anchor.customer
            assert small.price < anchor.price
            assert small.description == anchor.description
            assert small.event_time <= cancellation.event_time

    def test_history_starts_at_window(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"false_positives": DAY_MS})
        pattern = FalsePositiveOrderGenerator(
            settings, OrderGenerator(settings, rng, fake), CancellationGenerator(settings, rng, fake)
        )
        history = pattern.generate_history(now)

        assert len(history.orders) == 2 * 7
        assert len(history.cancellations) == 7
        assert history.orders[0].event_time == now - HISTORY_WINDOW
