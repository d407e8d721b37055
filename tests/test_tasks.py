"""Tests for live tasks driven by the virtual-clock scheduler."""

from collections import Counter

import pytest

from apps.datagen.src.core.bootstrap import build_generators, build_size_issue_products, build_tasks
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.tasks.base import PeriodicTask
from apps.datagen.src.tasks.customers import NewCustomerTask
from apps.datagen.src.tasks.online import (
    MIN_CLICK_INTERVAL_MS,
    OnlineActivityTask,
    OnlineOrdersTask,
)
from apps.datagen.src.tasks.orders import FalsePositivesTask, NormalOrdersTask, SuspiciousOrdersTask
from apps.datagen.src.tasks.returns import ReturnRequestsTask
from libs.models.events import ClickEvent

HOUR_MS = 3_600_000


@pytest.fixture
def wire(rng, fake, scheduler):
    """Generators on the scheduler's clock for the given settings."""

    def _wire(settings):
        return build_generators(
            settings,
            rng,
            fake,
            build_size_issue_products(settings, rng),
            clock=scheduler.now,
        )

    return _wire


def topics(records):
    return Counter(record.topic for record in records)


def run_until_idle(scheduler, step_ms=60_000, limit=10_000):
    for _ in range(limit):
        if not scheduler.pending():
            return
        scheduler.advance(step_ms)
    raise AssertionError("scheduler never went idle")


class TestEventEmitter:
    def test_duplicate_is_the_same_record(self, emitter, queue, settings, rng, fake, now):
        generators = build_generators(settings, rng, fake, {}, clock=lambda: now)
        record = emitter.emit(EventTopic.ORDERS, generators.orders.generate(), duplicates_ratio=1.0)

        assert queue.drain() == [record, record]

    def test_no_duplicate_at_zero_ratio(self, emitter, queue, settings, rng, fake, now):
        generators = build_generators(settings, rng, fake, {}, clock=lambda: now)
        emitter.emit(EventTopic.ORDERS, generators.orders.generate(), origin="orders")

        (record,) = queue.drain()
        assert record.origin == "orders"
        assert record.timestamp == now
        assert record.key == record.payload.id


class TestRecordQueue:
    def test_drain_is_fifo_and_bounded(self, emitter, queue, settings, rng, fake, now):
        generators = build_generators(settings, rng, fake, {}, clock=lambda: now)
        records = [emitter.emit(EventTopic.ORDERS, generators.orders.generate()) for _ in range(5)]

        assert queue.drain(max_records=2) == records[:2]
        assert len(queue) == 3
        assert queue.drain() == records[2:]
        assert queue.drain() == []


class TestOrderTasks:
    def test_cancellation_follows_order(self, make_settings, wire, emitter, queue, scheduler):
        settings = make_settings(
            cancellations={"ratio": 1.0, "min_delay_ms": 60_000, "max_delay_ms": 120_000},
            delays={"orders": 0, "cancellations": 0},
        )
        generators = wire(settings)
        task = NormalOrdersTask(generators.orders, generators.cancellations, emitter, scheduler)

        for _ in range(10):
            task()
        orders = {record.payload.id: record for record in queue.drain()}
        assert len(orders) == 10

        scheduler.advance(settings.cancellations.max_delay_ms)
        cancellations = queue.drain()
        assert len(cancellations) == 10
        for cancellation in cancellations:
            assert cancellation.topic == EventTopic.CANCELLATIONS
            order = orders[cancellation.payload.orderid]
            delay_ms = (cancellation.timestamp - order.timestamp).total_seconds() * 1000
            assert 60_000 <= delay_ms <= 120_000

    def test_suspicious_sequence(self, settings, wire, emitter, queue, scheduler):
        generators = wire(settings)
        task = SuspiciousOrdersTask(generators.suspicious, emitter, scheduler)

        task()
        assert len(queue) == 0
        run_until_idle(scheduler)

        records = queue.drain()
        orders = [r.payload for r in records if r.topic == EventTopic.ORDERS]
        cancellations = [r.payload for r in records if r.topic == EventTopic.CANCELLATIONS]
        large, small = orders[:-1], orders[-1]

        assert len(cancellations) == len(large) >= 1
        assert {c.orderid for c in cancellations} == {o.id for o in large}
        assert small.customer in settings.suspicious.customers
        assert small.price < large[0].price
        assert all(o.description == small.description for o in large)

    def test_false_positive(self, settings, wire, emitter, queue, scheduler):
        generators = wire(settings)
        task = FalsePositivesTask(generators.false_positives, emitter, scheduler)

        task()
        (anchor,) = queue.drain()
        run_until_idle(scheduler)

        records = queue.drain()
        assert [r.topic for r in records] == [EventTopic.ORDERS, EventTopic.CANCELLATIONS]
        small, cancellation = records
        assert small.payload.customerid == anchor.payload.customerid
        assert small.payload.price < anchor.payload.price
        assert cancellation.payload.orderid == anchor.payload.id


class TestCustomerAndReturnTasks:
    def test_first_order_after_registration(self, make_settings, wire, emitter, queue, scheduler):
        settings = make_settings(new_customers={"order_ratio": 1.0})
        generators = wire(settings)
        task = NewCustomerTask(generators.new_customers, generators.orders, emitter, scheduler)

        task()
        (registration,) = queue.drain()
        scheduler.advance(settings.new_customers.order_max_delay_ms)
        (order,) = queue.drain()

        assert registration.topic == EventTopic.NEW_CUSTOMERS
        assert order.topic == EventTopic.ORDERS
        assert order.payload.customerid == registration.payload.customerid
        assert order.payload.quantity == 1

    def test_review_follows_return(self, make_settings, wire, emitter, queue, scheduler):
        settings = make_settings(returns={"review_ratio": 1.0})
        generators = wire(settings)
        task = ReturnRequestsTask(generators.return_requests, generators.product_reviews, emitter, scheduler)

        task()
        (request,) = queue.drain()
        scheduler.advance(settings.reviews.max_delay_ms)
        (review,) = queue.drain()

        assert review.topic == EventTopic.PRODUCT_REVIEWS
        returned = {r.item.short_description for r in request.payload.returns}
        assert review.payload.product in returned


class TestOnlineTasks:
    def test_session_runs_to_completion(self, settings, wire, emitter, queue, scheduler):
        generators = wire(settings)
        task = OnlineActivityTask(
            settings.timings.online_sessions,
            settings.timings.click_tracking_max_interval,
            generators.online_activity,
            generators.out_of_stocks,
            emitter,
            scheduler,
        )

        task()
        run_until_idle(scheduler)

        records = queue.drain()
        assert records[0].topic == EventTopic.NEW_CUSTOMERS
        clicks = [r for r in records if r.topic == EventTopic.CLICK_TRACKING]
        assert clicks
        assert all(isinstance(r.payload, ClickEvent) for r in clicks)
        assert len({r.payload.sessionid for r in clicks}) == 1
        gaps = [b.timestamp - a.timestamp for a, b in zip(clicks, clicks[1:])]
        assert all(gap.total_seconds() * 1000 >= MIN_CLICK_INTERVAL_MS for gap in gaps)
        assert len(generators.online_activity.sessions) == 0

    def test_full_session_registry_skips_run(self, make_settings, wire, emitter, queue, scheduler):
        settings = make_settings(online={"max_sessions": 1})
        generators = wire(settings)
        task = OnlineActivityTask(
            settings.timings.online_sessions,
            settings.timings.click_tracking_max_interval,
            generators.online_activity,
            generators.out_of_stocks,
            emitter,
            scheduler,
        )

        task()
        task()
        clicks = [r for r in queue.drain() if r.topic == EventTopic.CLICK_TRACKING]
        assert len(clicks) == 1

    def test_out_of_stock_follows_online_order(self, make_settings, wire, emitter, queue, scheduler):
        settings = make_settings(
            timings={"online_orders": HOUR_MS}, online={"out_of_stock_ratio": 1.0}
        )
        generators = wire(settings)
        task = OnlineOrdersTask(generators.online_orders, generators.out_of_stocks, emitter, scheduler)

        task()
        (order,) = queue.drain()
        scheduler.advance(settings.out_of_stocks.max_delay_ms)
        (notice,) = queue.drain()

        assert notice.topic == EventTopic.OUT_OF_STOCKS
        assert notice.payload.product in order.payload.items


class TestTaskWiring:
    def test_all_tasks_built(self, settings, wire, emitter, scheduler):
        tasks = build_tasks(wire(settings), settings, emitter, scheduler)
        assert len(tasks) == 14
        assert len({task.name for task in tasks}) == 14

    def test_zero_interval_disables(self, make_settings, wire, emitter, scheduler):
        settings = make_settings()
        tasks = {task.name: task for task in build_tasks(wire(settings), settings, emitter, scheduler)}

        assert not tasks["online-orders"].enabled
        assert not tasks["abandoned-orders"].enabled
        assert tasks["normal-orders"].enabled

    def test_high_sensor_shares_sensor_topic(self, settings, wire, emitter, queue, scheduler):
        tasks = {task.name: task for task in build_tasks(wire(settings), settings, emitter, scheduler)}
        high = tasks["high-sensor-readings"]

        assert isinstance(high, PeriodicTask)
        high()
        (record,) = queue.drain()
        assert record.topic == EventTopic.SENSOR_READINGS
        assert record.origin == "high-sensor-readings"
