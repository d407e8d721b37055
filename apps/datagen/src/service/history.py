"""
One-off backfill of the last seven days of events.

Every generator replays itself over the history window with synthetic
timestamps. Correlated events (cancellations, first orders, reviews,
out-of-stocks) are derived from the replayed events the same way the live
tasks derive them, only with timestamps computed instead of scheduled.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Type

from faker import Faker

from apps.datagen.src.core.bootstrap import Generators, build_generators, build_size_issue_products
from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.domain.models import (
    AbandonedOrder,
    ClickEvent,
    DatagenEvent,
    OnlineActivity,
    OnlineOrder,
    Product,
)
from apps.datagen.src.domain.records import EventRecord
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.base import EventGenerator
from apps.datagen.src.generators.customers import generate_new_customer_history
from apps.datagen.src.generators.orders import generate_order_history
from apps.datagen.src.generators.returns import generate_return_history
from libs.observability.tracing import get_tracer

logger = logging.getLogger(__name__)

ACTIVITY_TOPICS: Dict[Type[OnlineActivity], EventTopic] = {
    ClickEvent: EventTopic.CLICK_TRACKING,
    OnlineOrder: EventTopic.ONLINE_ORDERS,
    AbandonedOrder: EventTopic.ABANDONED_ORDERS,
}


class BoundedHistory:
    """
    Collects history records strictly before a boundary.

    Correlated events are computed by adding delays to their cause, so some
    of them land after the boundary; those belong to the live run and are
    dropped here.
    """

    def __init__(self, boundary: datetime) -> None:
        self.boundary = boundary
        self.rejected = 0
        self._records: List[EventRecord] = []

    def add(self, topic: EventTopic, event: DatagenEvent, origin: Optional[str] = None) -> bool:
        record = EventRecord.of(topic, event, origin)
        if record.timestamp >= self.boundary:
            self.rejected += 1
            return False
        self._records.append(record)
        return True

    def add_with_duplicate(
        self,
        topic: EventTopic,
        event: DatagenEvent,
        source: EventGenerator,
        origin: Optional[str] = None,
    ) -> None:
        """Add `event`, and add it again when `source` draws a duplicate."""
        if self.add(topic, event, origin) and source.should_duplicate():
            self.add(topic, event, origin)

    def extend(self, topic: EventTopic, events: Iterable[DatagenEvent], origin: Optional[str] = None) -> None:
        for event in events:
            self.add(topic, event, origin)

    def sorted_records(self) -> List[EventRecord]:
        # sorted() is stable: duplicates stay right after their original
        return sorted(self._records, key=lambda record: record.timestamp)

    def __len__(self) -> int:
        return len(self._records)


class HistoryBackfill:
    """
    Generates the history records for a first start.

    Args:
        settings: Generation settings.
        rng: Random source; shared with the live run when seeded.
        fake: Faker instance.
        size_issue_products: Products with a known size issue; drawn from
            `rng` when omitted.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        size_issue_products: Optional[Dict[str, Product]] = None,
    ) -> None:
        self._settings = settings
        self._rng = rng
        self._fake = fake
        self._size_issue_products = (
            size_issue_products
            if size_issue_products is not None
            else build_size_issue_products(settings, rng)
        )
        self._tracer = get_tracer("loosehanger-datagen-history")

    def generate(self, boundary: Optional[datetime] = None) -> List[EventRecord]:
        """
        Replay every generator over the seven days before `boundary`.

        Returns:
            Records older than `boundary`, sorted by timestamp.
        """
        boundary = boundary or utc_now()
        gens = build_generators(
            self._settings, self._rng, self._fake, self._size_issue_products, clock=lambda: boundary
        )
        history = BoundedHistory(boundary)

        with self._tracer.start_as_current_span("generate_history") as span:
            span.set_attribute("history.boundary", boundary.isoformat())

            customers, first_orders = generate_new_customer_history(gens.new_customers, gens.orders, boundary)
            history.extend(EventTopic.NEW_CUSTOMERS, customers, "new-customers")
            history.extend(EventTopic.ORDERS, first_orders, "new-customers")

            history.extend(
                EventTopic.STOCK_MOVEMENTS, gens.stock_movements.generate_history(boundary), "stock-movements"
            )
            history.extend(EventTopic.BADGE_INS, gens.badge_ins.generate_history(boundary), "badge-ins")
            history.extend(
                EventTopic.SENSOR_READINGS, gens.sensor_readings.generate_history(boundary), "sensor-readings"
            )
            history.extend(
                EventTopic.SENSOR_READINGS,
                gens.high_sensor_readings.generate_history(boundary),
                "high-sensor-readings",
            )
            history.extend(EventTopic.TRANSACTIONS, gens.transactions.generate_history(boundary), "transactions")
            history.extend(
                EventTopic.ABANDONED_ORDERS,
                gens.abandoned_orders.generate_history(boundary),
                "abandoned-orders",
            )

            online_orders = gens.online_orders.generate_history(boundary)
            history.extend(EventTopic.ONLINE_ORDERS, online_orders, "online-orders")
            self._out_of_stocks(gens, history, online_orders, "online-orders")

            self._online_sessions(gens, history, boundary)

            orders, cancellations = generate_order_history(gens.orders, gens.cancellations, boundary)
            history.extend(EventTopic.ORDERS, orders, "normal-orders")
            history.extend(EventTopic.CANCELLATIONS, cancellations, "normal-orders")

            false_positives = gens.false_positives.generate_history(boundary)
            history.extend(EventTopic.ORDERS, false_positives.orders, "false-positives")
            history.extend(EventTopic.CANCELLATIONS, false_positives.cancellations, "false-positives")

            suspicious = gens.suspicious.generate_history(boundary)
            history.extend(EventTopic.ORDERS, suspicious.orders, "suspicious-orders")
            history.extend(EventTopic.CANCELLATIONS, suspicious.cancellations, "suspicious-orders")

            requests, follow_ups = generate_return_history(gens.return_requests, gens.product_reviews, boundary)
            history.extend(EventTopic.RETURN_REQUESTS, requests, "return-requests")
            history.extend(EventTopic.PRODUCT_REVIEWS, follow_ups, "return-requests")

            history.extend(
                EventTopic.PRODUCT_REVIEWS, gens.product_reviews.generate_history(boundary), "product-reviews"
            )

            records = history.sorted_records()
            span.set_attribute("history.records", len(records))
            span.set_attribute("history.rejected", history.rejected)

        logger.info(
            "Generated history",
            extra={"records": len(records), "rejected": history.rejected, "boundary": boundary.isoformat()},
        )
        return records

    def _online_sessions(self, gens: Generators, history: BoundedHistory, boundary: datetime) -> None:
        activities = gens.online_activity.generate_history(
            self._settings.history.session_interval_secs,
            self._settings.history.event_interval_secs,
            boundary,
        )
        sources: Dict[Type[OnlineActivity], EventGenerator] = {
            ClickEvent: gens.online_activity,
            OnlineOrder: gens.online_activity.online_orders,
            AbandonedOrder: gens.online_activity.abandoned_orders,
        }
        session_orders: List[OnlineOrder] = []
        for activity in activities:
            kind = type(activity)
            history.add_with_duplicate(ACTIVITY_TOPICS[kind], activity, sources[kind], "online-activity")
            if isinstance(activity, OnlineOrder):
                session_orders.append(activity)
        self._out_of_stocks(gens, history, session_orders, "online-activity")

    @staticmethod
    def _out_of_stocks(
        gens: Generators,
        history: BoundedHistory,
        orders: Iterable[OnlineOrder],
        origin: str,
    ) -> None:
        seen = set()
        for order in orders:
            if order.id in seen:
                continue
            seen.add(order.id)
            if not gens.online_orders.should_generate_out_of_stock():
                continue
            product = gens.online_orders.out_of_stock_product(order)
            timestamp = order.event_time + timedelta(milliseconds=gens.out_of_stocks.delay_ms())
            notice = gens.out_of_stocks.generate(product, timestamp)
            history.add_with_duplicate(EventTopic.OUT_OF_STOCKS, notice, gens.out_of_stocks, origin)
