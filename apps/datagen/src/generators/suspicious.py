"""
Order patterns around dynamic pricing.

Suspicious sequences: a run of large orders for one product, each cancelled
shortly afterwards, pushes the price down; a customer from the suspicious
roster then buys a small quantity at the reduced price.

False positives look similar (a large order, cancelled, and a small order
at a lower price) but the small order is placed by the same customer, so
nobody profits from the price change.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import HISTORY_WINDOW
from apps.datagen.src.generators.orders import CancellationGenerator, OrderGenerator
from libs.models.events import Cancellation, Customer, Order


@dataclass
class OrderChain:
    """Orders and cancellations produced by one pattern instance."""

    orders: List[Order] = field(default_factory=list)
    cancellations: List[Cancellation] = field(default_factory=list)

    def extend(self, other: "OrderChain") -> None:
        self.orders.extend(other.orders)
        self.cancellations.extend(other.cancellations)


class _PricingPattern:
    def __init__(
        self,
        settings: DatagenSettings,
        orders: OrderGenerator,
        cancellations: CancellationGenerator,
    ) -> None:
        self._orders_cfg = settings.orders
        self._cfg = settings.suspicious
        self.orders = orders
        self.cancellations = cancellations

    @property
    def rng(self) -> RandomVariates:
        return self.orders.rng

    def anchor_order(self, timestamp: Optional[datetime] = None) -> Order:
        """A large order for a random product, customer and region."""
        return self.orders.random_order(
            timestamp or self.orders.now(),
            self._orders_cfg.large_min,
            self._orders_cfg.large_max,
        )

    def large_order(
        self,
        anchor: Order,
        timestamp: Optional[datetime] = None,
        customer: Optional[Customer] = None,
    ) -> Order:
        """Large order for the anchor's product at the anchor's price."""
        return self.orders.generate_order(
            timestamp or self.orders.now(),
            min_items=self._orders_cfg.large_min,
            max_items=self._orders_cfg.large_max,
            price=anchor.price,
            region=anchor.region,
            description=anchor.description,
            customer=customer,
        )

    def small_order(
        self,
        anchor: Order,
        price: float,
        customer: Customer,
        timestamp: Optional[datetime] = None,
    ) -> Order:
        return self.orders.generate_order(
            timestamp or self.orders.now(),
            min_items=self._orders_cfg.small_min,
            max_items=self._orders_cfg.small_max,
            price=price,
            region=anchor.region,
            description=anchor.description,
            customer=customer,
        )

    def reduced_price(self, anchor: Order) -> float:
        return self.orders.products.reduced_price(anchor.price)

    def cancellation_delay_ms(self) -> int:
        return self.rng.random_int(self._cfg.min_delay_ms, self._cfg.max_delay_ms)

    def with_duplicates(self, chain: OrderChain) -> OrderChain:
        """The chain with duplicates drawn for each of its orders and cancellations."""
        duplicated = OrderChain()
        for order in chain.orders:
            self.orders.append_with_duplicate(duplicated.orders, order)
        for cancellation in chain.cancellations:
            self.cancellations.append_with_duplicate(duplicated.cancellations, cancellation)
        return duplicated

    def _slots(self, interval_ms: int, now: datetime):
        if interval_ms <= 0:
            return
        timestamp = now - HISTORY_WINDOW
        step = timedelta(milliseconds=interval_ms)
        while timestamp < now:
            yield timestamp
            timestamp += step


class SuspiciousOrderGenerator(_PricingPattern):
    def __init__(
        self,
        settings: DatagenSettings,
        orders: OrderGenerator,
        cancellations: CancellationGenerator,
    ) -> None:
        super().__init__(settings, orders, cancellations)
        self.interval_ms = settings.timings.suspicious_orders

    def cancelled_order_count(self) -> int:
        return self.rng.random_int(1, self._cfg.max_cancelled)

    def spacing_ms(self) -> int:
        """Gap between consecutive large orders of a live sequence."""
        return self.rng.random_int(1_000, self._cfg.min_delay_ms)

    def roster_customer(self) -> Customer:
        return Customer(id=self.rng.uuid(), name=self.rng.random_item(self._cfg.customers))

    def generate_sequence(self, start: datetime) -> OrderChain:
        """
        One complete suspicious sequence with synthetic timestamps.

        Large orders follow each other a few minutes apart, each one after
        the previous cancellation; the small order comes a few minutes after
        the last cancellation.
        """
        chain = OrderChain()
        anchor = self.anchor_order(start)
        timestamp = start
        for _ in range(self.cancelled_order_count()):
            timestamp += timedelta(seconds=self.rng.random_int(60, 300))
            order = self.large_order(anchor, timestamp, customer=anchor.customer_ref)
            chain.orders.append(order)

            timestamp += timedelta(milliseconds=self.cancellation_delay_ms())
            chain.cancellations.append(self.cancellations.generate(order, timestamp))

        timestamp += timedelta(seconds=self.rng.random_int(60, 300))
        chain.orders.append(
            self.small_order(anchor, self.reduced_price(anchor), self.roster_customer(), timestamp)
        )
        return chain

    def generate_history(self, now: Optional[datetime] = None) -> OrderChain:
        """
        One suspicious sequence per suspicious-orders interval over the
        history window, each starting up to two hours into its slot.
        """
        now = now or self.orders.clock()
        history = OrderChain()
        for slot in self._slots(self.interval_ms, now):
            start = slot + timedelta(minutes=self.rng.random_int(1, 120))
            history.extend(self.with_duplicates(self.generate_sequence(start)))
        return history


class FalsePositiveOrderGenerator(_PricingPattern):
    def __init__(
        self,
        settings: DatagenSettings,
        orders: OrderGenerator,
        cancellations: CancellationGenerator,
    ) -> None:
        super().__init__(settings, orders, cancellations)
        self.interval_ms = settings.timings.false_positives

    def small_order_delay_ms(self) -> int:
        """The small order lands before the large one is cancelled."""
        return self.rng.random_int(30_000, self._cfg.min_delay_ms)

    def generate_sequence(self, start: datetime) -> OrderChain:
        anchor = self.anchor_order(start)
        cancel_time = start + timedelta(milliseconds=self.cancellation_delay_ms())
        small_time = start + timedelta(milliseconds=self.small_order_delay_ms())
        return OrderChain(
            orders=[
                anchor,
                self.small_order(anchor, self.reduced_price(anchor), anchor.customer_ref, small_time),
            ],
            cancellations=[self.cancellations.generate(anchor, cancel_time)],
        )

    def generate_history(self, now: Optional[datetime] = None) -> OrderChain:
        now = now or self.orders.clock()
        history = OrderChain()
        for slot in self._slots(self.interval_ms, now):
            history.extend(self.with_duplicates(self.generate_sequence(slot)))
        return history
