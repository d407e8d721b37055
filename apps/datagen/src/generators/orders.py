"""
Order and cancellation generators.

Orders are produced for the physical stores (regions); cancellations always
carry the complete order they cancel.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.generators.base import Clock, EventGenerator, PeriodicGenerator
from apps.datagen.src.generators.fakers import new_customer
from apps.datagen.src.generators.products import ProductGenerator
from libs.models.events import Cancellation, Customer, Order


class OrderGenerator(PeriodicGenerator[Order]):
    """
    Generates store orders.

    Live orders use `generate(min_items, max_items)`; chained orders (false
    positives, suspicious sequences, first orders) reuse a product, price,
    region and customer through `generate_order`.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.orders,
            max_delay_secs=settings.delays.orders,
            duplicates_ratio=settings.duplicates.orders,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings
        self.products = ProductGenerator(settings.products, rng)

    def generate_order(
        self,
        timestamp: datetime,
        *,
        min_items: int,
        max_items: int,
        price: float,
        region: str,
        description: str,
        customer: Optional[Customer] = None,
    ) -> Order:
        customer = customer or new_customer(self.fake, self.rng)
        return Order(
            id=self.rng.uuid(),
            customer=customer.name,
            customerid=customer.id,
            description=description,
            price=price,
            quantity=self.rng.random_int(min_items, max_items),
            region=region,
            ordertime=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def random_order(
        self,
        timestamp: datetime,
        min_items: int,
        max_items: int,
        customer: Optional[Customer] = None,
    ) -> Order:
        return self.generate_order(
            timestamp,
            min_items=min_items,
            max_items=max_items,
            price=self.products.random_price(),
            region=self.rng.random_item(self._cfg.locations.regions),
            description=self.products.generate().description,
            customer=customer,
        )

    def generate_event(self, timestamp: datetime) -> Order:
        orders = self._cfg.orders
        return self.random_order(timestamp, orders.small_min, orders.large_max)

    def generate(self, min_items: Optional[int] = None, max_items: Optional[int] = None) -> Order:
        """Live order for a random customer; quantity defaults to the full range."""
        orders = self._cfg.orders
        return self.random_order(
            self.now(),
            orders.small_min if min_items is None else min_items,
            orders.large_max if max_items is None else max_items,
        )

    def generate_first_order(self, customer: Customer, timestamp: Optional[datetime] = None) -> Order:
        """Single-item order for a newly registered customer."""
        return self.random_order(timestamp or self.now(), 1, 1, customer=customer)

    def should_cancel(self) -> bool:
        return self.rng.should_do(self._cfg.cancellations.ratio)

    def cancellation_delay_ms(self) -> int:
        cancellations = self._cfg.cancellations
        return self.rng.random_int(cancellations.min_delay_ms, cancellations.max_delay_ms)


class CancellationGenerator(EventGenerator):
    """Cancels existing orders; there is no standalone cancellation."""

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            max_delay_secs=settings.delays.cancellations,
            duplicates_ratio=settings.duplicates.cancellations,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._reasons = settings.cancellations.reasons

    def generate(self, order: Order, timestamp: Optional[datetime] = None) -> Cancellation:
        timestamp = timestamp or self.now()
        return Cancellation(
            id=self.rng.uuid(),
            orderid=order.id,
            canceltime=self.format_timestamp(timestamp),
            reason=self.rng.random_item(self._reasons),
            order=order,
            event_time=timestamp,
        )


def generate_order_history(
    orders: OrderGenerator,
    cancellations: CancellationGenerator,
    now: Optional[datetime] = None,
) -> Tuple[List[Order], List[Cancellation]]:
    """
    Normal orders over the history window, with their cancellations.

    Each cancelled order is cancelled after the configured cancellation
    delay, so the cancellation may fall after `now` and later be discarded.
    """
    history_orders = orders.generate_history(now)
    history_cancellations: List[Cancellation] = []
    seen = set()
    for order in history_orders:
        if order.id in seen:
            continue
        seen.add(order.id)
        if orders.should_cancel():
            cancel_time = order.event_time + timedelta(milliseconds=orders.cancellation_delay_ms())
            cancellation = cancellations.generate(order, cancel_time)
            cancellations.append_with_duplicate(history_cancellations, cancellation)
    return history_orders, history_cancellations
