"""
New customer registrations, some of which place a first order shortly after.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.generators.base import Clock, PeriodicGenerator
from apps.datagen.src.generators.fakers import new_customer
from apps.datagen.src.generators.orders import OrderGenerator
from libs.models.events import NewCustomer, Order


class NewCustomerGenerator(PeriodicGenerator[NewCustomer]):
    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.new_customers,
            max_delay_secs=settings.delays.new_customers,
            duplicates_ratio=settings.duplicates.new_customers,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.new_customers

    def generate_event(self, timestamp: datetime) -> NewCustomer:
        customer = new_customer(self.fake, self.rng)
        return NewCustomer(
            customerid=customer.id,
            customername=customer.name,
            registered=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def should_order(self) -> bool:
        return self.rng.should_do(self._cfg.order_ratio)

    def first_order_delay_ms(self) -> int:
        return self.rng.random_int(self._cfg.order_min_delay_ms, self._cfg.order_max_delay_ms)


def generate_new_customer_history(
    customers: NewCustomerGenerator,
    orders: OrderGenerator,
    now: Optional[datetime] = None,
) -> Tuple[List[NewCustomer], List[Order]]:
    """Registrations over the history window, with the first orders they lead to."""
    registrations = customers.generate_history(now)
    first_orders: List[Order] = []
    seen = set()
    for registration in registrations:
        if registration.customerid in seen:
            continue
        seen.add(registration.customerid)
        if customers.should_order():
            order_time = registration.event_time + timedelta(
                milliseconds=customers.first_order_delay_ms()
            )
            first_order = orders.generate_first_order(registration.customer_ref, order_time)
            orders.append_with_duplicate(first_orders, first_order)
    return registrations, first_orders
