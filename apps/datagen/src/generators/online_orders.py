"""
Online orders and abandoned shopping carts.

Both are produced at the end of online sessions and, optionally, by their own
periodic tasks for feeds that do not need click tracking.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.generators.base import Clock, PeriodicGenerator
from apps.datagen.src.generators.fakers import new_address, new_online_customer
from apps.datagen.src.generators.products import ProductGenerator
from libs.models.events import (
    AbandonedOrder,
    Address,
    OnlineAddress,
    OnlineCustomer,
    OnlineOrder,
    Product,
)


class OnlineOrderGenerator(PeriodicGenerator[OnlineOrder]):
    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.online_orders,
            max_delay_secs=settings.delays.online_orders,
            duplicates_ratio=settings.duplicates.online_orders,
            timestamp_format=settings.formats.timestamps_ltz,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.online
        self._products = ProductGenerator(settings.products, rng)

    def _address(self, city: Optional[str] = None) -> Address:
        return new_address(
            self.fake, self.rng, self._cfg.address_min_phones, self._cfg.address_max_phones, city
        )

    def new_customer(self) -> OnlineCustomer:
        return new_online_customer(
            self.fake, self.rng, self._cfg.customer_min_emails, self._cfg.customer_max_emails
        )

    def generate_for(
        self,
        timestamp: datetime,
        customer: OnlineCustomer,
        items: Sequence[Product],
    ) -> OnlineOrder:
        """
        Order `items` for `customer`.

        The shipping city is taken from the configured cities when there are
        any; the billing address reuses the shipping address at the
        configured ratio.
        """
        city = self.rng.random_item(self._cfg.cities) if self._cfg.cities else None
        shipping = self._address(city)
        billing = shipping if self.rng.should_do(self._cfg.reuse_address_ratio) else self._address()
        return OnlineOrder(
            id=self.rng.uuid(),
            customer=customer,
            products=[item.description for item in items],
            address=OnlineAddress(shippingaddress=shipping, billingaddress=billing),
            ordertime=self.format_timestamp(timestamp),
            items=list(items),
            event_time=timestamp,
        )

    def generate_event(self, timestamp: datetime) -> OnlineOrder:
        count = self.rng.random_int(self._cfg.min_products, self._cfg.max_products)
        items = [self._products.generate() for _ in range(count)]
        return self.generate_for(timestamp, self.new_customer(), items)

    def should_generate_out_of_stock(self) -> bool:
        return self.rng.should_do(self._cfg.out_of_stock_ratio)

    def out_of_stock_product(self, order: OnlineOrder) -> Product:
        return self.rng.random_item(order.items)


class AbandonedOrderGenerator(PeriodicGenerator[AbandonedOrder]):
    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.abandoned_orders,
            max_delay_secs=settings.delays.abandoned_orders,
            duplicates_ratio=settings.duplicates.abandoned_orders,
            timestamp_format=settings.formats.timestamps_ltz,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.abandoned_orders
        self._products = ProductGenerator(settings.products, rng)

    def generate_for(self, timestamp: datetime, customer: OnlineCustomer, products: List[str]) -> AbandonedOrder:
        return AbandonedOrder(
            cartid=self.rng.uuid(),
            customer=customer,
            products=products,
            abandonedtime=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def generate_event(self, timestamp: datetime) -> AbandonedOrder:
        customer = new_online_customer(
            self.fake, self.rng, self._cfg.customer_min_emails, self._cfg.customer_max_emails
        )
        count = self.rng.random_int(self._cfg.min_products, self._cfg.max_products)
        products = [self._products.generate().short_description for _ in range(count)]
        return self.generate_for(timestamp, customer, products)
