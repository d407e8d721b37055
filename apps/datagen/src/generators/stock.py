"""
Warehouse stock generators.
"""

from datetime import datetime, timedelta
from typing import Optional

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import epoch_day, epoch_millis, utc_now
from apps.datagen.src.generators.base import Clock, EventGenerator, PeriodicGenerator
from apps.datagen.src.generators.products import ProductGenerator
from libs.models.events import OutOfStock, Product, StockMovement


class StockMovementGenerator(PeriodicGenerator[StockMovement]):
    """Stock arriving at warehouses, in multiples of ten."""

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.stock_movements,
            max_delay_secs=settings.delays.stock_movements,
            duplicates_ratio=settings.duplicates.stock_movements,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._warehouses = settings.locations.warehouses
        self._products = ProductGenerator(settings.products, rng)

    def generate_event(self, timestamp: datetime) -> StockMovement:
        quantity = self.rng.random_int(20, 500)
        return StockMovement(
            movementid=self.rng.uuid(),
            warehouse=self.rng.random_item(self._warehouses),
            product=self._products.generate().description,
            quantity=quantity - quantity % 10,
            updatetime=self.format_timestamp(timestamp),
            event_time=timestamp,
        )


class OutOfStockGenerator(EventGenerator):
    """
    Out-of-stock notices for products of online orders.

    The restocking date is an epoch day a random number of days after the
    out-of-stock moment.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            max_delay_secs=settings.delays.out_of_stocks,
            duplicates_ratio=settings.duplicates.out_of_stocks,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.out_of_stocks

    def delay_ms(self) -> int:
        return self.rng.random_int(self._cfg.min_delay_ms, self._cfg.max_delay_ms)

    def generate(self, product: Product, timestamp: Optional[datetime] = None) -> OutOfStock:
        timestamp = timestamp or self.now()
        restocking = timestamp + timedelta(
            days=self.rng.random_int(self._cfg.restocking_min_days, self._cfg.restocking_max_days)
        )
        return OutOfStock(
            id=self.rng.uuid(),
            product=product,
            restockingdate=epoch_day(restocking),
            outofstocktime=epoch_millis(timestamp),
            event_time=timestamp,
        )
