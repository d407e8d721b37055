"""
Store order tasks: normal orders, false positives and suspicious sequences.
"""

import logging
from functools import partial

from apps.datagen.src.domain.models import Customer, Order
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.orders import CancellationGenerator, OrderGenerator
from apps.datagen.src.generators.suspicious import (
    FalsePositiveOrderGenerator,
    SuspiciousOrderGenerator,
)
from apps.datagen.src.infra.scheduler import Scheduler
from apps.datagen.src.tasks.base import EventEmitter, Task

logger = logging.getLogger(__name__)


class _OrderTask(Task):
    def __init__(
        self,
        interval_ms: int,
        orders: OrderGenerator,
        cancellations: CancellationGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(interval_ms, emitter, scheduler)
        self.orders = orders
        self.cancellations = cancellations

    def emit_order(self, order: Order) -> None:
        self.emit(EventTopic.ORDERS, order, self.orders.duplicates_ratio)

    def cancel_later(self, order: Order, delay_ms: int) -> None:
        self.later(delay_ms, partial(self._cancel, order))

    def _cancel(self, order: Order) -> None:
        cancellation = self.cancellations.generate(order)
        self.emit(EventTopic.CANCELLATIONS, cancellation, self.cancellations.duplicates_ratio)


class NormalOrdersTask(_OrderTask):
    """One order per run, occasionally cancelled a little later."""

    name = "normal-orders"

    def __init__(
        self,
        orders: OrderGenerator,
        cancellations: CancellationGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(orders.interval_ms, orders, cancellations, emitter, scheduler)

    def run(self) -> None:
        order = self.orders.generate()
        self.emit_order(order)
        if self.orders.should_cancel():
            self.cancel_later(order, self.orders.cancellation_delay_ms())


class FalsePositivesTask(_OrderTask):
    """
    A large order that gets cancelled, plus a cheaper small order for the
    same customer placed before the cancellation.
    """

    name = "false-positives"

    def __init__(
        self,
        pattern: FalsePositiveOrderGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(pattern.interval_ms, pattern.orders, pattern.cancellations, emitter, scheduler)
        self.pattern = pattern

    def run(self) -> None:
        anchor = self.pattern.anchor_order()
        self.emit_order(anchor)
        self.cancel_later(anchor, self.pattern.cancellation_delay_ms())

        price = self.pattern.reduced_price(anchor)
        self.later(
            self.pattern.small_order_delay_ms(),
            partial(self._small_order, anchor, price, anchor.customer_ref),
        )

    def _small_order(self, anchor: Order, price: float, customer: Customer) -> None:
        self.emit_order(self.pattern.small_order(anchor, price, customer))


class SuspiciousOrdersTask(_OrderTask):
    """
    Schedules a suspicious sequence: cancelled large orders spaced out in
    time, then one small order from the suspicious roster at a lower price.
    The anchor order only fixes product, price and region; it is not emitted.
    """

    name = "suspicious-orders"

    def __init__(
        self,
        pattern: SuspiciousOrderGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(pattern.interval_ms, pattern.orders, pattern.cancellations, emitter, scheduler)
        self.pattern = pattern

    def run(self) -> None:
        anchor = self.pattern.anchor_order()

        delay_ms = 1_000
        count = self.pattern.cancelled_order_count()
        for _ in range(count):
            self.later(delay_ms, partial(self._large_order, anchor))
            delay_ms += self.pattern.spacing_ms()

        price = self.pattern.reduced_price(anchor)
        customer = self.pattern.roster_customer()
        self.later(delay_ms, partial(self._small_order, anchor, price, customer))

        logger.debug(
            "Scheduled suspicious sequence",
            extra={"anchor_price": anchor.price, "large_orders": count, "span_ms": delay_ms},
        )

    def _large_order(self, anchor: Order) -> None:
        order = self.pattern.large_order(anchor)
        self.emit_order(order)
        self.cancel_later(order, self.pattern.cancellation_delay_ms())

    def _small_order(self, anchor: Order, price: float, customer: Customer) -> None:
        self.emit_order(self.pattern.small_order(anchor, price, customer))
