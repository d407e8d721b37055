"""
Online shop tasks: click-tracked sessions and standalone online/abandoned orders.
"""

import logging
from functools import partial

from apps.datagen.src.domain.models import (
    AbandonedOrder,
    ClickEvent,
    OnlineActivity,
    OnlineOrder,
    Product,
)
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.online_activity import OnlineActivityGenerator
from apps.datagen.src.generators.online_orders import AbandonedOrderGenerator, OnlineOrderGenerator
from apps.datagen.src.generators.stock import OutOfStockGenerator
from apps.datagen.src.infra.scheduler import Scheduler
from apps.datagen.src.tasks.base import EventEmitter, PeriodicTask, Task

logger = logging.getLogger(__name__)

MIN_CLICK_INTERVAL_MS = 3_000


class _OutOfStockFollowUp(Task):
    """Orders that sometimes run a product out of stock a little later."""

    def __init__(
        self,
        interval_ms: int,
        online_orders: OnlineOrderGenerator,
        out_of_stocks: OutOfStockGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(interval_ms, emitter, scheduler)
        self.online_orders = online_orders
        self.out_of_stocks = out_of_stocks

    def emit_online_order(self, order: OnlineOrder) -> None:
        self.emit(EventTopic.ONLINE_ORDERS, order, self.online_orders.duplicates_ratio)
        if self.online_orders.should_generate_out_of_stock():
            product = self.online_orders.out_of_stock_product(order)
            self.later(self.out_of_stocks.delay_ms(), partial(self._out_of_stock, product))

    def _out_of_stock(self, product: Product) -> None:
        notice = self.out_of_stocks.generate(product)
        self.emit(EventTopic.OUT_OF_STOCKS, notice, self.out_of_stocks.duplicates_ratio)


class OnlineActivityTask(_OutOfStockFollowUp):
    """
    Starts one online session per run and drives it click by click.

    Every run also tries to register a new customer who may log in to one of
    the upcoming sessions. Each click schedules the next one after a random
    pause until the session ends with an order, an abandoned cart or nothing.
    """

    name = "online-activity"

    def __init__(
        self,
        interval_ms: int,
        max_click_interval_ms: int,
        activity: OnlineActivityGenerator,
        out_of_stocks: OutOfStockGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
        new_customers_ratio: float = 0.0,
    ) -> None:
        super().__init__(interval_ms, activity.online_orders, out_of_stocks, emitter, scheduler)
        self.activity = activity
        self.max_click_interval_ms = max_click_interval_ms
        self.new_customers_ratio = new_customers_ratio

    def run(self) -> None:
        registration = self.activity.register_new_online_customer()
        if registration is not None:
            self.emit(EventTopic.NEW_CUSTOMERS, registration, self.new_customers_ratio)

        session_id = self.activity.start_new_session()
        if session_id is None:
            logger.debug(
                "Maximum number of sessions reached",
                extra={"sessions": len(self.activity.sessions)},
            )
            return
        self.step(session_id)

    def step(self, session_id: str) -> None:
        activity = self.activity.next_activity(self.activity.clock(), session_id)
        if activity is not None:
            self._emit_activity(activity)
        if self.activity.has_more(session_id):
            self.later(self.click_interval_ms(), partial(self.step, session_id))

    def click_interval_ms(self) -> int:
        return self.activity.rng.random_int(MIN_CLICK_INTERVAL_MS, self.max_click_interval_ms)

    def _emit_activity(self, activity: OnlineActivity) -> None:
        if isinstance(activity, ClickEvent):
            self.emit(EventTopic.CLICK_TRACKING, activity, self.activity.duplicates_ratio)
        elif isinstance(activity, OnlineOrder):
            self.emit_online_order(activity)
        elif isinstance(activity, AbandonedOrder):
            self.emit(
                EventTopic.ABANDONED_ORDERS,
                activity,
                self.activity.abandoned_orders.duplicates_ratio,
            )
        else:
            raise TypeError(f"Unexpected online activity: {type(activity).__name__}")


class OnlineOrdersTask(_OutOfStockFollowUp):
    """Online orders for feeds that do not need click tracking."""

    name = "online-orders"

    def __init__(
        self,
        online_orders: OnlineOrderGenerator,
        out_of_stocks: OutOfStockGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(online_orders.interval_ms, online_orders, out_of_stocks, emitter, scheduler)

    def run(self) -> None:
        self.emit_online_order(self.online_orders.generate())


class AbandonedOrdersTask(PeriodicTask):
    def __init__(
        self,
        abandoned_orders: AbandonedOrderGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(
            "abandoned-orders", abandoned_orders, EventTopic.ABANDONED_ORDERS, emitter, scheduler
        )
