"""
New customer registrations, some followed by a first order.
"""

from functools import partial

from apps.datagen.src.domain.models import Customer
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.customers import NewCustomerGenerator
from apps.datagen.src.generators.orders import OrderGenerator
from apps.datagen.src.infra.scheduler import Scheduler
from apps.datagen.src.tasks.base import EventEmitter, Task


class NewCustomerTask(Task):
    name = "new-customers"

    def __init__(
        self,
        customers: NewCustomerGenerator,
        orders: OrderGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(customers.interval_ms, emitter, scheduler)
        self.customers = customers
        self.orders = orders

    def run(self) -> None:
        registration = self.customers.generate()
        self.emit(EventTopic.NEW_CUSTOMERS, registration, self.customers.duplicates_ratio)
        if self.customers.should_order():
            self.later(
                self.customers.first_order_delay_ms(),
                partial(self._first_order, registration.customer_ref),
            )

    def _first_order(self, customer: Customer) -> None:
        order = self.orders.generate_first_order(customer)
        self.emit(EventTopic.ORDERS, order, self.orders.duplicates_ratio)
