"""
Bootstrap wiring for the datagen service.

Responsible for:
- Building the generators, sharing one random source and Faker instance
- Turning generators into scheduled tasks
- Constructing the KafkaEventProducer with its serializers
"""

from dataclasses import dataclass
from typing import Dict, Final, List, Optional, Tuple

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.domain.models import Product
from apps.datagen.src.domain.state import RecentCustomers, SessionRegistry, TransactionStateStore
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.base import Clock
from apps.datagen.src.generators.customers import NewCustomerGenerator
from apps.datagen.src.generators.facilities import (
    BadgeInGenerator,
    HighSensorReadingGenerator,
    SensorReadingGenerator,
)
from apps.datagen.src.generators.fakers import build_faker
from apps.datagen.src.generators.online_activity import OnlineActivityGenerator
from apps.datagen.src.generators.online_orders import AbandonedOrderGenerator, OnlineOrderGenerator
from apps.datagen.src.generators.orders import CancellationGenerator, OrderGenerator
from apps.datagen.src.generators.products import ProductGenerator
from apps.datagen.src.generators.returns import ReturnRequestGenerator
from apps.datagen.src.generators.reviews import ProductReviewGenerator
from apps.datagen.src.generators.stock import OutOfStockGenerator, StockMovementGenerator
from apps.datagen.src.generators.suspicious import (
    FalsePositiveOrderGenerator,
    SuspiciousOrderGenerator,
)
from apps.datagen.src.generators.transactions import TransactionGenerator
from apps.datagen.src.infra.producer import KafkaEventProducer
from apps.datagen.src.infra.scheduler import Scheduler
from apps.datagen.src.infra.schema_registry import build_schema_registry_client
from apps.datagen.src.infra.serializers import build_value_serializer
from apps.datagen.src.tasks.base import EventEmitter, PeriodicTask, Task
from apps.datagen.src.tasks.customers import NewCustomerTask
from apps.datagen.src.tasks.online import AbandonedOrdersTask, OnlineActivityTask, OnlineOrdersTask
from apps.datagen.src.tasks.orders import FalsePositivesTask, NormalOrdersTask, SuspiciousOrdersTask
from apps.datagen.src.tasks.returns import ProductReviewsTask, ReturnRequestsTask
from libs.config import AppConfig


@dataclass
class Generators:
    """Every generator of one generation run, wired to a common clock."""

    orders: OrderGenerator
    cancellations: CancellationGenerator
    false_positives: FalsePositiveOrderGenerator
    suspicious: SuspiciousOrderGenerator
    new_customers: NewCustomerGenerator
    stock_movements: StockMovementGenerator
    out_of_stocks: OutOfStockGenerator
    badge_ins: BadgeInGenerator
    sensor_readings: SensorReadingGenerator
    high_sensor_readings: HighSensorReadingGenerator
    transactions: TransactionGenerator
    online_orders: OnlineOrderGenerator
    abandoned_orders: AbandonedOrderGenerator
    online_activity: OnlineActivityGenerator
    return_requests: ReturnRequestGenerator
    product_reviews: ProductReviewGenerator


def build_random_sources(settings: DatagenSettings) -> Tuple[RandomVariates, Faker]:
    """One random-variate source and one Faker, both derived from the configured seed."""
    return RandomVariates(settings.seed), build_faker(settings.locale, settings.seed)


def build_size_issue_products(settings: DatagenSettings, rng: RandomVariates) -> Dict[str, Product]:
    """Products known to run small or large, shared by returns and reviews."""
    return ProductGenerator(settings.products, rng).generate_set(
        settings.reviews.size_issue_product_count
    )


def build_generators(
    settings: DatagenSettings,
    rng: RandomVariates,
    fake: Faker,
    size_issue_products: Dict[str, Product],
    clock: Clock = utc_now,
    transaction_store: Optional[TransactionStateStore] = None,
) -> Generators:
    """
    Build a fresh set of generators.

    Each call returns new session, recent-customer and transaction state, so
    the history backfill and the live run never share it.
    """
    orders = OrderGenerator(settings, rng, fake, clock)
    cancellations = CancellationGenerator(settings, rng, fake, clock)
    online_orders = OnlineOrderGenerator(settings, rng, fake, clock)
    abandoned_orders = AbandonedOrderGenerator(settings, rng, fake, clock)

    online_activity = OnlineActivityGenerator(
        settings,
        rng,
        fake,
        clock,
        registry=SessionRegistry(settings.online.max_sessions, settings.online.session_id_attempts),
        recent_customers=RecentCustomers(settings.online.recent_customers_capacity),
        online_orders=online_orders,
        abandoned_orders=abandoned_orders,
    )

    return Generators(
        orders=orders,
        cancellations=cancellations,
        false_positives=FalsePositiveOrderGenerator(settings, orders, cancellations),
        suspicious=SuspiciousOrderGenerator(settings, orders, cancellations),
        new_customers=NewCustomerGenerator(settings, rng, fake, clock),
        stock_movements=StockMovementGenerator(settings, rng, fake, clock),
        out_of_stocks=OutOfStockGenerator(settings, rng, fake, clock),
        badge_ins=BadgeInGenerator(settings, rng, fake, clock),
        sensor_readings=SensorReadingGenerator(settings, rng, fake, clock),
        high_sensor_readings=HighSensorReadingGenerator(settings, rng, fake, clock),
        transactions=TransactionGenerator(settings, rng, fake, clock, store=transaction_store),
        online_orders=online_orders,
        abandoned_orders=abandoned_orders,
        online_activity=online_activity,
        return_requests=ReturnRequestGenerator(settings, rng, fake, size_issue_products, clock),
        product_reviews=ProductReviewGenerator(settings, rng, fake, size_issue_products, clock),
    )


def build_tasks(
    generators: Generators,
    settings: DatagenSettings,
    emitter: EventEmitter,
    scheduler: Scheduler,
) -> List[Task]:
    """All live tasks, enabled or not; callers skip those with a zero interval."""
    g = generators
    return [
        NormalOrdersTask(g.orders, g.cancellations, emitter, scheduler),
        FalsePositivesTask(g.false_positives, emitter, scheduler),
        SuspiciousOrdersTask(g.suspicious, emitter, scheduler),
        NewCustomerTask(g.new_customers, g.orders, emitter, scheduler),
        OnlineActivityTask(
            settings.timings.online_sessions,
            settings.timings.click_tracking_max_interval,
            g.online_activity,
            g.out_of_stocks,
            emitter,
            scheduler,
            new_customers_ratio=settings.duplicates.new_customers,
        ),
        OnlineOrdersTask(g.online_orders, g.out_of_stocks, emitter, scheduler),
        AbandonedOrdersTask(g.abandoned_orders, emitter, scheduler),
        ReturnRequestsTask(g.return_requests, g.product_reviews, emitter, scheduler),
        ProductReviewsTask(g.product_reviews, emitter, scheduler),
        PeriodicTask("stock-movements", g.stock_movements, EventTopic.STOCK_MOVEMENTS, emitter, scheduler),
        PeriodicTask("badge-ins", g.badge_ins, EventTopic.BADGE_INS, emitter, scheduler),
        PeriodicTask("sensor-readings", g.sensor_readings, EventTopic.SENSOR_READINGS, emitter, scheduler),
        PeriodicTask(
            "high-sensor-readings",
            g.high_sensor_readings,
            EventTopic.SENSOR_READINGS,
            emitter,
            scheduler,
        ),
        PeriodicTask("transactions", g.transactions, EventTopic.TRANSACTIONS, emitter, scheduler),
    ]


def build_producer(app_config: AppConfig, settings: DatagenSettings) -> KafkaEventProducer:
    """
    Build a fully wired KafkaEventProducer instance.

    Returns:
        KafkaEventProducer: producer with per-topic JSON Schema serializers.
    """
    kafka_cfg: Final = app_config.kafka
    client = build_schema_registry_client(kafka_cfg)
    return KafkaEventProducer(
        cfg=kafka_cfg,
        topics=settings.topics,
        value_serializer=build_value_serializer(client, settings.topics),
    )
