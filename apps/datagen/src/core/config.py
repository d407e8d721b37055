"""
Service-specific configuration for the datagen service.

This module ONLY handles generation settings: rates, ratios, delays,
reference lists and topic names. Kafka/OTEL runtime settings live in
`libs.config.AppConfig`.

It reads from the environment using namespaced, nested keys:

    DATAGEN__SEED=42
    DATAGEN__TIMINGS__ORDERS=30000
    DATAGEN__CANCELLATIONS__RATIO=0.005
    DATAGEN__LOCATIONS__REGIONS='["NA", "EMEA"]'
    DATAGEN__TOPICS__ORDERS=ORDERS.NEW

Values are validated here so the generation engine can trust them as-is.
"""

from functools import lru_cache
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from apps.datagen.src.domain.topics import EventTopic


def _check_ranges(model: BaseModel, *pairs: Tuple[str, str]) -> None:
    for low, high in pairs:
        if getattr(model, low) > getattr(model, high):
            raise ValueError(f"{low} must not be greater than {high}")


class FormatSettings(BaseModel):
    """strftime patterns for payload timestamps; `%f` renders milliseconds."""

    timestamps: str = "%Y-%m-%d %H:%M:%S.%f"
    timestamps_ltz: str = "%Y-%m-%d %H:%M:%S.%f%z"
    sensor_timestamps: str = "%a %b %d %H:%M:%S %Z %Y"


class TopicSettings(BaseModel):
    orders: str = "ORDERS.NEW"
    cancellations: str = "CANCELLATIONS"
    stock_movements: str = "STOCK.MOVEMENT"
    badge_ins: str = "DOOR.BADGEIN"
    new_customers: str = "CUSTOMERS.NEW"
    sensor_readings: str = "SENSOR.READINGS"
    online_orders: str = "ORDERS.ONLINE"
    out_of_stocks: str = "STOCK.NOSTOCK"
    return_requests: str = "PRODUCT.RETURNS"
    product_reviews: str = "PRODUCT.REVIEWS"
    transactions: str = "TRANSACTIONS"
    click_tracking: str = "CLICKTRACKING"
    abandoned_orders: str = "ORDERS.ABANDONED"

    def name_for(self, topic: EventTopic) -> str:
        """Resolve a topic hint into the configured Kafka topic name."""
        return getattr(self, topic.value)

    def all_names(self) -> List[str]:
        return [self.name_for(topic) for topic in EventTopic]


class LocationSettings(BaseModel):
    regions: List[str] = Field(
        default_factory=lambda: ["NA", "SA", "EMEA", "APAC", "ANZ"], min_length=1
    )
    warehouses: List[str] = Field(
        default_factory=lambda: ["North", "South", "West", "East", "Central"],
        min_length=1,
    )
    buildings: List[str] = Field(
        default_factory=lambda: [
            "Abbeville", "Bridgewater", "Chesterton", "Dunmore", "Eastgate", "Fairhaven",
        ],
        min_length=1,
        description="Office buildings used for badge-in doors and sensors.",
    )


class ProductSettings(BaseModel):
    sizes: List[str] = Field(
        default_factory=lambda: ["XXS", "XS", "S", "M", "L", "XL", "XXL"], min_length=1
    )
    materials: List[str] = Field(
        default_factory=lambda: [
            "Classic", "Retro", "Navy", "Stonewashed", "Acid-washed", "Blue",
            "Black", "White", "Khaki", "Denim", "Jeggings",
        ],
        min_length=1,
    )
    styles: List[str] = Field(
        default_factory=lambda: [
            "Skinny", "Bootcut", "Flare", "Ripped", "Capri", "Jogger", "Crochet",
            "High-waist", "Low-rise", "Straight-leg", "Boyfriend", "Mom",
            "Wide-leg", "Jorts", "Cargo", "Tall",
        ],
        min_length=1,
    )
    name: str = "Jeans"

    min_price: float = Field(default=14.99, gt=0)
    max_price: float = Field(default=59.99, gt=0)
    max_price_variation: float = Field(default=9.99, ge=0.01)

    @model_validator(mode="after")
    def _validate(self) -> "ProductSettings":
        _check_ranges(self, ("min_price", "max_price"))
        if self.min_price - self.max_price_variation <= 0:
            raise ValueError("max_price_variation must leave reduced prices positive")
        return self


class OrderSettings(BaseModel):
    small_min: int = Field(default=1, ge=1)
    small_max: int = Field(default=5, ge=1)
    large_min: int = Field(default=5, ge=1)
    large_max: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _validate(self) -> "OrderSettings":
        _check_ranges(self, ("small_min", "small_max"), ("large_min", "large_max"))
        return self


class CancellationSettings(BaseModel):
    ratio: float = Field(default=0.005, ge=0.0, le=1.0)
    min_delay_ms: int = Field(default=300_000, ge=0)
    max_delay_ms: int = Field(default=7_200_000, ge=0)
    reasons: List[str] = Field(
        default_factory=lambda: ["CHANGEDMIND", "BADFIT"], min_length=1
    )

    @model_validator(mode="after")
    def _validate(self) -> "CancellationSettings":
        _check_ranges(self, ("min_delay_ms", "max_delay_ms"))
        return self


class SuspiciousOrderSettings(BaseModel):
    min_delay_ms: int = Field(default=900_000, ge=1_000)
    max_delay_ms: int = Field(default=1_800_000, ge=1_000)
    max_cancelled: int = Field(default=3, ge=1)
    customers: List[str] = Field(
        default_factory=lambda: [
            "Suspicious Bob", "Naughty Nigel", "Criminal Clive", "Dastardly Derek",
        ],
        min_length=1,
    )

    @model_validator(mode="after")
    def _validate(self) -> "SuspiciousOrderSettings":
        _check_ranges(self, ("min_delay_ms", "max_delay_ms"))
        if self.min_delay_ms < 30_000:
            raise ValueError("min_delay_ms must leave room for the follow-up small order")
        return self


class NewCustomerSettings(BaseModel):
    order_ratio: float = Field(default=0.22, ge=0.0, le=1.0)
    order_min_delay_ms: int = Field(default=180_000, ge=0)
    order_max_delay_ms: int = Field(default=1_380_000, ge=0)

    @model_validator(mode="after")
    def _validate(self) -> "NewCustomerSettings":
        _check_ranges(self, ("order_min_delay_ms", "order_max_delay_ms"))
        return self


class OnlineSettings(BaseModel):
    """Online sessions, click tracking and online orders."""

    base_url: str = "https://www.loosehangerjeans.com"
    max_sessions: int = Field(default=50, ge=1)
    session_id_attempts: int = Field(default=10, ge=1)
    recent_customers_capacity: int = Field(default=3, ge=1)
    max_events: int = Field(default=30, ge=1)
    logged_in_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    marketing_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    abandonment_ratio: float = Field(default=0.1, ge=0.0, le=1.0)

    min_products: int = Field(default=1, ge=1)
    max_products: int = Field(default=5, ge=1)
    customer_min_emails: int = Field(default=1, ge=1)
    customer_max_emails: int = Field(default=2, ge=1)
    address_min_phones: int = Field(default=0, ge=0)
    address_max_phones: int = Field(default=2, ge=0)
    reuse_address_ratio: float = Field(default=0.55, ge=0.0, le=1.0)
    cities: List[str] = Field(default_factory=list)
    out_of_stock_ratio: float = Field(default=0.22, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _validate(self) -> "OnlineSettings":
        _check_ranges(
            self,
            ("min_products", "max_products"),
            ("customer_min_emails", "customer_max_emails"),
            ("address_min_phones", "address_max_phones"),
        )
        return self


class OutOfStockSettings(BaseModel):
    min_delay_ms: int = Field(default=600_000, ge=0)
    max_delay_ms: int = Field(default=3_600_000, ge=0)
    restocking_min_days: int = Field(default=1, ge=0)
    restocking_max_days: int = Field(default=14, ge=0)

    @model_validator(mode="after")
    def _validate(self) -> "OutOfStockSettings":
        _check_ranges(
            self,
            ("min_delay_ms", "max_delay_ms"),
            ("restocking_min_days", "restocking_max_days"),
        )
        return self


class ReturnRequestSettings(BaseModel):
    min_products: int = Field(default=1, ge=1)
    max_products: int = Field(default=3, ge=1)
    min_quantity: int = Field(default=1, ge=1)
    max_quantity: int = Field(default=2, ge=1)
    reasons: List[str] = Field(
        default_factory=lambda: [
            "TOOSMALL", "TOOLARGE", "BADFIT", "DAMAGED", "NOTASDESCRIBED", "CHANGEDMIND",
        ],
        min_length=1,
    )
    customer_min_emails: int = Field(default=1, ge=1)
    customer_max_emails: int = Field(default=2, ge=1)
    address_min_phones: int = Field(default=0, ge=0)
    address_max_phones: int = Field(default=2, ge=0)
    reuse_address_ratio: float = Field(default=0.75, ge=0.0, le=1.0)
    product_with_size_issue_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    review_ratio: float = Field(default=0.32, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _validate(self) -> "ReturnRequestSettings":
        _check_ranges(
            self,
            ("min_products", "max_products"),
            ("min_quantity", "max_quantity"),
            ("customer_min_emails", "customer_max_emails"),
            ("address_min_phones", "address_max_phones"),
        )
        return self


class ProductReviewSettings(BaseModel):
    min_delay_ms: int = Field(default=1_800_000, ge=0)
    max_delay_ms: int = Field(default=14_400_000, ge=0)
    review_with_size_issue_ratio: float = Field(default=0.7, ge=0.0, le=1.0)
    size_issue_product_count: int = Field(default=10, ge=1)
    corpus_path: Optional[str] = Field(
        default=None,
        description="CSV of sample reviews; defaults to the bundled corpus.",
    )

    @model_validator(mode="after")
    def _validate(self) -> "ProductReviewSettings":
        _check_ranges(self, ("min_delay_ms", "max_delay_ms"))
        return self


class TransactionSettings(BaseModel):
    ids: int = Field(default=10, ge=2, description="Pool size; ids run T1..T{ids-1}.")
    min_amount: float = Field(default=10.0, ge=0.0)
    max_amount: float = Field(default=500.0, ge=0.0)

    @model_validator(mode="after")
    def _validate(self) -> "TransactionSettings":
        _check_ranges(self, ("min_amount", "max_amount"))
        return self


class AbandonedOrderSettings(BaseModel):
    min_products: int = Field(default=1, ge=1)
    max_products: int = Field(default=4, ge=1)
    customer_min_emails: int = Field(default=1, ge=1)
    customer_max_emails: int = Field(default=2, ge=1)

    @model_validator(mode="after")
    def _validate(self) -> "AbandonedOrderSettings":
        _check_ranges(
            self,
            ("min_products", "max_products"),
            ("customer_min_emails", "customer_max_emails"),
        )
        return self


class TimingSettings(BaseModel):
    """Milliseconds between task runs; 0 disables a task."""

    orders: int = Field(default=30_000, ge=0)
    false_positives: int = Field(default=600_000, ge=0)
    suspicious_orders: int = Field(default=3_600_000, ge=0)
    stock_movements: int = Field(default=300_000, ge=0)
    badge_ins: int = Field(default=600, ge=0)
    new_customers: int = Field(default=543_400, ge=0)
    sensor_readings: int = Field(default=27_000, ge=0)
    high_sensor_readings: int = Field(default=30_000, ge=0)
    online_sessions: int = Field(default=30_000, ge=0)
    online_orders: int = Field(default=0, ge=0)
    abandoned_orders: int = Field(default=0, ge=0)
    return_requests: int = Field(default=1_200_000, ge=0)
    product_reviews: int = Field(default=900_000, ge=0)
    transactions: int = Field(default=15_000, ge=0)
    click_tracking_max_interval: int = Field(default=15_000, ge=3_000)


class DelaySettings(BaseModel):
    """Maximum publish-delay jitter, in seconds, per event kind."""

    orders: int = Field(default=0, ge=0)
    cancellations: int = Field(default=0, ge=0)
    stock_movements: int = Field(default=0, ge=0)
    badge_ins: int = Field(default=180, ge=0)
    new_customers: int = Field(default=0, ge=0)
    sensor_readings: int = Field(default=300, ge=0)
    online_orders: int = Field(default=0, ge=0)
    out_of_stocks: int = Field(default=0, ge=0)
    return_requests: int = Field(default=0, ge=0)
    product_reviews: int = Field(default=0, ge=0)
    transactions: int = Field(default=0, ge=0)
    abandoned_orders: int = Field(default=0, ge=0)


class DuplicateSettings(BaseModel):
    """Ratio of events emitted twice, per event kind."""

    orders: float = Field(default=0.0, ge=0.0, le=1.0)
    cancellations: float = Field(default=0.0, ge=0.0, le=1.0)
    stock_movements: float = Field(default=0.1, ge=0.0, le=1.0)
    badge_ins: float = Field(default=0.0, ge=0.0, le=1.0)
    new_customers: float = Field(default=0.0, ge=0.0, le=1.0)
    sensor_readings: float = Field(default=0.0, ge=0.0, le=1.0)
    online_orders: float = Field(default=0.0, ge=0.0, le=1.0)
    click_tracking: float = Field(default=0.0, ge=0.0, le=1.0)
    out_of_stocks: float = Field(default=0.0, ge=0.0, le=1.0)
    return_requests: float = Field(default=0.0, ge=0.0, le=1.0)
    product_reviews: float = Field(default=0.0, ge=0.0, le=1.0)
    transactions: float = Field(default=0.0, ge=0.0, le=1.0)
    abandoned_orders: float = Field(default=0.0, ge=0.0, le=1.0)


class HistorySettings(BaseModel):
    enabled: bool = True
    session_interval_secs: int = Field(default=120, ge=1)
    event_interval_secs: int = Field(default=10, ge=1)


class DatagenSettings(BaseSettings):
    """
    Settings controlling synthetic business-event generation.

    Values come from environment variables prefixed with `DATAGEN__`.
    """

    seed: Optional[int] = Field(
        default=None,
        description="Seed for every random draw; unset means non-deterministic.",
    )
    locale: str = "en_US"

    formats: FormatSettings = Field(default_factory=FormatSettings)
    topics: TopicSettings = Field(default_factory=TopicSettings)
    locations: LocationSettings = Field(default_factory=LocationSettings)
    products: ProductSettings = Field(default_factory=ProductSettings)
    orders: OrderSettings = Field(default_factory=OrderSettings)
    cancellations: CancellationSettings = Field(default_factory=CancellationSettings)
    suspicious: SuspiciousOrderSettings = Field(default_factory=SuspiciousOrderSettings)
    new_customers: NewCustomerSettings = Field(default_factory=NewCustomerSettings)
    online: OnlineSettings = Field(default_factory=OnlineSettings)
    out_of_stocks: OutOfStockSettings = Field(default_factory=OutOfStockSettings)
    returns: ReturnRequestSettings = Field(default_factory=ReturnRequestSettings)
    reviews: ProductReviewSettings = Field(default_factory=ProductReviewSettings)
    transactions: TransactionSettings = Field(default_factory=TransactionSettings)
    abandoned_orders: AbandonedOrderSettings = Field(default_factory=AbandonedOrderSettings)
    timings: TimingSettings = Field(default_factory=TimingSettings)
    delays: DelaySettings = Field(default_factory=DelaySettings)
    duplicates: DuplicateSettings = Field(default_factory=DuplicateSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)

    poll_interval_sec: float = Field(
        default=0.2,
        gt=0.0,
        description="Seconds between drains of the generated-record queue.",
    )

    model_config = SettingsConfigDict(
        env_prefix="DATAGEN__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_datagen_settings() -> DatagenSettings:
    """
    Cached accessor for DatagenSettings.

    Returns:
        DatagenSettings: validated generation configuration.
    """
    return DatagenSettings()
