"""
loosehanger datagen shared library package.

This package contains:
- shared Pydantic models (business events and their nested value types)
- global configuration (Kafka, OTEL, service runtime)
- observability utilities (logging, tracing, metrics)
"""

from libs.models.events import (
    AbandonedOrder,
    BadgeIn,
    Cancellation,
    ClickEvent,
    ClickEventType,
    DatagenEvent,
    NewCustomer,
    OnlineOrder,
    Order,
    OutOfStock,
    ProductReview,
    ReturnRequest,
    SensorReading,
    StockMovement,
    Transaction,
    TransactionState,
)

__all__ = [
    "AbandonedOrder",
    "BadgeIn",
    "Cancellation",
    "ClickEvent",
    "ClickEventType",
    "DatagenEvent",
    "NewCustomer",
    "OnlineOrder",
    "Order",
    "OutOfStock",
    "ProductReview",
    "ReturnRequest",
    "SensorReading",
    "StockMovement",
    "Transaction",
    "TransactionState",
]
