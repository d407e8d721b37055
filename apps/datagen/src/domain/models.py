"""
Domain-level model re-exports.

We reuse the global shared Pydantic models in libs.models.events so that
all services share the same event contract.
"""

from libs.models.events import (
    AbandonedOrder,
    Address,
    BadgeIn,
    Browser,
    BrowserEnabled,
    Cancellation,
    Characteristic,
    ClickEvent,
    ClickEventType,
    Country,
    Customer,
    DatagenEvent,
    Device,
    NamedAddress,
    NewCustomer,
    OnlineActivity,
    OnlineAddress,
    OnlineCustomer,
    OnlineOrder,
    Order,
    OutOfStock,
    Product,
    ProductInfo,
    ProductReturn,
    ProductReview,
    ReturnRequest,
    Review,
    SensorReading,
    StockMovement,
    Transaction,
    TransactionState,
    UserContext,
)

__all__ = [
    "AbandonedOrder",
    "Address",
    "BadgeIn",
    "Browser",
    "BrowserEnabled",
    "Cancellation",
    "Characteristic",
    "ClickEvent",
    "ClickEventType",
    "Country",
    "Customer",
    "DatagenEvent",
    "Device",
    "NamedAddress",
    "NewCustomer",
    "OnlineActivity",
    "OnlineAddress",
    "OnlineCustomer",
    "OnlineOrder",
    "Order",
    "OutOfStock",
    "Product",
    "ProductInfo",
    "ProductReturn",
    "ProductReview",
    "ReturnRequest",
    "Review",
    "SensorReading",
    "StockMovement",
    "Transaction",
    "TransactionState",
    "UserContext",
]
