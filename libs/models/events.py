"""
Business event models + supporting value types.

These models are the typed contract for every record the datagen service
produces. Field names are the wire field names; anything that only exists to
correlate events inside the generator (the authoritative `event_time`, the
full order behind a cancellation, the product objects behind an online
order) is excluded from serialization.
"""

from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ClickEventType(str, Enum):
    PAGE_VIEW = "PAGE_VIEW"
    SEARCH = "SEARCH"
    PRODUCT_VIEW = "PRODUCT_VIEW"
    ADD_TO_CART = "ADD_TO_CART"
    REMOVE_FROM_CART = "REMOVE_FROM_CART"
    CART_VIEW = "CART_VIEW"
    CHECKOUT_START = "CHECKOUT_START"
    CHECKOUT_COMPLETE = "CHECKOUT_COMPLETE"
    LOGIN = "LOGIN"


class TransactionState(str, Enum):
    STARTED = "STARTED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class _Event(_Frozen):
    KEY_FIELD: ClassVar[str] = "id"

    @property
    def record_key(self) -> str:
        return str(getattr(self, self.KEY_FIELD))


# ---------------------------------------------------------------------------
# Nested value types
# ---------------------------------------------------------------------------


class Customer(_Frozen):
    id: str
    name: str


class OnlineCustomer(_Frozen):
    id: str
    name: str
    emails: List[str]


class Country(_Frozen):
    code: str
    name: str


class Address(_Frozen):
    number: Optional[int] = None
    street: Optional[str] = None
    city: str
    zipcode: str
    country: Country
    phones: Optional[List[str]] = None


class NamedAddress(Address):
    name: str


class OnlineAddress(_Frozen):
    shippingaddress: Address
    billingaddress: Address


class Product(_Frozen):
    """A pair of jeans, described by size, material and style."""

    size: str
    material: str
    style: str
    name: str

    @property
    def description(self) -> str:
        return f"{self.size} {self.material} {self.style} {self.name}"

    @property
    def short_description(self) -> str:
        """Description without the size, shared by every size of a product."""
        return f"{self.material} {self.style} {self.name}"


class ProductInfo(_Frozen):
    id: str
    size: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductInfo":
        return cls(id=product.short_description, size=product.size)


class Characteristic(_Frozen):
    id: str
    ranking: Optional[int] = Field(default=None, ge=1, le=3)

    @property
    def has_issue(self) -> bool:
        # 2 means "spot on"
        return self.ranking is not None and self.ranking != 2


class Review(_Frozen):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    characteristics: List[Characteristic]


class ProductReturn(_Frozen):
    product: ProductInfo
    quantity: int
    reason: str
    item: Product = Field(exclude=True)


class Device(_Frozen):
    type: str
    os: str
    resolution: str


class BrowserEnabled(_Frozen):
    cookies: bool
    javascript: bool


class Browser(_Frozen):
    name: str
    version: str
    useragent: str
    enabled: BrowserEnabled


class UserContext(_Frozen):
    device: Device
    browser: Browser
    ipaddress: str
    donottrack: bool


# ---------------------------------------------------------------------------
# Event payloads
#
# KEY_FIELD names the field used as the record key. `event_time` is the
# authoritative, timezone-aware timestamp every ordering rule keys off.
# ---------------------------------------------------------------------------


class Order(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    customer: str
    customerid: str
    description: str
    price: float = Field(gt=0)
    quantity: int = Field(ge=1)
    region: str
    ordertime: str
    event_time: datetime = Field(exclude=True)

    @property
    def customer_ref(self) -> Customer:
        return Customer(id=self.customerid, name=self.customer)


class Cancellation(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    orderid: str
    canceltime: str
    reason: str
    order: Order = Field(exclude=True)
    event_time: datetime = Field(exclude=True)


class StockMovement(_Event):
    KEY_FIELD: ClassVar[str] = "movementid"

    movementid: str
    warehouse: str
    product: str
    quantity: int
    updatetime: str
    event_time: datetime = Field(exclude=True)


class BadgeIn(_Event):
    KEY_FIELD: ClassVar[str] = "recordid"

    recordid: str
    door: str
    employee: str
    badgetime: str
    event_time: datetime = Field(exclude=True)


class SensorReading(_Event):
    KEY_FIELD: ClassVar[str] = "sensorid"

    sensortime: str
    sensorid: str
    temperature: float
    humidity: int
    event_time: datetime = Field(exclude=True)


class NewCustomer(_Event):
    KEY_FIELD: ClassVar[str] = "customerid"

    customerid: str
    customername: str
    registered: str
    event_time: datetime = Field(exclude=True)

    @property
    def customer_ref(self) -> Customer:
        return Customer(id=self.customerid, name=self.customername)


class OnlineOrder(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    customer: OnlineCustomer
    products: List[str]
    address: OnlineAddress
    ordertime: str
    items: List[Product] = Field(default_factory=list, exclude=True)
    event_time: datetime = Field(exclude=True)


class OutOfStock(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    product: Product
    restockingdate: int  # days since UNIX epoch
    outofstocktime: int  # milliseconds since UNIX epoch
    event_time: datetime = Field(exclude=True)


class ReturnRequest(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    customer: OnlineCustomer
    addresses: List[NamedAddress]
    returns: List[ProductReturn]
    returntime: str
    event_time: datetime = Field(exclude=True)


class ProductReview(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    product: str
    size: Optional[str] = None
    review: Review
    reviewtime: str
    event_time: datetime = Field(exclude=True)


class Transaction(_Event):
    KEY_FIELD: ClassVar[str] = "id"

    id: str
    state: TransactionState
    amount: float
    timestamp: str
    event_time: datetime = Field(exclude=True)


class AbandonedOrder(_Event):
    KEY_FIELD: ClassVar[str] = "cartid"

    cartid: str
    customer: OnlineCustomer
    products: List[str]
    abandonedtime: str
    event_time: datetime = Field(exclude=True)


class ClickEvent(_Event):
    KEY_FIELD: ClassVar[str] = "sessionid"

    sessionid: str
    eventid: str
    type: ClickEventType
    context: UserContext
    referrer: Optional[str] = None
    customer: Optional[OnlineCustomer] = None
    url: str
    product: Optional[str] = None
    timestamp: str
    event_time: datetime = Field(exclude=True)


DatagenEvent = Union[
    Order,
    Cancellation,
    StockMovement,
    BadgeIn,
    SensorReading,
    NewCustomer,
    OnlineOrder,
    OutOfStock,
    ReturnRequest,
    ProductReview,
    Transaction,
    AbandonedOrder,
    ClickEvent,
]

OnlineActivity = Union[ClickEvent, OnlineOrder, AbandonedOrder]
