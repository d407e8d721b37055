"""
Return requests for online purchases, biased towards products with a known
size issue, and the reviews some of them lead to.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.generators.base import Clock, PeriodicGenerator
from apps.datagen.src.generators.fakers import new_address, new_online_customer
from apps.datagen.src.generators.products import ProductGenerator
from apps.datagen.src.generators.reviews import ProductReviewGenerator
from libs.models.events import (
    Address,
    NamedAddress,
    Product,
    ProductInfo,
    ProductReturn,
    ProductReview,
    ReturnRequest,
)

BILLING_ADDRESS = "Billing address"
SHIPPING_ADDRESS = "Shipping address"


def _named(name: str, address: Address) -> NamedAddress:
    return NamedAddress(name=name, **dict(address))


class ReturnRequestGenerator(PeriodicGenerator[ReturnRequest]):
    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        size_issue_products: Dict[str, Product],
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.return_requests,
            max_delay_secs=settings.delays.return_requests,
            duplicates_ratio=settings.duplicates.return_requests,
            timestamp_format=settings.formats.timestamps_ltz,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.returns
        self._products = ProductGenerator(settings.products, rng)
        self._size_issue_products = list(size_issue_products.values())

    def _address(self) -> Address:
        return new_address(
            self.fake, self.rng, self._cfg.address_min_phones, self._cfg.address_max_phones
        )

    def _returned_product(self) -> Product:
        if self._size_issue_products and self.rng.should_do(self._cfg.product_with_size_issue_ratio):
            return self.rng.random_item(self._size_issue_products)
        return self._products.generate()

    def generate_event(self, timestamp: datetime) -> ReturnRequest:
        customer = new_online_customer(
            self.fake, self.rng, self._cfg.customer_min_emails, self._cfg.customer_max_emails
        )

        addresses = [_named(BILLING_ADDRESS, self._address())]
        if not self.rng.should_do(self._cfg.reuse_address_ratio):
            addresses.append(_named(SHIPPING_ADDRESS, self._address()))

        returns = []
        for _ in range(self.rng.random_int(self._cfg.min_products, self._cfg.max_products)):
            quantity = self.rng.random_int(self._cfg.min_quantity, self._cfg.max_quantity)
            product = self._returned_product()
            returns.append(
                ProductReturn(
                    product=ProductInfo.from_product(product),
                    quantity=quantity,
                    reason=self.rng.random_item(self._cfg.reasons),
                    item=product,
                )
            )

        return ReturnRequest(
            id=self.rng.uuid(),
            customer=customer,
            addresses=addresses,
            returns=returns,
            returntime=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def should_review(self) -> bool:
        return self.rng.should_do(self._cfg.review_ratio)

    def reviewed_product(self, request: ReturnRequest) -> Product:
        """One of the returned products, picked for a follow-up review."""
        return self.rng.random_item(request.returns).item


def generate_return_history(
    returns: ReturnRequestGenerator,
    reviews: ProductReviewGenerator,
    now: Optional[datetime] = None,
) -> Tuple[List[ReturnRequest], List[ProductReview]]:
    """
    Return requests over the history window, each possibly followed by a
    review of one of its products after the configured review delay.
    """
    requests = returns.generate_history(now)
    follow_ups: List[ProductReview] = []
    seen = set()
    for request in requests:
        if request.id in seen:
            continue
        seen.add(request.id)
        if returns.should_review():
            product = returns.reviewed_product(request)
            review_time = request.event_time + timedelta(milliseconds=reviews.delay_ms())
            reviews.append_with_duplicate(follow_ups, reviews.generate_for(product, review_time))
    return requests, follow_ups
