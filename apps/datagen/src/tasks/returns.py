"""
Return requests and product reviews.
"""

from functools import partial

from apps.datagen.src.domain.models import Product
from apps.datagen.src.domain.topics import EventTopic
from apps.datagen.src.generators.returns import ReturnRequestGenerator
from apps.datagen.src.generators.reviews import ProductReviewGenerator
from apps.datagen.src.infra.scheduler import Scheduler
from apps.datagen.src.tasks.base import EventEmitter, PeriodicTask, Task


class ReturnRequestsTask(Task):
    """A return request, sometimes followed by a review of a returned product."""

    name = "return-requests"

    def __init__(
        self,
        returns: ReturnRequestGenerator,
        reviews: ProductReviewGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__(returns.interval_ms, emitter, scheduler)
        self.returns = returns
        self.reviews = reviews

    def run(self) -> None:
        request = self.returns.generate()
        self.emit(EventTopic.RETURN_REQUESTS, request, self.returns.duplicates_ratio)
        if self.returns.should_review():
            product = self.returns.reviewed_product(request)
            self.later(self.reviews.delay_ms(), partial(self._review, product))

    def _review(self, product: Product) -> None:
        review = self.reviews.generate_for(product)
        self.emit(EventTopic.PRODUCT_REVIEWS, review, self.reviews.duplicates_ratio)


class ProductReviewsTask(PeriodicTask):
    def __init__(
        self,
        reviews: ProductReviewGenerator,
        emitter: EventEmitter,
        scheduler: Scheduler,
    ) -> None:
        super().__init__("product-reviews", reviews, EventTopic.PRODUCT_REVIEWS, emitter, scheduler)
