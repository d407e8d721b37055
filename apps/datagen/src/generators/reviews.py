"""
Product reviews drawn from a bundled corpus of sample reviews.

Each corpus row carries a star rating, an optional comment and two fit
rankings (Size, Length) where 2 means "spot on". Reviews whose size ranking
is off form the size-issue pool, used to make products that are known to
have a size issue collect the matching complaints.
"""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.generators.base import Clock, PeriodicGenerator
from apps.datagen.src.generators.products import ProductGenerator
from libs.models.events import Characteristic, Product, ProductReview, Review

logger = logging.getLogger(__name__)

DEFAULT_CORPUS_PATH = Path(__file__).resolve().parents[1] / "resources" / "reviews.csv"

CHARACTERISTICS = ("Size", "Length")


class ReferenceDataError(RuntimeError):
    """Raised when the review corpus is missing or cannot be parsed."""


def load_reviews(path: Union[str, Path, None] = None) -> List[Review]:
    """
    Parse the review corpus.

    Raises:
        ReferenceDataError: if the file is missing, unreadable, malformed or
            holds no reviews.
    """
    corpus = Path(path) if path else DEFAULT_CORPUS_PATH
    try:
        with corpus.open(newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f, skipinitialspace=True)
            reviews = [
                Review(
                    rating=int(row["Rating"]),
                    comment=(row.get("Comment") or "").strip() or None,
                    characteristics=[
                        Characteristic(id=name, ranking=int(row[name]))
                        for name in CHARACTERISTICS
                    ],
                )
                for row in reader
            ]
    except OSError as exc:
        raise ReferenceDataError(f"cannot read review corpus {corpus}") from exc
    except (KeyError, TypeError, ValueError) as exc:
        raise ReferenceDataError(f"malformed review corpus {corpus}: {exc}") from exc

    if not reviews:
        raise ReferenceDataError(f"review corpus {corpus} is empty")

    logger.info("Loaded review corpus", extra={"path": str(corpus), "reviews": len(reviews)})
    return reviews


class ProductReviewGenerator(PeriodicGenerator[ProductReview]):
    """
    Args:
        size_issue_products: Products with a size issue, keyed by short
            description. Shared with the return request generator.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        size_issue_products: Dict[str, Product],
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.product_reviews,
            max_delay_secs=settings.delays.product_reviews,
            duplicates_ratio=settings.duplicates.product_reviews,
            timestamp_format=settings.formats.timestamps_ltz,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.reviews
        self._products = ProductGenerator(settings.products, rng)
        self.size_issue_products = size_issue_products
        self.reviews = load_reviews(self._cfg.corpus_path)
        # size is the first characteristic
        self.size_issue_reviews = [r for r in self.reviews if r.characteristics[0].has_issue]
        if not self.size_issue_reviews:
            raise ReferenceDataError("review corpus has no reviews with a size issue")

    def delay_ms(self) -> int:
        return self.rng.random_int(self._cfg.min_delay_ms, self._cfg.max_delay_ms)

    def generate_event(self, timestamp: datetime) -> ProductReview:
        return self.generate_for(self._products.generate(), timestamp)

    def generate_for(self, product: Product, timestamp: Optional[datetime] = None) -> ProductReview:
        timestamp = timestamp or self.now()
        if product.short_description in self.size_issue_products and self.rng.should_do(
            self._cfg.review_with_size_issue_ratio
        ):
            review = self.rng.random_item(self.size_issue_reviews)
        else:
            review = self.rng.random_item(self.reviews)
        return ProductReview(
            id=self.rng.uuid(),
            product=product.short_description,
            size=product.size,
            review=review,
            reviewtime=self.format_timestamp(timestamp),
            event_time=timestamp,
        )
