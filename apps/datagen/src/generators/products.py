"""
Product generator: random jeans from the configured catalogue.
"""

from typing import Dict

from apps.datagen.src.core.config import ProductSettings
from apps.datagen.src.core.randomness import RandomVariates
from libs.models.events import Product


class ProductGenerator:
    def __init__(self, settings: ProductSettings, rng: RandomVariates) -> None:
        self._cfg = settings
        self._rng = rng

    def generate(self) -> Product:
        return Product(
            size=self._rng.random_item(self._cfg.sizes),
            material=self._rng.random_item(self._cfg.materials),
            style=self._rng.random_item(self._cfg.styles),
            name=self._cfg.name,
        )

    def generate_set(self, count: int) -> Dict[str, Product]:
        """
        Up to `count` products keyed by short description.

        Products sharing a short description collapse into one entry, so the
        result can hold fewer than `count` items.
        """
        products: Dict[str, Product] = {}
        for _ in range(count):
            product = self.generate()
            products[product.short_description] = product
        return products

    def random_price(self) -> float:
        return self._rng.random_price(self._cfg.min_price, self._cfg.max_price)

    def reduced_price(self, price: float) -> float:
        """A price strictly below `price`, lowered by at most the configured variation."""
        return self._rng.random_price(price - self._cfg.max_price_variation, price - 0.01)
