"""
Catalog — read-only product lookup plus the one write inventory needs.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol

from shopsaga.inventory._types import Product


class Catalog(Protocol):
    """
    What the inventory manager needs from the product catalog.

    Search, sort and filtering live elsewhere; this is only the lookup and
    the stock write.
    """

    def get_product(self, product_id: str) -> Product | None:
        """Product by id, or None if unknown."""
        ...

    def set_stock(self, product_id: str, stock: int) -> bool:
        """Overwrite stock. False if the product is unknown or stock < 0."""
        ...


class MemoryCatalog:
    """
    In-memory catalog.

    Example:
        catalog = MemoryCatalog([
            Product("p1", "Dune", Decimal("10.00"), stock=10, category="fiction"),
        ])
    """

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[str, Product] = {p.id: p for p in products}
        self._lock = threading.Lock()

    def add(self, product: Product) -> None:
        with self._lock:
            self._products[product.id] = product

    def get_product(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def set_stock(self, product_id: str, stock: int) -> bool:
        if stock < 0:
            return False
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return False
            self._products[product_id] = replace(product, stock=stock)
        return True

    def products(self) -> list[Product]:
        return list(self._products.values())


__all__ = ("Catalog", "MemoryCatalog")
