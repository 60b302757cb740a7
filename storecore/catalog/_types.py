"""
Catalog types — the read contract the core relies on.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storecore._types import Money, ProductId, ZERO


class ProductStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass(frozen=True, slots=True)
class Product:
    """
    Product as seen by the core.

    Price, sale price and category are never written here; stock
    changes only through the inventory ledger.
    """

    id: ProductId
    title: str
    price: Money
    stock: int
    category: str = ""
    sale_price: Money | None = None
    rating: Decimal = ZERO
    status: ProductStatus = ProductStatus.PUBLISHED

    @property
    def effective_price(self) -> Money:
        """Sale price when one is set, list price otherwise."""
        if self.sale_price is not None and self.sale_price > ZERO:
            return self.sale_price
        return self.price

    @property
    def on_sale(self) -> bool:
        return self.effective_price < self.price


__all__ = ("ProductStatus", "Product")
