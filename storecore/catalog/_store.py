"""
Catalog store — read-only product access.
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore._types import ProductId
from storecore.catalog._types import Product


class CatalogStore(Protocol):
    async def get_product(self, product_id: ProductId) -> Result[Product | None, ShopError]:
        """Get product with its current stock. Returns Ok(None) if not found."""
        ...

    async def list_products(self) -> Result[list[Product], ShopError]:
        """All products, ordered by id."""
        ...


__all__ = ("CatalogStore",)
