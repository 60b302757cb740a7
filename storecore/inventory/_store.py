"""
Stock store — per-product counters with atomic updates.

Every mutation must be atomic relative to other mutations of the same
product: a single conditional UPDATE in SQL, a lock in memory.
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore._types import ProductId
from storecore.inventory._types import StockChange


class StockStore(Protocol):
    async def get_stock(self, product_id: ProductId) -> Result[int | None, ShopError]:
        """Current level. Returns Ok(None) if the product is unknown."""
        ...

    async def decrement(
        self, product_id: ProductId, quantity: int
    ) -> Result[StockChange | None, ShopError]:
        """Subtract, floored at zero. Never fails on low stock."""
        ...

    async def increment(
        self, product_id: ProductId, quantity: int
    ) -> Result[StockChange | None, ShopError]:
        """Add, unbounded."""
        ...

    async def reserve(
        self, product_id: ProductId, quantity: int
    ) -> Result[StockChange | None, ShopError]:
        """
        Subtract only if `stock >= quantity`.

        Returns Error(INSUFFICIENT_STOCK) otherwise; the level is untouched.
        """
        ...


__all__ = ("StockStore",)
