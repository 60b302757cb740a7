"""
Review store — unique per (owner, product, order).
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore._types import OrderId, OwnerId, ProductId
from storecore.reviews._types import Review


class ReviewStore(Protocol):
    async def insert_if_absent(self, review: Review) -> Result[bool, ShopError]:
        """
        Insert unless the triple is already reviewed.

        Returns Ok(False) if it is. Must be atomic.
        """
        ...

    async def get(
        self, owner_id: OwnerId, product_id: ProductId, order_id: OrderId
    ) -> Result[Review | None, ShopError]:
        ...

    async def list_for_product(self, product_id: ProductId) -> Result[list[Review], ShopError]:
        """Newest first."""
        ...


__all__ = ("ReviewStore",)
