"""
Wishlist store — unique per (owner, product).
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore._types import OwnerId, ProductId
from storecore.wishlist._types import WishlistEntry


class WishlistStore(Protocol):
    async def add(self, entry: WishlistEntry) -> Result[bool, ShopError]:
        """Returns Ok(False) if the pair was already saved."""
        ...

    async def remove(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        ...

    async def list_for_owner(self, owner_id: OwnerId) -> Result[list[WishlistEntry], ShopError]:
        """Newest first."""
        ...


__all__ = ("WishlistStore",)
