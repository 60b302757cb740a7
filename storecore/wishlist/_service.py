"""
Wishlist service — saved products per owner.
"""

from __future__ import annotations

from datetime import UTC, datetime

from kungfu import Result, Ok, Error

from storecore._errors import ShopError, ShopErrors
from storecore._types import OwnerId, ProductId
from storecore.catalog import CatalogStore
from storecore.wishlist._store import WishlistStore
from storecore.wishlist._types import WishlistEntry


class WishlistService:
    def __init__(self, wishlist: WishlistStore, catalog: CatalogStore) -> None:
        self._wishlist = wishlist
        self._catalog = catalog

    async def add(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        """Save a product. Idempotent: Ok(False) when it was already saved."""
        match await self._catalog.get_product(product_id):
            case Ok(None):
                return Error(ShopErrors.product_not_found(product_id))
            case Ok(_):
                pass
            case Error(e):
                return Error(e)
        return await self._wishlist.add(WishlistEntry(owner_id, product_id, datetime.now(UTC)))

    async def remove(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        return await self._wishlist.remove(owner_id, product_id)

    async def list(self, owner_id: OwnerId) -> Result[list[WishlistEntry], ShopError]:
        return await self._wishlist.list_for_owner(owner_id)


__all__ = ("WishlistService",)
