"""
Cart store — line items keyed by (owner, product).
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore._types import OwnerId, ProductId
from storecore.cart._types import CartLine


class CartStore(Protocol):
    async def get_lines(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        """Lines in insertion order. Ok([]) for an unknown owner."""
        ...

    async def put_line(self, owner_id: OwnerId, line: CartLine) -> Result[None, ShopError]:
        """Insert, or replace the line for the same product."""
        ...

    async def delete_line(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        """Returns Ok(True) if the line existed."""
        ...

    async def clear(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        """Remove every line, returning what was removed."""
        ...


__all__ = ("CartStore",)
