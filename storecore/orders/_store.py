"""
Order store — orders with their frozen lines.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore._types import OrderId, OwnerId
from storecore.orders._types import Order, OrderStatus


class OrderStore(Protocol):
    async def insert(self, order: Order) -> Result[bool, ShopError]:
        """
        Insert order and lines in one write.

        Returns Ok(False) if the owner already has an order with the
        same idempotency key. Must be atomic.
        """
        ...

    async def delete(self, order_id: OrderId) -> Result[bool, ShopError]:
        """Delete order and lines. Returns Ok(True) if it existed."""
        ...

    async def get(self, order_id: OrderId) -> Result[Order | None, ShopError]:
        """Returns Ok(None) if not found."""
        ...

    async def find_by_idempotency_key(
        self, owner_id: OwnerId, key: str
    ) -> Result[Order | None, ShopError]:
        ...

    async def list_for_owner(self, owner_id: OwnerId) -> Result[list[Order], ShopError]:
        """Newest first."""
        ...

    async def list_all(self) -> Result[list[Order], ShopError]:
        """Newest first."""
        ...

    async def compare_and_set_status(
        self,
        order_id: OrderId,
        expected: OrderStatus,
        new: OrderStatus,
        at: datetime,
    ) -> Result[bool, ShopError]:
        """
        Set status only if it still equals `expected`.

        Returns Ok(False) when the stored status differs (or the order
        is gone). Must be atomic (compare-and-swap).
        """
        ...


__all__ = ("OrderStore",)
