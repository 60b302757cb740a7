"""
In-memory backend.

Note: single-process only. Each store guards its state with one
asyncio.Lock, which makes every call atomic; nothing survives a restart.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

from kungfu import Result, Ok, Error

from storecore._errors import ShopError, ShopErrors
from storecore._types import OrderId, OwnerId, ProductId
from storecore.cart import CartLine
from storecore.catalog import Product
from storecore.inventory import StockChange
from storecore.orders import Order, OrderStatus
from storecore.reviews import Review
from storecore.wishlist import WishlistEntry

# ═══════════════════════════════════════════════════════════════════════════════
# Catalog + Stock
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCatalog:
    """CatalogStore and StockStore over one product table."""

    def __init__(self) -> None:
        self._products: dict[ProductId, Product] = {}
        self._lock = asyncio.Lock()

    async def put_product(self, product: Product) -> Result[None, ShopError]:
        """Seed or replace a product (fixtures only)."""
        async with self._lock:
            self._products[product.id] = product
            return Ok(None)

    async def get_product(self, product_id: ProductId) -> Result[Product | None, ShopError]:
        async with self._lock:
            return Ok(self._products.get(product_id))

    async def list_products(self) -> Result[list[Product], ShopError]:
        async with self._lock:
            return Ok(sorted(self._products.values(), key=lambda p: p.id))

    async def get_stock(self, product_id: ProductId) -> Result[int | None, ShopError]:
        async with self._lock:
            product = self._products.get(product_id)
            return Ok(None if product is None else product.stock)

    async def decrement(self, product_id: ProductId, quantity: int) -> Result[StockChange | None, ShopError]:
        async with self._lock:
            return Ok(self._set(product_id, quantity, lambda level: max(0, level - quantity)))

    async def increment(self, product_id: ProductId, quantity: int) -> Result[StockChange | None, ShopError]:
        async with self._lock:
            return Ok(self._set(product_id, quantity, lambda level: level + quantity))

    async def reserve(self, product_id: ProductId, quantity: int) -> Result[StockChange | None, ShopError]:
        async with self._lock:
            product = self._products.get(product_id)
            if product is not None and product.stock < quantity:
                return Error(ShopErrors.insufficient_stock(product_id, quantity, product.stock))
            return Ok(self._set(product_id, quantity, lambda level: level - quantity))

    def _set(self, product_id: ProductId, requested: int, update: Callable[[int], int]) -> StockChange | None:
        product = self._products.get(product_id)
        if product is None:
            return None
        after = update(product.stock)
        self._products[product_id] = replace(product, stock=after)
        return StockChange(product_id, requested, product.stock, after)


# ═══════════════════════════════════════════════════════════════════════════════
# Carts
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCarts:
    def __init__(self) -> None:
        self._carts: dict[OwnerId, dict[ProductId, CartLine]] = {}
        self._lock = asyncio.Lock()

    async def get_lines(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        async with self._lock:
            return Ok(list(self._carts.get(owner_id, {}).values()))

    async def put_line(self, owner_id: OwnerId, line: CartLine) -> Result[None, ShopError]:
        async with self._lock:
            self._carts.setdefault(owner_id, {})[line.product_id] = line
            return Ok(None)

    async def delete_line(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        async with self._lock:
            return Ok(self._carts.get(owner_id, {}).pop(product_id, None) is not None)

    async def clear(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        async with self._lock:
            removed = self._carts.pop(owner_id, {})
            return Ok(list(removed.values()))


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryOrders:
    def __init__(self) -> None:
        self._orders: dict[OrderId, Order] = {}
        self._keys: dict[tuple[OwnerId, str], OrderId] = {}
        self._lock = asyncio.Lock()

    async def insert(self, order: Order) -> Result[bool, ShopError]:
        async with self._lock:
            if order.idempotency_key is not None:
                key = (order.owner_id, order.idempotency_key)
                if key in self._keys:
                    return Ok(False)
                self._keys[key] = order.id
            self._orders[order.id] = order
            return Ok(True)

    async def delete(self, order_id: OrderId) -> Result[bool, ShopError]:
        async with self._lock:
            order = self._orders.pop(order_id, None)
            if order is None:
                return Ok(False)
            if order.idempotency_key is not None:
                self._keys.pop((order.owner_id, order.idempotency_key), None)
            return Ok(True)

    async def get(self, order_id: OrderId) -> Result[Order | None, ShopError]:
        async with self._lock:
            return Ok(self._orders.get(order_id))

    async def find_by_idempotency_key(self, owner_id: OwnerId, key: str) -> Result[Order | None, ShopError]:
        async with self._lock:
            order_id = self._keys.get((owner_id, key))
            return Ok(None if order_id is None else self._orders.get(order_id))

    async def list_for_owner(self, owner_id: OwnerId) -> Result[list[Order], ShopError]:
        async with self._lock:
            return Ok(_newest_first(o for o in self._orders.values() if o.owner_id == owner_id))

    async def list_all(self) -> Result[list[Order], ShopError]:
        async with self._lock:
            return Ok(_newest_first(self._orders.values()))

    async def compare_and_set_status(
        self,
        order_id: OrderId,
        expected: OrderStatus,
        new: OrderStatus,
        at: datetime,
    ) -> Result[bool, ShopError]:
        async with self._lock:
            order = self._orders.get(order_id)
            if order is None or order.status is not expected:
                return Ok(False)
            self._orders[order_id] = replace(order, status=new, updated_at=at)
            return Ok(True)


def _newest_first(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Reviews
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryReviews:
    def __init__(self) -> None:
        self._reviews: dict[tuple[OwnerId, ProductId, OrderId], Review] = {}
        self._lock = asyncio.Lock()

    async def insert_if_absent(self, review: Review) -> Result[bool, ShopError]:
        async with self._lock:
            key = (review.owner_id, review.product_id, review.order_id)
            if key in self._reviews:
                return Ok(False)
            self._reviews[key] = review
            return Ok(True)

    async def get(
        self, owner_id: OwnerId, product_id: ProductId, order_id: OrderId
    ) -> Result[Review | None, ShopError]:
        async with self._lock:
            return Ok(self._reviews.get((owner_id, product_id, order_id)))

    async def list_for_product(self, product_id: ProductId) -> Result[list[Review], ShopError]:
        async with self._lock:
            found = [r for r in self._reviews.values() if r.product_id == product_id]
            return Ok(sorted(found, key=lambda r: r.created_at, reverse=True))


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


class MemorySettings:
    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values = dict(values or {})
        self._lock = asyncio.Lock()

    async def load(self) -> Result[dict[str, str], ShopError]:
        async with self._lock:
            return Ok(dict(self._values))

    async def save(self, key: str, value: str) -> Result[None, ShopError]:
        async with self._lock:
            self._values[key] = value
            return Ok(None)


# ═══════════════════════════════════════════════════════════════════════════════
# Wishlist
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryWishlist:
    def __init__(self) -> None:
        self._entries: dict[tuple[OwnerId, ProductId], WishlistEntry] = {}
        self._lock = asyncio.Lock()

    async def add(self, entry: WishlistEntry) -> Result[bool, ShopError]:
        async with self._lock:
            key = (entry.owner_id, entry.product_id)
            if key in self._entries:
                return Ok(False)
            self._entries[key] = entry
            return Ok(True)

    async def remove(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        async with self._lock:
            return Ok(self._entries.pop((owner_id, product_id), None) is not None)

    async def list_for_owner(self, owner_id: OwnerId) -> Result[list[WishlistEntry], ShopError]:
        async with self._lock:
            found = [e for e in self._entries.values() if e.owner_id == owner_id]
            return Ok(sorted(found, key=lambda e: e.added_at, reverse=True))


# ═══════════════════════════════════════════════════════════════════════════════
# Backend
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class MemoryBackend:
    """Every store, in memory. The catalog doubles as the stock store."""

    catalog: MemoryCatalog = field(default_factory=MemoryCatalog)
    carts: MemoryCarts = field(default_factory=MemoryCarts)
    orders: MemoryOrders = field(default_factory=MemoryOrders)
    reviews: MemoryReviews = field(default_factory=MemoryReviews)
    settings: MemorySettings = field(default_factory=MemorySettings)
    wishlist: MemoryWishlist = field(default_factory=MemoryWishlist)

    @property
    def stock(self) -> MemoryCatalog:
        return self.catalog


__all__ = (
    "MemoryCatalog",
    "MemoryCarts",
    "MemoryOrders",
    "MemoryReviews",
    "MemorySettings",
    "MemoryWishlist",
    "MemoryBackend",
)
