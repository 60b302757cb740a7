"""
Cart service — per-owner line item mutations.

Every mutation for one owner runs under that owner's lock, so a
read-check-write of a line never interleaves with another mutation
of the same cart. Different owners never wait on each other.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import replace
from decimal import Decimal, InvalidOperation

from kungfu import Result, Ok, Error

from storecore._errors import ShopError, ShopErrors
from storecore._locks import KeyedLock
from storecore._types import Money, OwnerId, ProductId, money
from storecore.cart._store import CartStore
from storecore.cart._totals import compute_totals
from storecore.cart._types import Cart, CartLine
from storecore.catalog import CatalogStore, Product
from storecore.settings import SettingsProvider

logger = logging.getLogger(__name__)


class CartService:
    """
    Example:
        carts = CartService(backend.carts, backend.catalog, StaticSettings())

        await carts.add_item("user-1", "p-1")
        match await carts.get_cart("user-1"):
            case Ok(cart):
                print(cart.totals.total)
    """

    def __init__(
        self,
        carts: CartStore,
        catalog: CatalogStore,
        settings: SettingsProvider,
    ) -> None:
        self._carts = carts
        self._catalog = catalog
        self._settings = settings
        self._locks = KeyedLock()

    def hold(self, owner_id: OwnerId) -> AbstractAsyncContextManager[None]:
        """The owner's cart lock, for callers that read and clear the cart as one unit."""
        return self._locks.hold(owner_id)

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def get_cart(self, owner_id: OwnerId) -> Result[Cart, ShopError]:
        """Always a cart; empty when the owner has none. Totals are fresh."""
        match await self._carts.get_lines(owner_id):
            case Ok(lines):
                pass
            case Error(e):
                return Error(e)

        match await self._settings.get_settings():
            case Ok(settings):
                return Ok(Cart(owner_id, tuple(lines), compute_totals(lines, settings)))
            case Error(e):
                return Error(e)

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    async def add_item(
        self,
        owner_id: OwnerId,
        product_id: ProductId,
        unit_price: Money | None = None,
    ) -> Result[Cart, ShopError]:
        """
        Add one unit.

        A new line snapshots `unit_price` (or the product's effective
        price when omitted). An existing line keeps its snapshot and
        grows by one, never beyond current stock. A snapshot that is not
        a non-negative Decimal, int or numeric string fails INVALID.
        """
        if unit_price is not None:
            match _snapshot_price(product_id, unit_price):
                case Ok(unit_price):
                    pass
                case Error(e):
                    return Error(e)

        async with self._locks.hold(owner_id):
            product = await self._product(product_id)
            if isinstance(product, Error):
                return Error(product.error)
            stock = product.value.stock
            if stock <= 0:
                return Error(ShopErrors.insufficient_stock(product_id, 1, stock))

            match await self._carts.get_lines(owner_id):
                case Ok(lines):
                    existing = _find(lines, product_id)
                case Error(e):
                    return Error(e)

            if existing is None:
                price = product.value.effective_price if unit_price is None else unit_price
                line = CartLine(product_id, 1, price)
            else:
                if existing.quantity + 1 > stock:
                    return Error(
                        ShopErrors.insufficient_stock(product_id, existing.quantity + 1, stock)
                    )
                line = replace(existing, quantity=existing.quantity + 1)

            if isinstance(saved := await self._carts.put_line(owner_id, line), Error):
                return Error(saved.error)
            logger.debug("Cart %s: %s x%d", owner_id, product_id, line.quantity)

        return await self.get_cart(owner_id)

    async def set_quantity(
        self,
        owner_id: OwnerId,
        product_id: ProductId,
        quantity: int,
    ) -> Result[Cart, ShopError]:
        """Set a line's quantity. Zero or less removes the line."""
        if quantity <= 0:
            return await self.remove_item(owner_id, product_id)

        async with self._locks.hold(owner_id):
            product = await self._product(product_id)
            if isinstance(product, Error):
                return Error(product.error)

            match await self._carts.get_lines(owner_id):
                case Ok(lines):
                    existing = _find(lines, product_id)
                case Error(e):
                    return Error(e)

            if existing is None:
                return Error(ShopErrors.line_not_found(product_id))
            if quantity > product.value.stock:
                return Error(
                    ShopErrors.insufficient_stock(product_id, quantity, product.value.stock)
                )

            line = replace(existing, quantity=quantity)
            if isinstance(saved := await self._carts.put_line(owner_id, line), Error):
                return Error(saved.error)
            logger.debug("Cart %s: %s set to %d", owner_id, product_id, quantity)

        return await self.get_cart(owner_id)

    async def remove_item(self, owner_id: OwnerId, product_id: ProductId) -> Result[Cart, ShopError]:
        """Delete the line if present; no-op otherwise."""
        async with self._locks.hold(owner_id):
            if isinstance(deleted := await self._carts.delete_line(owner_id, product_id), Error):
                return Error(deleted.error)
        return await self.get_cart(owner_id)

    async def clear(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        """Remove every line. Returns the removed lines."""
        async with self._locks.hold(owner_id):
            return await self._carts.clear(owner_id)

    # ───────────────────────────────────────────────────────────────────────────
    # Helpers
    # ───────────────────────────────────────────────────────────────────────────

    async def _product(self, product_id: ProductId) -> Result[Product, ShopError]:
        match await self._catalog.get_product(product_id):
            case Ok(None):
                return Error(ShopErrors.product_not_found(product_id))
            case Ok(product):
                return Ok(product)
            case Error(e):
                return Error(e)


def _find(lines: list[CartLine], product_id: ProductId) -> CartLine | None:
    return next((line for line in lines if line.product_id == product_id), None)


def _snapshot_price(product_id: ProductId, value: object) -> Result[Money, ShopError]:
    # float and bool are not exact money
    if isinstance(value, bool) or not isinstance(value, Decimal | int | str):
        return Error(ShopErrors.invalid(
            f"Unit price must be a Decimal, int or numeric string, got {value!r}",
            product_id=product_id,
        ))
    try:
        price = money(value)
    except InvalidOperation:
        return Error(ShopErrors.invalid(f"Unit price {value!r} is not a number", product_id=product_id))
    if not price.is_finite() or price < 0:
        return Error(ShopErrors.invalid(f"Unit price must be non-negative, got {value!r}", product_id=product_id))
    return Ok(price)


__all__ = ("CartService",)
