"""
Inventory ledger — the single source of truth for saleable stock.

The ledger does no business validation beyond positive quantities:
`decrement` clamps at zero, `increment` is unbounded. Sufficiency is
checked by callers (cart, checkout) or atomically via `reserve`.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storecore._errors import ShopError, ShopErrors
from storecore._types import ProductId
from storecore.catalog import CatalogStore, Product
from storecore.inventory._store import StockStore
from storecore.inventory._types import StockChange

logger = logging.getLogger(__name__)


def _found(
    product_id: ProductId, result: Result[StockChange | None, ShopError]
) -> Result[StockChange, ShopError]:
    match result:
        case Ok(None):
            return Error(ShopErrors.product_not_found(product_id))
        case Ok(change):
            return Ok(change)
        case Error(e):
            return Error(e)


class InventoryLedger:
    """
    Stock reads and adjustments.

    Example:
        ledger = InventoryLedger(stock=backend.stock, catalog=backend.catalog)

        match await ledger.reserve("p-1", 2):
            case Ok(change):
                ...  # change.after == previous level - 2
            case Error(e):
                ...  # e.kind is INSUFFICIENT_STOCK, e.product_id == "p-1"
    """

    def __init__(
        self,
        stock: StockStore,
        catalog: CatalogStore,
        low_stock_threshold: int = 5,
    ) -> None:
        self._stock = stock
        self._catalog = catalog
        self._low_stock_threshold = low_stock_threshold

    async def get_stock(self, product_id: ProductId) -> Result[int, ShopError]:
        match await self._stock.get_stock(product_id):
            case Ok(None):
                return Error(ShopErrors.product_not_found(product_id))
            case Ok(level):
                return Ok(level)
            case Error(e):
                return Error(e)

    async def decrement(self, product_id: ProductId, quantity: int) -> Result[StockChange, ShopError]:
        if quantity <= 0:
            return Error(_bad_quantity(product_id, quantity))

        result = _found(product_id, await self._stock.decrement(product_id, quantity))
        if isinstance(result, Ok) and result.value.shortfall:
            change = result.value
            logger.warning(
                "Stock of %s clamped at zero: asked %d, had %d (short %d)",
                product_id,
                quantity,
                change.before,
                change.shortfall,
            )
        return result

    async def increment(self, product_id: ProductId, quantity: int) -> Result[StockChange, ShopError]:
        if quantity <= 0:
            return Error(_bad_quantity(product_id, quantity))
        return _found(product_id, await self._stock.increment(product_id, quantity))

    async def reserve(self, product_id: ProductId, quantity: int) -> Result[StockChange, ShopError]:
        if quantity <= 0:
            return Error(_bad_quantity(product_id, quantity))
        return _found(product_id, await self._stock.reserve(product_id, quantity))

    async def undo(self, change: StockChange) -> Result[StockChange | None, ShopError]:
        """
        Revert exactly what `change` applied.

        Used as a compensator. A clamped decrement gives back only the
        units it actually removed.
        """
        if change.applied == 0:
            return Ok(None)
        if change.after < change.before:
            return await self.increment(change.product_id, change.applied)
        return await self.decrement(change.product_id, change.applied)

    async def low_stock(self, threshold: int | None = None) -> Result[list[Product], ShopError]:
        """Products at or below the threshold, lowest stock first."""
        limit = self._low_stock_threshold if threshold is None else threshold
        match await self._catalog.list_products():
            case Ok(products):
                low = [p for p in products if p.stock <= limit]
                return Ok(sorted(low, key=lambda p: (p.stock, p.id)))
            case Error(e):
                return Error(e)


def _bad_quantity(product_id: ProductId, quantity: int) -> ShopError:
    return ShopErrors.invalid(
        f"Stock adjustment for {product_id} must be positive, got {quantity}",
        product_id=product_id,
    )


__all__ = ("InventoryLedger",)
