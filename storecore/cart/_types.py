"""
Cart types — line items and derived totals.
"""

from __future__ import annotations

from dataclasses import dataclass

from storecore._types import Money, OwnerId, ProductId


@dataclass(frozen=True, slots=True)
class CartLine:
    """One (product, quantity, unit price snapshot) entry."""

    product_id: ProductId
    quantity: int
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class Totals:
    subtotal: Money
    taxes: Money
    shipping: Money
    total: Money
    currency: str


@dataclass(frozen=True, slots=True)
class Cart:
    """
    A cart as read: lines plus totals computed from current settings.

    Totals are never stored; every read recomputes them.
    """

    owner_id: OwnerId
    lines: tuple[CartLine, ...]
    totals: Totals

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def line(self, product_id: ProductId) -> CartLine | None:
        return next((ln for ln in self.lines if ln.product_id == product_id), None)


__all__ = ("CartLine", "Totals", "Cart")
