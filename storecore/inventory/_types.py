"""
Inventory types.
"""

from __future__ import annotations

from dataclasses import dataclass

from storecore._types import ProductId


@dataclass(frozen=True, slots=True)
class StockChange:
    """
    Outcome of one stock adjustment.

    `requested` is what the caller asked for; `before`/`after` are the
    stored levels around the update. A clamped decrement applies less
    than it was asked to.
    """

    product_id: ProductId
    requested: int
    before: int
    after: int

    @property
    def applied(self) -> int:
        return abs(self.after - self.before)

    @property
    def shortfall(self) -> int:
        """Units the zero floor absorbed."""
        return self.requested - self.applied

    @property
    def exhausted(self) -> bool:
        return self.after == 0


__all__ = ("StockChange",)
