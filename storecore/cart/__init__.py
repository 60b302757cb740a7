"""
Cart — one mutable collection of priced line items per owner.

    from storecore.cart import CartService, compute_totals
"""

from __future__ import annotations

from storecore.cart._types import CartLine, Totals, Cart
from storecore.cart._totals import PricedLine, subtotal, compute_totals
from storecore.cart._store import CartStore
from storecore.cart._service import CartService

__all__ = (
    "CartLine",
    "Totals",
    "Cart",
    "PricedLine",
    "subtotal",
    "compute_totals",
    "CartStore",
    "CartService",
)
