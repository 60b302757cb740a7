"""
Totals — pure computation from lines and settings.

    subtotal = Σ(quantity × unit_price)
    taxes    = subtotal × tax_rate
    shipping = 0 if subtotal ≥ free_shipping_threshold else shipping_cost
    total    = subtotal + taxes + shipping
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from storecore._types import Money, ZERO
from storecore.cart._types import Totals
from storecore.settings import Settings


class PricedLine(Protocol):
    @property
    def quantity(self) -> int: ...
    @property
    def unit_price(self) -> Money: ...


def subtotal(lines: Iterable[PricedLine]) -> Money:
    return sum((line.unit_price * line.quantity for line in lines), ZERO)


def compute_totals(lines: Iterable[PricedLine], settings: Settings) -> Totals:
    """
    Derive totals. No rounding: Decimal arithmetic keeps them exact.

    Example:
        compute_totals([CartLine("p", 2, Decimal("10.00"))], Settings())
        # Totals(subtotal=20.00, taxes=2.6000, shipping=3.50, total=26.1000, currency="USD")
    """
    sub = subtotal(lines)
    taxes = sub * settings.tax_rate
    shipping = ZERO if sub >= settings.free_shipping_threshold else settings.shipping_cost
    return Totals(
        subtotal=sub,
        taxes=taxes,
        shipping=shipping,
        total=sub + taxes + shipping,
        currency=settings.currency,
    )


__all__ = ("PricedLine", "subtotal", "compute_totals")
