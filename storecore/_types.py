"""
Core types for storecore.

Re-exports from kungfu + identity and money aliases.
"""

from __future__ import annotations

from decimal import Decimal
from collections.abc import Callable, Awaitable

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Identity Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type OwnerId = str
"""Opaque identity token of a cart/order owner. Trusted as given."""

type ProductId = str
type OrderId = str
type ReviewId = str

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""All monetary amounts. Never float."""

ZERO = Decimal("0")


def money(value: Decimal | int | str) -> Money:
    """
    Coerce a value into Money.

    Strings and ints go through Decimal directly. Callers reject floats
    before coercing (pydantic models, the cart's snapshot price check).

    Example:
        money("10.00") * 2  # Decimal("20.00")
    """
    return value if isinstance(value, Decimal) else Decimal(value)


# ═══════════════════════════════════════════════════════════════════════════════
# Compensation
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[T] = Callable[[T], Awaitable[object]]
"""Undo action receiving the value its step produced. An Error return counts as failed."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Identity
    "OwnerId",
    "ProductId",
    "OrderId",
    "ReviewId",
    # Money
    "Money",
    "ZERO",
    "money",
    # Saga
    "Compensator",
)
