"""
Status rules — which transitions touch the inventory ledger.

Only crossing the cancelled boundary moves stock:

    live      → cancelled  RELEASE  (increment every line)
    cancelled → live       RECLAIM  (decrement every line)
    otherwise              NONE

Transitions themselves are never blocked; an operator may move an
order from any status to any other.
"""

from __future__ import annotations

from enum import Enum, auto

from storecore.orders._types import OrderStatus


class StockEffect(Enum):
    NONE = auto()
    RELEASE = auto()
    RECLAIM = auto()


REVIEWABLE: frozenset[OrderStatus] = frozenset({OrderStatus.SHIPPED, OrderStatus.COMPLETED})
"""Statuses whose orders unlock reviews."""


def is_live(status: OrderStatus) -> bool:
    """A live order's quantities count against stock."""
    return status is not OrderStatus.CANCELLED


def stock_effect(previous: OrderStatus, new: OrderStatus) -> StockEffect:
    if is_live(previous) and not is_live(new):
        return StockEffect.RELEASE
    if not is_live(previous) and is_live(new):
        return StockEffect.RECLAIM
    return StockEffect.NONE


__all__ = ("StockEffect", "REVIEWABLE", "is_live", "stock_effect")
