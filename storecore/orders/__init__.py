"""
Orders — immutable order snapshots, checkout and the status machine.

    from storecore.orders import CheckoutRequest, OrderService, OrderStatus
"""

from __future__ import annotations

from storecore.orders._types import (
    OrderStatus,
    PaymentMethod,
    DeliveryType,
    ShippingInfo,
    CheckoutRequest,
    OrderLine,
    Order,
)
from storecore.orders._status import StockEffect, REVIEWABLE, is_live, stock_effect
from storecore.orders._store import OrderStore
from storecore.orders._checkout import CheckoutDeps, CheckoutPlan, plan_checkout
from storecore.orders._service import OrderService

__all__ = (
    "OrderStatus",
    "PaymentMethod",
    "DeliveryType",
    "ShippingInfo",
    "CheckoutRequest",
    "OrderLine",
    "Order",
    "StockEffect",
    "REVIEWABLE",
    "is_live",
    "stock_effect",
    "OrderStore",
    "CheckoutDeps",
    "CheckoutPlan",
    "plan_checkout",
    "OrderService",
)
