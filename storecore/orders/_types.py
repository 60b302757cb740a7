"""
Order types — immutable order snapshot and checkout request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Self

from kungfu import Result, Ok, Error
from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError, model_validator

from storecore._errors import ShopError, ShopErrors
from storecore._types import Money, OrderId, OwnerId, ProductId
from storecore.cart import Totals

# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    """
    Order lifecycle.

        pending → processing → shipped → completed
        any ⇄ cancelled
    """

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    TRANSFER = "transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


class DeliveryType(Enum):
    HOME = "home"
    PICKUP = "pickup"


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Request
# ═══════════════════════════════════════════════════════════════════════════════

Required = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"),
]


class ShippingInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Required
    email: Email
    phone: Required
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""


class CheckoutRequest(BaseModel):
    """
    Everything checkout needs besides the cart itself.

    Address and city are only required for home delivery.

    Example:
        CheckoutRequest.parse({
            "owner_id": "user-1",
            "shipping": {"name": "Ana", "email": "ana@example.com", "phone": "555"},
            "delivery_type": "pickup",
            "payment_method": "cash_on_delivery",
        })
    """

    model_config = ConfigDict(frozen=True)

    owner_id: Required
    shipping: ShippingInfo
    payment_method: PaymentMethod = PaymentMethod.TRANSFER
    delivery_type: DeliveryType = DeliveryType.HOME
    notes: str | None = None
    idempotency_key: str | None = None

    @model_validator(mode="after")
    def _address_for_home_delivery(self) -> Self:
        if self.delivery_type is DeliveryType.HOME:
            missing = [
                field
                for field in ("address", "city")
                if not getattr(self.shipping, field).strip()
            ]
            if missing:
                raise ValueError(f"{' and '.join(missing)} required for home delivery")
        return self

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> Result[CheckoutRequest, ShopError]:
        try:
            return Ok(cls.model_validate(data))
        except ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(part) for part in first["loc"]) or "request"
            return Error(ShopErrors.invalid(f"Checkout {where}: {first['msg']}"))


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderLine:
    """Frozen copy of a cart line."""

    product_id: ProductId
    quantity: int
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class Order:
    """
    Immutable financial snapshot of a checked-out cart.

    Totals and line prices never change after creation; only status
    and updated_at move.
    """

    id: OrderId
    owner_id: OwnerId
    lines: tuple[OrderLine, ...]
    totals: Totals
    payment_method: PaymentMethod
    delivery_type: DeliveryType
    shipping: ShippingInfo
    notes: str | None
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    idempotency_key: str | None = None

    @property
    def reference(self) -> str:
        """Short code shown to customers."""
        return self.id[-8:].upper()

    def line(self, product_id: ProductId) -> OrderLine | None:
        return next((ln for ln in self.lines if ln.product_id == product_id), None)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "OrderStatus",
    "PaymentMethod",
    "DeliveryType",
    "ShippingInfo",
    "CheckoutRequest",
    "OrderLine",
    "Order",
)
