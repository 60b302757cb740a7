"""
Error values — what every storecore operation returns on failure.

Failures travel as `Error(ShopError(...))` inside kungfu Results.
Every error names the product and/or order it concerns so callers
can render an actionable message.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from storecore._types import OrderId, ProductId

# ═══════════════════════════════════════════════════════════════════════════════
# Error Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ShopErrorKind(Enum):
    """Kinds of shop errors."""

    INSUFFICIENT_STOCK = auto()  # Requested quantity exceeds stock
    EMPTY_CART = auto()  # Checkout with no lines
    NOT_FOUND = auto()  # Product, order or review missing
    NOT_ELIGIBLE = auto()  # Review gate rejected (no purchase / duplicate)
    PERSISTENCE = auto()  # Store rejected a read/write
    CONFLICT = auto()  # Order status changed underneath a transition
    INVALID = auto()  # Malformed input (rating, quantity, settings value)


# ═══════════════════════════════════════════════════════════════════════════════
# Error Value
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShopError:
    """
    Shop operation error.

    Note: cause holds the driver exception for PERSISTENCE errors.
    """

    kind: ShopErrorKind
    message: str
    product_id: ProductId | None = None
    order_id: OrderId | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


class ShopFailure(Exception):
    """
    ShopError carried as an exception.

    Only used where a Result cannot flow (inside graph nodes);
    runners turn it back into `Error(failure.error)`.
    """

    def __init__(self, error: ShopError) -> None:
        super().__init__(str(error))
        self.error = error


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


class ShopErrors:
    @staticmethod
    def insufficient_stock(
        product_id: ProductId, requested: int, available: int
    ) -> ShopError:
        return ShopError(
            ShopErrorKind.INSUFFICIENT_STOCK,
            f"Product {product_id}: requested {requested}, only {available} in stock",
            product_id=product_id,
        )

    @staticmethod
    def empty_cart(owner_id: str) -> ShopError:
        return ShopError(ShopErrorKind.EMPTY_CART, f"Cart of {owner_id} is empty")

    @staticmethod
    def product_not_found(product_id: ProductId) -> ShopError:
        return ShopError(
            ShopErrorKind.NOT_FOUND,
            f"Product {product_id} not found",
            product_id=product_id,
        )

    @staticmethod
    def line_not_found(product_id: ProductId) -> ShopError:
        return ShopError(
            ShopErrorKind.NOT_FOUND,
            f"Product {product_id} is not in the cart",
            product_id=product_id,
        )

    @staticmethod
    def order_not_found(order_id: OrderId) -> ShopError:
        return ShopError(
            ShopErrorKind.NOT_FOUND,
            f"Order {order_id} not found",
            order_id=order_id,
        )

    @staticmethod
    def not_purchased(product_id: ProductId, order_id: OrderId) -> ShopError:
        return ShopError(
            ShopErrorKind.NOT_ELIGIBLE,
            f"Product {product_id} was not purchased in a fulfilled order {order_id}",
            product_id=product_id,
            order_id=order_id,
        )

    @staticmethod
    def already_reviewed(product_id: ProductId, order_id: OrderId) -> ShopError:
        return ShopError(
            ShopErrorKind.NOT_ELIGIBLE,
            f"Product {product_id} from order {order_id} is already reviewed",
            product_id=product_id,
            order_id=order_id,
        )

    @staticmethod
    def persistence(
        message: str,
        cause: Exception | None = None,
        *,
        product_id: ProductId | None = None,
        order_id: OrderId | None = None,
    ) -> ShopError:
        return ShopError(
            ShopErrorKind.PERSISTENCE,
            message,
            product_id=product_id,
            order_id=order_id,
            cause=cause,
        )

    @staticmethod
    def status_conflict(order_id: OrderId, expected: str) -> ShopError:
        return ShopError(
            ShopErrorKind.CONFLICT,
            f"Order {order_id} left status {expected!r} during the transition",
            order_id=order_id,
        )

    @staticmethod
    def duplicate_checkout(owner_id: str, key: str) -> ShopError:
        return ShopError(
            ShopErrorKind.CONFLICT,
            f"Checkout {key!r} of {owner_id} was already placed",
        )

    @staticmethod
    def invalid(
        message: str,
        *,
        product_id: ProductId | None = None,
        order_id: OrderId | None = None,
    ) -> ShopError:
        return ShopError(
            ShopErrorKind.INVALID,
            message,
            product_id=product_id,
            order_id=order_id,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ShopErrorKind",
    "ShopError",
    "ShopFailure",
    "ShopErrors",
)
