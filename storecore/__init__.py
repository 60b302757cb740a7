"""
storecore — cart, order and inventory consistency for a retail storefront.

    from storecore import Shop, ShopConfig
    from storecore import cart, orders, inventory, reviews

    shop = Shop.memory()
    await shop.cart.add_item("user-1", "p-1")
    match await shop.orders.checkout(request):
        case Ok(order): ...
        case Error(e): ...  # e.kind: ShopErrorKind
"""

from storecore import saga
from storecore import settings
from storecore import catalog
from storecore import inventory
from storecore import cart
from storecore import orders
from storecore import reviews
from storecore import wishlist
from storecore import storage
from storecore._types import (
    OwnerId,
    ProductId,
    OrderId,
    ReviewId,
    Money,
    ZERO,
    money,
)
from storecore._errors import ShopErrorKind, ShopError, ShopErrors, ShopFailure
from storecore.config import ReinstatePolicy, ShopConfig
from storecore.shop import Shop

__version__ = "0.1.0"

__all__ = (
    "saga",
    "settings",
    "catalog",
    "inventory",
    "cart",
    "orders",
    "reviews",
    "wishlist",
    "storage",
    "OwnerId",
    "ProductId",
    "OrderId",
    "ReviewId",
    "Money",
    "ZERO",
    "money",
    "ShopErrorKind",
    "ShopError",
    "ShopErrors",
    "ShopFailure",
    "ReinstatePolicy",
    "ShopConfig",
    "Shop",
)
