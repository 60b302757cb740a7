"""
Wishlist types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from storecore._types import OwnerId, ProductId


@dataclass(frozen=True, slots=True)
class WishlistEntry:
    owner_id: OwnerId
    product_id: ProductId
    added_at: datetime


__all__ = ("WishlistEntry",)
