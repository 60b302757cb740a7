"""
Wishlist — products an owner saved for later.
"""

from __future__ import annotations

from storecore.wishlist._types import WishlistEntry
from storecore.wishlist._store import WishlistStore
from storecore.wishlist._service import WishlistService

__all__ = ("WishlistEntry", "WishlistStore", "WishlistService")
