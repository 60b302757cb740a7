"""
Storage backends — one object per backend carrying every store.

    from storecore.storage import MemoryBackend, SQLAlchemyBackend

Both satisfy the store protocols declared next to each domain
(CatalogStore, StockStore, CartStore, OrderStore, ReviewStore,
SettingsStore, WishlistStore).
"""

from __future__ import annotations

from storecore.storage._memory import (
    MemoryCatalog,
    MemoryCarts,
    MemoryOrders,
    MemoryReviews,
    MemorySettings,
    MemoryWishlist,
    MemoryBackend,
)
from storecore.storage._sqlalchemy import (
    SQLAlchemyCatalog,
    SQLAlchemyCarts,
    SQLAlchemyOrders,
    SQLAlchemyReviews,
    SQLAlchemySettings,
    SQLAlchemyWishlist,
    SQLAlchemyBackend,
)

__all__ = (
    "MemoryCatalog",
    "MemoryCarts",
    "MemoryOrders",
    "MemoryReviews",
    "MemorySettings",
    "MemoryWishlist",
    "MemoryBackend",
    "SQLAlchemyCatalog",
    "SQLAlchemyCarts",
    "SQLAlchemyOrders",
    "SQLAlchemyReviews",
    "SQLAlchemySettings",
    "SQLAlchemyWishlist",
    "SQLAlchemyBackend",
)
