"""
Catalog — product read contract (price, sale price, stock, category).
"""

from __future__ import annotations

from storecore.catalog._types import ProductStatus, Product
from storecore.catalog._store import CatalogStore

__all__ = ("ProductStatus", "Product", "CatalogStore")
