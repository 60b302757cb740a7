"""
Inventory — per-product stock ledger.

    from storecore.inventory import InventoryLedger, StockChange
"""

from __future__ import annotations

from storecore.inventory._types import StockChange
from storecore.inventory._store import StockStore
from storecore.inventory._ledger import InventoryLedger

__all__ = ("StockChange", "StockStore", "InventoryLedger")
