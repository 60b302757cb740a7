"""
Settings types — business pricing configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storecore._types import Money

# ═══════════════════════════════════════════════════════════════════════════════
# Setting Keys
# ═══════════════════════════════════════════════════════════════════════════════


class SettingKey(Enum):
    """Keys of the settings key/value records."""

    CURRENCY = "currency"
    TAX_RATE = "tax_rate"
    SHIPPING_COST = "shipping_cost"
    FREE_SHIPPING_THRESHOLD = "free_shipping_threshold"


# ═══════════════════════════════════════════════════════════════════════════════
# Settings — one active record governs every computation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Pricing settings.

    Defaults apply when nothing is configured; absence is never an error.
    Orders snapshot their own amounts, so changes are not retroactive.
    """

    currency: str = "USD"
    tax_rate: Decimal = Decimal("0.13")
    shipping_cost: Money = Decimal("3.50")
    free_shipping_threshold: Money = Decimal("25.00")


DEFAULT_SETTINGS = Settings()

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "SettingKey",
    "Settings",
    "DEFAULT_SETTINGS",
)
