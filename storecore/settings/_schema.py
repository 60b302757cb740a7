"""
Settings schema — pydantic validation of stored key/value records.

Values are stored JSON-encoded, one record per key. Each key is
validated on its own: a bad value only costs that key its default.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Annotated, Any

from kungfu import Result, Ok, Error
from pydantic import Field, StringConstraints, TypeAdapter, ValidationError

from storecore._errors import ShopError, ShopErrors
from storecore.settings._types import SettingKey, Settings

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Field Types
# ═══════════════════════════════════════════════════════════════════════════════

CurrencyCode = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_upper=True, pattern=r"^[A-Za-z]{3}$"),
]
TaxRate = Annotated[Decimal, Field(ge=0, lt=1)]
NonNegativeMoney = Annotated[Decimal, Field(ge=0)]

_ADAPTERS: dict[SettingKey, TypeAdapter[Any]] = {
    SettingKey.CURRENCY: TypeAdapter(CurrencyCode),
    SettingKey.TAX_RATE: TypeAdapter(TaxRate),
    SettingKey.SHIPPING_COST: TypeAdapter(NonNegativeMoney),
    SettingKey.FREE_SHIPPING_THRESHOLD: TypeAdapter(NonNegativeMoney),
}

# ═══════════════════════════════════════════════════════════════════════════════
# Decode
# ═══════════════════════════════════════════════════════════════════════════════


def parse_settings(raw: Mapping[str, str], defaults: Settings) -> Settings:
    """
    Merge stored records over defaults.

    Unknown keys are ignored. Missing keys keep their default.
    """
    values: dict[str, Any] = {}

    for key in SettingKey:
        encoded = raw.get(key.value)
        if encoded is None:
            continue
        try:
            values[key.value] = _ADAPTERS[key].validate_json(encoded)
        except ValidationError as e:
            logger.warning(
                "Ignoring stored setting %s=%r (%d validation error(s)), using default",
                key.value,
                encoded,
                e.error_count(),
            )

    return replace(defaults, **values)


# ═══════════════════════════════════════════════════════════════════════════════
# Encode
# ═══════════════════════════════════════════════════════════════════════════════


def encode_setting(key: str, value: object) -> Result[tuple[SettingKey, str], ShopError]:
    """
    Validate a single setting and encode it for storage.

    Example:
        encode_setting("tax_rate", "0.21")  # Ok((SettingKey.TAX_RATE, '"0.21"'))
        encode_setting("tax_rate", "1.5")   # Error(INVALID)
    """
    try:
        setting_key = SettingKey(key)
    except ValueError:
        return Error(ShopErrors.invalid(f"Unknown setting {key!r}"))

    adapter = _ADAPTERS[setting_key]
    try:
        parsed = adapter.validate_python(value)
    except ValidationError as e:
        reason = e.errors()[0]["msg"]
        return Error(ShopErrors.invalid(f"Invalid value for {key}: {reason}"))

    return Ok((setting_key, adapter.dump_json(parsed).decode()))


__all__ = ("parse_settings", "encode_setting")
