"""
Settings providers — injected into cart and order services.

    provider = StoredSettings(store, ttl=timedelta(seconds=60))
    settings = (await provider.get_settings()).unwrap()

    provider = StaticSettings(Settings(tax_rate=Decimal("0.21")))
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from kungfu import Result, Ok, Error

from storecore._errors import ShopError
from storecore.settings._schema import encode_setting, parse_settings
from storecore.settings._store import SettingsStore
from storecore.settings._types import DEFAULT_SETTINGS, Settings

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Provider Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class SettingsProvider(Protocol):
    async def get_settings(self) -> Result[Settings, ShopError]:
        """Active settings. Defaults when nothing is configured."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Static Provider
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StaticSettings:
    """Fixed settings, no store behind them."""

    settings: Settings = DEFAULT_SETTINGS

    async def get_settings(self) -> Result[Settings, ShopError]:
        return Ok(self.settings)


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Entry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class _Entry:
    value: Settings
    expires_at: float


# ═══════════════════════════════════════════════════════════════════════════════
# Stored Provider
# ═══════════════════════════════════════════════════════════════════════════════


class StoredSettings:
    """
    Settings read from a SettingsStore, cached in-process for `ttl`.

    Store failures are returned, never cached; a cold or expired
    entry is simply re-read on the next call.
    """

    def __init__(
        self,
        store: SettingsStore,
        ttl: timedelta = timedelta(seconds=60),
        defaults: Settings = DEFAULT_SETTINGS,
    ) -> None:
        self._store = store
        self._ttl = ttl.total_seconds()
        self._defaults = defaults
        self._entry: _Entry | None = None

    async def get_settings(self) -> Result[Settings, ShopError]:
        entry = self._entry
        if entry is not None and time.monotonic() < entry.expires_at:
            return Ok(entry.value)

        match await self._store.load():
            case Ok(raw):
                settings = parse_settings(raw, self._defaults)
                if self._ttl > 0:
                    self._entry = _Entry(settings, time.monotonic() + self._ttl)
                return Ok(settings)
            case Error(e):
                return Error(e)

    async def update_setting(self, key: str, value: object) -> Result[Settings, ShopError]:
        """
        Validate, store and apply one setting.

        Example:
            await provider.update_setting("free_shipping_threshold", "40.00")
        """
        checked = encode_setting(key, value)
        if isinstance(checked, Error):
            return Error(checked.error)
        setting_key, encoded = checked.value

        match await self._store.save(setting_key.value, encoded):
            case Ok(_):
                logger.info("Setting %s updated to %s", setting_key.value, encoded)
                self.invalidate()
                return await self.get_settings()
            case Error(e):
                return Error(e)

    def invalidate(self) -> None:
        self._entry = None


__all__ = ("SettingsProvider", "StaticSettings", "StoredSettings")
