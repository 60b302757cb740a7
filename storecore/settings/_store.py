"""
Settings store — key/value persistence protocol.
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError


class SettingsStore(Protocol):
    """
    Raw settings records.

    Values are JSON-encoded strings; decoding and validation happen
    in the provider, not the store.
    """

    async def load(self) -> Result[dict[str, str], ShopError]:
        """All stored records. Ok({}) when nothing is configured."""
        ...

    async def save(self, key: str, value: str) -> Result[None, ShopError]:
        """Insert or replace one record."""
        ...


__all__ = ("SettingsStore",)
