"""
Settings — pricing configuration read by every total computation.

    from storecore.settings import Settings, StoredSettings, StaticSettings
"""

from __future__ import annotations

from storecore.settings._types import SettingKey, Settings, DEFAULT_SETTINGS
from storecore.settings._schema import parse_settings, encode_setting
from storecore.settings._store import SettingsStore
from storecore.settings._provider import SettingsProvider, StaticSettings, StoredSettings

__all__ = (
    "SettingKey",
    "Settings",
    "DEFAULT_SETTINGS",
    "parse_settings",
    "encode_setting",
    "SettingsStore",
    "SettingsProvider",
    "StaticSettings",
    "StoredSettings",
)
