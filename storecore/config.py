"""
ShopConfig — immutable runtime configuration.

    config = (
        ShopConfig()
        .with_database("postgresql+asyncpg://shop@db/shop")
        .with_settings_ttl(seconds=30)
        .with_reinstate_policy(ReinstatePolicy.STRICT)
    )

    config = ShopConfig.from_env()
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum

from storecore.settings import DEFAULT_SETTINGS, Settings

# ═══════════════════════════════════════════════════════════════════════════════
# Reinstate Policy
# ═══════════════════════════════════════════════════════════════════════════════


class ReinstatePolicy(Enum):
    """
    How stock is taken back when a cancelled order is reinstated.

    CLAMP:  decrement floored at zero, no sufficiency check (may oversell)
    STRICT: conditional reserve, fails with INSUFFICIENT_STOCK instead
    """

    CLAMP = "clamp"
    STRICT = "strict"


# ═══════════════════════════════════════════════════════════════════════════════
# Config
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShopConfig:
    database_url: str = "sqlite+aiosqlite:///storecore.db"
    echo_sql: bool = False
    settings_ttl: timedelta = timedelta(seconds=60)
    low_stock_threshold: int = 5
    reinstate_policy: ReinstatePolicy = ReinstatePolicy.CLAMP
    default_settings: Settings = DEFAULT_SETTINGS

    def with_database(self, url: str, *, echo: bool = False) -> ShopConfig:
        return replace(self, database_url=url, echo_sql=echo)

    def with_settings_ttl(self, *, seconds: float) -> ShopConfig:
        return replace(self, settings_ttl=timedelta(seconds=seconds))

    def with_low_stock_threshold(self, threshold: int) -> ShopConfig:
        return replace(self, low_stock_threshold=threshold)

    def with_reinstate_policy(self, policy: ReinstatePolicy) -> ShopConfig:
        return replace(self, reinstate_policy=policy)

    def with_defaults(self, settings: Settings) -> ShopConfig:
        return replace(self, default_settings=settings)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ShopConfig:
        """
        Build from STORECORE_* environment variables.

        Unset variables keep the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if url := env.get("STORECORE_DATABASE_URL"):
            config = config.with_database(url, echo=env.get("STORECORE_ECHO_SQL") == "1")
        if ttl := env.get("STORECORE_SETTINGS_TTL"):
            config = config.with_settings_ttl(seconds=float(ttl))
        if threshold := env.get("STORECORE_LOW_STOCK_THRESHOLD"):
            config = config.with_low_stock_threshold(int(threshold))
        if policy := env.get("STORECORE_REINSTATE_POLICY"):
            config = config.with_reinstate_policy(ReinstatePolicy(policy.lower()))

        return config


__all__ = ("ReinstatePolicy", "ShopConfig")
