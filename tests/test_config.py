"""Tests for ShopConfig."""

from datetime import timedelta
from decimal import Decimal

import pytest

from storecore import ReinstatePolicy, Shop, ShopConfig
from storecore.settings import Settings


class TestShopConfig:
    def test_defaults(self):
        config = ShopConfig()

        assert config.database_url.startswith("sqlite+aiosqlite://")
        assert config.settings_ttl == timedelta(seconds=60)
        assert config.low_stock_threshold == 5
        assert config.reinstate_policy is ReinstatePolicy.CLAMP

    def test_builders_return_new_config(self):
        base = ShopConfig()

        changed = (
            base.with_database("postgresql+asyncpg://shop@db/shop", echo=True)
            .with_settings_ttl(seconds=5)
            .with_low_stock_threshold(2)
            .with_reinstate_policy(ReinstatePolicy.STRICT)
            .with_defaults(Settings(currency="EUR"))
        )

        assert base == ShopConfig()
        assert changed.database_url == "postgresql+asyncpg://shop@db/shop"
        assert changed.echo_sql
        assert changed.settings_ttl == timedelta(seconds=5)
        assert changed.low_stock_threshold == 2
        assert changed.reinstate_policy is ReinstatePolicy.STRICT
        assert changed.default_settings.currency == "EUR"

    def test_from_env(self):
        config = ShopConfig.from_env({
            "STORECORE_DATABASE_URL": "sqlite+aiosqlite:///other.db",
            "STORECORE_ECHO_SQL": "1",
            "STORECORE_SETTINGS_TTL": "2.5",
            "STORECORE_LOW_STOCK_THRESHOLD": "9",
            "STORECORE_REINSTATE_POLICY": "STRICT",
        })

        assert config.database_url == "sqlite+aiosqlite:///other.db"
        assert config.echo_sql
        assert config.settings_ttl == timedelta(seconds=2.5)
        assert config.low_stock_threshold == 9
        assert config.reinstate_policy is ReinstatePolicy.STRICT

    def test_from_empty_env_is_default(self):
        assert ShopConfig.from_env({}) == ShopConfig()

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            ShopConfig.from_env({"STORECORE_REINSTATE_POLICY": "lenient"})

    def test_default_settings_feed_shop(self):
        shop = Shop.memory(ShopConfig().with_defaults(Settings(tax_rate=Decimal("0.2"))))

        assert shop.config.default_settings.tax_rate == Decimal("0.2")
