"""Pytest fixtures for storecore tests."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from storecore import Shop, ShopConfig


@pytest.fixture
def config() -> ShopConfig:
    return ShopConfig().with_settings_ttl(seconds=0)


@pytest.fixture
async def sql_shop(tmp_path: Path, config: ShopConfig) -> AsyncIterator[Shop]:
    url = f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}"
    shop = await Shop.sqlalchemy(config.with_database(url))
    yield shop
    await shop.close()


@pytest.fixture(params=["memory", "sqlalchemy"])
async def shop(request: pytest.FixtureRequest, tmp_path: Path, config: ShopConfig) -> AsyncIterator[Shop]:
    """Every backend, same behavior."""
    if request.param == "memory":
        yield Shop.memory(config)
        return

    url = f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}"
    sql = await Shop.sqlalchemy(config.with_database(url))
    yield sql
    await sql.close()
