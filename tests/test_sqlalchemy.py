"""Tests specific to the SQLAlchemy backend."""

from dataclasses import replace
from decimal import Decimal

from kungfu import Error

from storecore import Shop, ShopConfig, ShopErrorKind
from storecore.orders import OrderStatus
from storecore.storage import SQLAlchemyBackend

from tests.support import checkout_request, seed


class TestPersistence:
    async def test_data_survives_reconnect(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}"
        config = ShopConfig().with_database(url)

        first = await Shop.sqlalchemy(config)
        await seed(first, "p-1", price="19.99", stock=4, sale_price=Decimal("17.49"))
        await first.cart.add_item("user-1", "p-1")
        order = (await first.orders.checkout(checkout_request(idempotency_key="k-1"))).unwrap()
        (await first.settings.update_setting("currency", "eur")).unwrap()
        await first.close()

        second = await Shop.sqlalchemy(config)
        try:
            stored = (await second.orders.get_order(order.id)).unwrap()
            assert stored == order
            assert stored.lines[0].unit_price == Decimal("17.49")
            assert stored.created_at.tzinfo is not None
            assert (await second.inventory.get_stock("p-1")).unwrap() == 3
            assert (await second.settings.get_settings()).unwrap().currency == "EUR"
        finally:
            await second.close()

    async def test_missing_tables_are_persistence_errors(self, tmp_path):
        backend = SQLAlchemyBackend.create(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        try:
            result = await backend.catalog.get_product("p-1")
        finally:
            await backend.dispose()

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.PERSISTENCE
        assert result.error.cause is not None

    async def test_status_compare_and_set(self, sql_shop):
        await seed(sql_shop, "p-1")
        await sql_shop.cart.add_item("user-1", "p-1")
        order = (await sql_shop.orders.checkout(checkout_request())).unwrap()
        orders = sql_shop.backend.orders

        stale = await orders.compare_and_set_status(
            order.id, OrderStatus.SHIPPED, OrderStatus.COMPLETED, order.updated_at
        )
        swapped = await orders.compare_and_set_status(
            order.id, OrderStatus.PENDING, OrderStatus.PROCESSING, order.updated_at
        )

        assert stale.unwrap() is False
        assert swapped.unwrap() is True
        assert (await sql_shop.orders.get_order(order.id)).unwrap().status is OrderStatus.PROCESSING

    async def test_duplicate_idempotency_key_refused(self, sql_shop):
        await seed(sql_shop, "p-1")
        await sql_shop.cart.add_item("user-1", "p-1")
        order = (await sql_shop.orders.checkout(checkout_request(idempotency_key="k"))).unwrap()
        clone = replace(order, id="f" * 32)

        assert (await sql_shop.backend.orders.insert(clone)).unwrap() is False
        assert (await sql_shop.backend.orders.delete(order.id)).unwrap() is True
        assert (await sql_shop.backend.orders.get(order.id)).unwrap() is None
