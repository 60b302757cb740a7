"""Tests for CartService."""

from decimal import Decimal

import pytest
from kungfu import Error, Ok

from storecore import ShopErrorKind

from tests.support import seed


class TestAddItem:
    async def test_add_until_stock_runs_out(self, shop):
        await seed(shop, "p-1", stock=3)

        for _ in range(3):
            assert isinstance(await shop.cart.add_item("user-1", "p-1"), Ok)

        result = await shop.cart.add_item("user-1", "p-1")

        match result:
            case Error(e):
                assert e.kind is ShopErrorKind.INSUFFICIENT_STOCK
                assert e.product_id == "p-1"
            case Ok(_):
                raise AssertionError("fourth add should fail")

        cart = (await shop.cart.get_cart("user-1")).unwrap()
        assert len(cart.lines) == 1
        assert cart.line("p-1").quantity == 3

    async def test_out_of_stock_product_rejected(self, shop):
        await seed(shop, "p-1", stock=0)

        result = await shop.cart.add_item("user-1", "p-1")

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.INSUFFICIENT_STOCK
        assert (await shop.cart.get_cart("user-1")).unwrap().is_empty

    async def test_unknown_product_not_found(self, shop):
        result = await shop.cart.add_item("user-1", "missing")

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_FOUND
        assert result.error.product_id == "missing"

    async def test_new_line_snapshots_sale_price(self, shop):
        await seed(shop, "p-1", price="20.00", sale_price=Decimal("15.00"))

        cart = (await shop.cart.add_item("user-1", "p-1")).unwrap()

        assert cart.line("p-1").unit_price == Decimal("15.00")

    async def test_explicit_price_is_snapshotted(self, shop):
        await seed(shop, "p-1", price="20.00")

        cart = (await shop.cart.add_item("user-1", "p-1", Decimal("18.00"))).unwrap()

        assert cart.line("p-1").unit_price == Decimal("18.00")

    async def test_string_price_coerced_to_decimal(self, shop):
        await seed(shop, "p-1", price="20.00")

        cart = (await shop.cart.add_item("user-1", "p-1", "12.50")).unwrap()

        assert cart.line("p-1").unit_price == Decimal("12.50")

    @pytest.mark.parametrize("price", [9.99, True, "abc", "NaN", Decimal("-1.00")])
    async def test_bad_snapshot_price_leaves_cart_usable(self, shop, price):
        await seed(shop, "p-1", price="20.00")

        result = await shop.cart.add_item("user-1", "p-1", price)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.INVALID
        assert result.error.product_id == "p-1"
        assert (await shop.cart.get_cart("user-1")).unwrap().is_empty

        cart = (await shop.cart.add_item("user-1", "p-1")).unwrap()
        assert cart.totals.subtotal == Decimal("20.00")

    async def test_existing_line_keeps_its_price(self, shop):
        await seed(shop, "p-1", price="20.00")
        await shop.cart.add_item("user-1", "p-1")
        await seed(shop, "p-1", price="25.00")

        cart = (await shop.cart.add_item("user-1", "p-1")).unwrap()

        line = cart.line("p-1")
        assert line.quantity == 2
        assert line.unit_price == Decimal("20.00")

    async def test_totals_follow_settings(self, shop):
        await seed(shop, "p-1", price="10.00")
        await shop.cart.add_item("user-1", "p-1")

        cart = (await shop.cart.add_item("user-1", "p-1")).unwrap()

        assert cart.item_count == 2
        assert cart.totals.subtotal == Decimal("20.00")
        assert cart.totals.total == Decimal("26.10")


class TestSetQuantity:
    async def test_set_within_stock(self, shop):
        await seed(shop, "p-1", stock=5)
        await shop.cart.add_item("user-1", "p-1")

        cart = (await shop.cart.set_quantity("user-1", "p-1", 4)).unwrap()

        assert cart.line("p-1").quantity == 4

    async def test_set_beyond_stock_fails_and_keeps_quantity(self, shop):
        await seed(shop, "p-1", stock=5)
        await shop.cart.add_item("user-1", "p-1")

        result = await shop.cart.set_quantity("user-1", "p-1", 6)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.INSUFFICIENT_STOCK
        cart = (await shop.cart.get_cart("user-1")).unwrap()
        assert cart.line("p-1").quantity == 1

    async def test_zero_removes_line(self, shop):
        await seed(shop, "p-1")
        await shop.cart.add_item("user-1", "p-1")

        cart = (await shop.cart.set_quantity("user-1", "p-1", 0)).unwrap()

        assert cart.is_empty

    async def test_missing_line_not_found(self, shop):
        await seed(shop, "p-1")

        result = await shop.cart.set_quantity("user-1", "p-1", 2)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_FOUND


class TestRemoveAndClear:
    async def test_remove_item(self, shop):
        await seed(shop, "p-1")
        await seed(shop, "p-2")
        await shop.cart.add_item("user-1", "p-1")
        await shop.cart.add_item("user-1", "p-2")

        cart = (await shop.cart.remove_item("user-1", "p-1")).unwrap()

        assert [line.product_id for line in cart.lines] == ["p-2"]

    async def test_remove_absent_is_noop(self, shop):
        cart = (await shop.cart.remove_item("user-1", "nothing")).unwrap()

        assert cart.is_empty

    async def test_clear_returns_removed_lines(self, shop):
        await seed(shop, "p-1")
        await shop.cart.add_item("user-1", "p-1")

        removed = (await shop.cart.clear("user-1")).unwrap()

        assert [line.product_id for line in removed] == ["p-1"]
        assert (await shop.cart.get_cart("user-1")).unwrap().is_empty

    async def test_carts_are_per_owner(self, shop):
        await seed(shop, "p-1")
        await shop.cart.add_item("user-1", "p-1")

        other = (await shop.cart.get_cart("user-2")).unwrap()

        assert other.is_empty
