"""Tests for checkout: planning, placement and rollback."""

import asyncio
from decimal import Decimal

from kungfu import Error, Ok, Result

from storecore import Shop, ShopConfig, ShopErrorKind, ShopErrors
from storecore.cart import CartLine
from storecore.orders import CheckoutRequest, DeliveryType, OrderStatus, PaymentMethod
from storecore.storage import MemoryBackend, MemoryCarts

from tests.support import checkout_request, seed, stock_of


class TestCheckout:
    async def test_places_order_and_reserves_stock(self, shop):
        await seed(shop, "p-1", price="10.00", stock=5)
        await shop.cart.add_item("user-1", "p-1")
        await shop.cart.add_item("user-1", "p-1")

        order = (await shop.orders.checkout(checkout_request())).unwrap()

        assert order.status is OrderStatus.PENDING
        assert [(ln.product_id, ln.quantity, ln.unit_price) for ln in order.lines] == [
            ("p-1", 2, Decimal("10.00"))
        ]
        assert order.totals.total == Decimal("26.10")
        assert await stock_of(shop, "p-1") == 3
        assert (await shop.cart.get_cart("user-1")).unwrap().is_empty
        assert (await shop.orders.get_order(order.id)).unwrap() == order

    async def test_empty_cart_rejected(self, shop):
        result = await shop.orders.checkout(checkout_request())

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.EMPTY_CART
        assert (await shop.orders.list_all_orders()).unwrap() == []

    async def test_failing_line_named_and_nothing_changes(self, shop):
        await seed(shop, "a", stock=2)
        await seed(shop, "b", stock=1)
        await shop.cart.add_item("user-1", "a")
        await shop.cart.add_item("user-1", "b")
        # b sells out after it was carted
        (await shop.inventory.decrement("b", 1)).unwrap()

        result = await shop.orders.checkout(checkout_request())

        match result:
            case Error(e):
                assert e.kind is ShopErrorKind.INSUFFICIENT_STOCK
                assert e.product_id == "b"
            case Ok(_):
                raise AssertionError("checkout should fail")
        assert await stock_of(shop, "a") == 2
        assert (await shop.orders.list_orders("user-1")).unwrap() == []
        assert len((await shop.cart.get_cart("user-1")).unwrap().lines) == 2

    async def test_removed_product_not_found(self, shop):
        await seed(shop, "p-1")
        await shop.backend.carts.put_line("user-1", CartLine("ghost", 1, Decimal("1.00")))

        result = await shop.orders.checkout(checkout_request())

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_FOUND
        assert result.error.product_id == "ghost"

    async def test_order_keeps_request_details(self, shop):
        await seed(shop, "p-1")
        await shop.cart.add_item("user-1", "p-1")
        request = checkout_request(
            payment_method="cash_on_delivery",
            delivery_type="pickup",
            notes="ring twice",
        )

        order = (await shop.orders.checkout(request)).unwrap()

        assert order.payment_method is PaymentMethod.CASH_ON_DELIVERY
        assert order.delivery_type is DeliveryType.PICKUP
        assert order.notes == "ring twice"
        assert order.shipping.email == "ana@example.com"
        assert len(order.reference) == 8

    async def test_totals_frozen_against_later_settings(self, shop):
        await seed(shop, "p-1", price="10.00")
        await shop.cart.add_item("user-1", "p-1")
        order = (await shop.orders.checkout(checkout_request())).unwrap()

        (await shop.settings.update_setting("tax_rate", "0.50")).unwrap()

        stored = (await shop.orders.get_order(order.id)).unwrap()
        assert stored.totals == order.totals

    async def test_orders_listed_newest_first(self, shop):
        await seed(shop, "p-1")
        placed = []
        for _ in range(3):
            await shop.cart.add_item("user-1", "p-1")
            placed.append((await shop.orders.checkout(checkout_request())).unwrap())

        listed = (await shop.orders.list_orders("user-1")).unwrap()

        assert [o.id for o in listed] == [o.id for o in reversed(placed)]


class TestIdempotency:
    async def test_same_key_returns_same_order(self, shop):
        await seed(shop, "p-1", stock=5)
        await shop.cart.add_item("user-1", "p-1")
        request = checkout_request(idempotency_key="k-1")

        first = (await shop.orders.checkout(request)).unwrap()
        second = (await shop.orders.checkout(request)).unwrap()

        assert second.id == first.id
        assert await stock_of(shop, "p-1") == 4
        assert len((await shop.orders.list_all_orders()).unwrap()) == 1

    async def test_keys_are_per_owner(self, shop):
        await seed(shop, "p-1", stock=5)
        await shop.cart.add_item("user-1", "p-1")
        await shop.cart.add_item("user-2", "p-1")

        a = (await shop.orders.checkout(checkout_request("user-1", idempotency_key="k"))).unwrap()
        b = (await shop.orders.checkout(checkout_request("user-2", idempotency_key="k"))).unwrap()

        assert a.id != b.id


class TestConcurrency:
    async def test_last_unit_sold_once(self, shop):
        await seed(shop, "p-1", stock=1)
        await shop.cart.add_item("user-1", "p-1")
        await shop.cart.add_item("user-2", "p-1")

        results = await asyncio.gather(
            shop.orders.checkout(checkout_request("user-1")),
            shop.orders.checkout(checkout_request("user-2")),
        )

        placed = [r for r in results if isinstance(r, Ok)]
        failed = [r for r in results if isinstance(r, Error)]
        assert len(placed) == 1
        assert len(failed) == 1
        assert failed[0].error.kind is ShopErrorKind.INSUFFICIENT_STOCK
        assert await stock_of(shop, "p-1") == 0

    async def test_double_submit_places_one_order(self, shop):
        await seed(shop, "p-1", stock=5)
        await shop.cart.add_item("user-1", "p-1")
        request = checkout_request(idempotency_key="k-1")

        first, second = await asyncio.gather(
            shop.orders.checkout(request),
            shop.orders.checkout(request),
        )

        assert first.unwrap().id == second.unwrap().id
        assert await stock_of(shop, "p-1") == 4


class _FailingClear(MemoryCarts):
    async def clear(self, owner_id: str) -> Result[list[CartLine], object]:
        return Error(ShopErrors.persistence("cart store offline"))


class TestRollback:
    async def test_failed_cart_clear_undoes_everything(self):
        shop = Shop.from_backend(MemoryBackend(carts=_FailingClear()), ShopConfig())
        await seed(shop, "a", stock=3)
        await seed(shop, "b", stock=3)
        await shop.cart.add_item("user-1", "a")
        await shop.cart.add_item("user-1", "b")

        result = await shop.orders.checkout(checkout_request())

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.PERSISTENCE
        assert await stock_of(shop, "a") == 3
        assert await stock_of(shop, "b") == 3
        assert (await shop.orders.list_all_orders()).unwrap() == []
        assert len((await shop.cart.get_cart("user-1")).unwrap().lines) == 2


class TestCheckoutRequest:
    def test_home_delivery_needs_address(self):
        result = CheckoutRequest.parse({
            "owner_id": "user-1",
            "shipping": {"name": "Ana", "email": "ana@example.com", "phone": "555"},
        })

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.INVALID
        assert "address" in result.error.message

    def test_pickup_needs_no_address(self):
        result = CheckoutRequest.parse({
            "owner_id": "user-1",
            "shipping": {"name": "Ana", "email": "ana@example.com", "phone": "555"},
            "delivery_type": "pickup",
        })

        assert isinstance(result, Ok)

    def test_bad_email_names_field(self):
        result = CheckoutRequest.parse({
            "owner_id": "user-1",
            "shipping": {"name": "Ana", "email": "not-an-email", "phone": "555"},
            "delivery_type": "pickup",
        })

        assert isinstance(result, Error)
        assert "shipping.email" in result.error.message
