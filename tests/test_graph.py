"""Tests for graph resolution and the checkout plan."""

from dataclasses import dataclass
from decimal import Decimal

from kungfu import Error

from storecore import ShopErrorKind, ShopErrors, ShopFailure
from storecore.cart import CartLine
from storecore.catalog import Product
from storecore._graph import node, resolve
from storecore.orders import CheckoutDeps, plan_checkout
from storecore.settings import Settings, StaticSettings
from storecore.storage import MemoryBackend

from tests.support import checkout_request


@dataclass(frozen=True)
class Name:
    value: str


@node
class Greeting:
    def __init__(self, text: str) -> None:
        self.text = text

    @classmethod
    def __compose__(cls, name: Name) -> "Greeting":
        if not name.value:
            raise ShopFailure(ShopErrors.invalid("name is empty"))
        return cls(f"hi {name.value}")


class TestResolve:
    async def test_injects_by_type(self):
        result = await resolve(Greeting, Name("ana"))

        assert result.unwrap().text == "hi ana"

    async def test_failure_becomes_error(self):
        result = await resolve(Greeting, Name(""))

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.INVALID


class TestPlanCheckout:
    async def test_plan_freezes_lines_and_totals(self):
        backend = MemoryBackend()
        await backend.catalog.put_product(Product("p-1", "Mug", Decimal("10.00"), stock=4))
        await backend.carts.put_line("user-1", CartLine("p-1", 2, Decimal("10.00")))
        deps = CheckoutDeps(
            carts=backend.carts,
            catalog=backend.catalog,
            settings=StaticSettings(Settings(tax_rate=Decimal("0.10"))),
        )

        plan = (await plan_checkout(checkout_request(), deps)).unwrap()

        assert [line.product_id for line in plan.lines] == ["p-1"]
        assert plan.totals.total == Decimal("25.50")
        assert (await backend.catalog.get_stock("p-1")).unwrap() == 4

    async def test_empty_cart(self):
        backend = MemoryBackend()
        deps = CheckoutDeps(backend.carts, backend.catalog, StaticSettings())

        result = await plan_checkout(checkout_request(), deps)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.EMPTY_CART
