"""Tests for Product pricing."""

from decimal import Decimal

import pytest

from storecore.catalog import Product

from tests.support import seed


class TestEffectivePrice:
    @pytest.mark.parametrize(
        ("sale_price", "expected", "on_sale"),
        [
            (None, Decimal("20.00"), False),
            (Decimal("15.00"), Decimal("15.00"), True),
            (Decimal("0"), Decimal("20.00"), False),
        ],
    )
    def test_sale_price_applies_when_positive(self, sale_price, expected, on_sale):
        product = Product("p-1", "Mug", Decimal("20.00"), stock=1, sale_price=sale_price)

        assert product.effective_price == expected
        assert product.on_sale is on_sale

    async def test_products_listed_by_id(self, shop):
        await seed(shop, "b")
        await seed(shop, "a")

        products = (await shop.backend.catalog.list_products()).unwrap()

        assert [p.id for p in products] == ["a", "b"]
