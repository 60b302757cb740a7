"""Tests for the review gate."""

from decimal import Decimal

import pytest
from kungfu import Error

from storecore import ShopErrorKind
from storecore.orders import OrderStatus

from tests.support import checkout_request, seed


async def bought(shop, product_id="p-1", owner_id="user-1", status=OrderStatus.COMPLETED):
    await shop.cart.add_item(owner_id, product_id)
    order = (await shop.orders.checkout(checkout_request(owner_id))).unwrap()
    if status is not OrderStatus.PENDING:
        (await shop.orders.set_status(order.id, status)).unwrap()
    return order


class TestCreateReview:
    async def test_one_review_per_purchase(self, shop):
        await seed(shop, "p-1")
        order = await bought(shop)

        review = (await shop.reviews.create_review("user-1", "p-1", order.id, 5, "great")).unwrap()
        again = await shop.reviews.create_review("user-1", "p-1", order.id, 2, "meh")

        assert review.rating == 5
        assert review.verified
        assert isinstance(again, Error)
        assert again.error.kind is ShopErrorKind.NOT_ELIGIBLE
        reviews = (await shop.reviews.list_reviews("p-1")).unwrap()
        assert [(r.rating, r.comment) for r in reviews] == [(5, "great")]

    async def test_shipped_order_is_reviewable(self, shop):
        await seed(shop, "p-1")
        order = await bought(shop, status=OrderStatus.SHIPPED)

        result = await shop.reviews.create_review("user-1", "p-1", order.id, 4)

        assert result.unwrap().comment is None

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.CANCELLED],
    )
    async def test_unfulfilled_order_not_eligible(self, shop, status):
        await seed(shop, "p-1")
        order = await bought(shop, status=status)

        result = await shop.reviews.create_review("user-1", "p-1", order.id, 5)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_ELIGIBLE

    async def test_other_owner_not_eligible(self, shop):
        await seed(shop, "p-1")
        order = await bought(shop)

        result = await shop.reviews.create_review("user-2", "p-1", order.id, 5)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_ELIGIBLE

    async def test_product_not_in_order_not_eligible(self, shop):
        await seed(shop, "p-1")
        await seed(shop, "p-2")
        order = await bought(shop)

        result = await shop.reviews.create_review("user-1", "p-2", order.id, 5)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_ELIGIBLE
        assert result.error.product_id == "p-2"

    async def test_unknown_order_not_eligible(self, shop):
        result = await shop.reviews.create_review("user-1", "p-1", "missing", 5)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_ELIGIBLE

    @pytest.mark.parametrize("rating", [0, 6, -1, True, 4.5, "5", None])
    async def test_rating_not_an_int_in_range_invalid(self, shop, rating):
        await seed(shop, "p-1")
        order = await bought(shop)

        result = await shop.reviews.create_review("user-1", "p-1", order.id, rating)

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.INVALID
        assert (await shop.reviews.list_reviews("p-1")).unwrap() == []

    async def test_blank_comment_stored_as_none(self, shop):
        await seed(shop, "p-1")
        order = await bought(shop)

        review = (await shop.reviews.create_review("user-1", "p-1", order.id, 3, "   ")).unwrap()

        assert review.comment is None


class TestAverageRating:
    async def test_mean_of_reviews(self, shop):
        await seed(shop, "p-1", stock=10)
        first = await bought(shop, owner_id="user-1")
        second = await bought(shop, owner_id="user-2")
        await shop.reviews.create_review("user-1", "p-1", first.id, 5)
        await shop.reviews.create_review("user-2", "p-1", second.id, 2)

        summary = (await shop.reviews.rating_summary("p-1")).unwrap()

        assert summary.count == 2
        assert summary.average == Decimal("3.5")
        assert summary.from_reviews

    async def test_falls_back_to_catalog_rating(self, shop):
        await seed(shop, "p-1", rating=Decimal("4.2"))

        average = (await shop.reviews.average_rating("p-1")).unwrap()

        assert average == Decimal("4.2")

    async def test_unknown_product_not_found(self, shop):
        result = await shop.reviews.average_rating("missing")

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_FOUND
