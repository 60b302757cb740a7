"""
Review eligibility gate.

A review needs a purchase: the order must belong to the reviewer,
contain the product, and be shipped or completed. Each
(owner, product, order) triple is reviewed at most once.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from combinators import parallel
from kungfu import LazyCoroResult, Result, Ok, Error

from storecore._errors import ShopError, ShopErrors
from storecore._types import OrderId, OwnerId, ProductId
from storecore.catalog import CatalogStore
from storecore.orders import REVIEWABLE, OrderStore
from storecore.reviews._store import ReviewStore
from storecore.reviews._types import RatingSummary, Review

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewGate:
    def __init__(
        self,
        reviews: ReviewStore,
        orders: OrderStore,
        catalog: CatalogStore,
    ) -> None:
        self._reviews = reviews
        self._orders = orders
        self._catalog = catalog

    async def create_review(
        self,
        owner_id: OwnerId,
        product_id: ProductId,
        order_id: OrderId,
        rating: int,
        comment: str | None = None,
        author_name: str | None = None,
    ) -> Result[Review, ShopError]:
        """
        Persist a review if the owner bought the product in a fulfilled order.

        Example:
            match await gate.create_review("user-1", "p-1", order.id, 5, "great"):
                case Ok(review): ...
                case Error(e): ...  # NOT_ELIGIBLE: not bought, not fulfilled, or duplicate
        """
        if not isinstance(rating, int) or isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
            return Error(ShopErrors.invalid(
                f"Rating must be {MIN_RATING}-{MAX_RATING}, got {rating!r}",
                product_id=product_id,
                order_id=order_id,
            ))

        eligible = await self._check_purchase(owner_id, product_id, order_id)
        if isinstance(eligible, Error):
            return Error(eligible.error)

        review = Review(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            product_id=product_id,
            order_id=order_id,
            rating=rating,
            comment=(comment or "").strip() or None,
            author_name=author_name,
            created_at=datetime.now(UTC),
        )

        match await self._reviews.insert_if_absent(review):
            case Ok(True):
                logger.info("Review %s: %s rated %s %d/5", review.id, owner_id, product_id, rating)
                return Ok(review)
            case Ok(False):
                return Error(ShopErrors.already_reviewed(product_id, order_id))
            case Error(e):
                return Error(e)

    async def _check_purchase(
        self, owner_id: OwnerId, product_id: ProductId, order_id: OrderId
    ) -> Result[None, ShopError]:
        match await self._orders.get(order_id):
            case Ok(order) if (
                order is not None
                and order.owner_id == owner_id
                and order.status in REVIEWABLE
                and order.line(product_id) is not None
            ):
                return Ok(None)
            case Ok(_):
                return Error(ShopErrors.not_purchased(product_id, order_id))
            case Error(e):
                return Error(e)

    async def list_reviews(self, product_id: ProductId) -> Result[list[Review], ShopError]:
        """Newest first."""
        return await self._reviews.list_for_product(product_id)

    async def rating_summary(self, product_id: ProductId) -> Result[RatingSummary, ShopError]:
        """Mean of the product's reviews, or its catalog rating when it has none."""
        loaded = await parallel(
            LazyCoroResult(lambda: self._catalog.get_product(product_id)),
            LazyCoroResult(lambda: self._reviews.list_for_product(product_id)),
        )
        match loaded:
            case Ok([None, _]):
                return Error(ShopErrors.product_not_found(product_id))
            case Ok([product, []]):
                return Ok(RatingSummary(product_id, product.rating, 0))
            case Ok([_, reviews]):
                total = sum(Decimal(r.rating) for r in reviews)
                return Ok(RatingSummary(product_id, total / len(reviews), len(reviews)))
            case Error(e):
                return Error(e)

    async def average_rating(self, product_id: ProductId) -> Result[Decimal, ShopError]:
        return (await self.rating_summary(product_id)).map(lambda s: s.average)


__all__ = ("MIN_RATING", "MAX_RATING", "ReviewGate")
