"""
Review types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from storecore._types import OrderId, OwnerId, ProductId, ReviewId


@dataclass(frozen=True, slots=True)
class Review:
    """One rating per (owner, product, order). Always a verified purchase."""

    id: ReviewId
    owner_id: OwnerId
    product_id: ProductId
    order_id: OrderId
    rating: int
    comment: str | None
    author_name: str | None
    created_at: datetime
    verified: bool = True


@dataclass(frozen=True, slots=True)
class RatingSummary:
    product_id: ProductId
    average: Decimal
    count: int

    @property
    def from_reviews(self) -> bool:
        """False when the average is the catalog default."""
        return self.count > 0


__all__ = ("Review", "RatingSummary")
