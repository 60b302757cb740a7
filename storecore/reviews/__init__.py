"""
Reviews — purchase-gated ratings and the average rating read.

    from storecore.reviews import ReviewGate
"""

from __future__ import annotations

from storecore.reviews._types import Review, RatingSummary
from storecore.reviews._store import ReviewStore
from storecore.reviews._gate import MIN_RATING, MAX_RATING, ReviewGate

__all__ = (
    "Review",
    "RatingSummary",
    "ReviewStore",
    "MIN_RATING",
    "MAX_RATING",
    "ReviewGate",
)
