"""Business review and report service."""

import logging
from typing import Any

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.core.cache import TTLCache
from src.core.document_store import DocumentStore, QueryFilter, get_document_store
from src.models.business import Report, Review
from src.services.business_service import BUSINESSES, CACHE_PREFIX
from src.services.invite_service import utcnow

logger = logging.getLogger(__name__)

REVIEWS = "reviews"
REPORTS = "reports"

MIN_RATING = 1
MAX_RATING = 5


def average_rating(reviews: list[Review]) -> float:
    """Mean rating of ``reviews``, 0 when there are none."""
    if not reviews:
        return 0.0
    return sum(r.rating for r in reviews) / len(reviews)


class ReviewService:
    """Reviews, the ratings derived from them, and abuse reports."""

    def __init__(self, store: DocumentStore | None = None, cache: TTLCache | None = None) -> None:
        self.store = store or get_document_store()
        self.cache = cache

    async def list_reviews(self, business_id: str) -> dict[str, Any]:
        """List a business's reviews, newest first, with rating stats.

        Returns:
            dict: ``reviews`` and ``stats`` (average_rating to one decimal,
            total_reviews).
        """
        if not business_id:
            raise ValidationError("Business ID required")

        rows = await self.store.query(
            REVIEWS,
            filters=[QueryFilter("business_id", "==", business_id)],
            order_by="created_at",
        )
        reviews = [Review.model_validate(row) for row in rows]

        return {
            "reviews": reviews,
            "stats": {
                "average_rating": round(average_rating(reviews), 1),
                "total_reviews": len(reviews),
            },
        }

    async def create_review(
        self,
        business_id: str,
        user_id: str,
        user_email: str | None,
        rating: int,
        comment: str = "",
        images: list[str] | None = None,
    ) -> tuple[Review, float]:
        """Add a review and recompute the business's rating.

        Returns:
            tuple: The stored review and the new average rating.

        Raises:
            ValidationError: If the rating is outside 1..5 or the user has
                already reviewed this business.
            NotFoundError: If the business does not exist.
        """
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        if await self.store.get(BUSINESSES, business_id) is None:
            raise NotFoundError("Business not found")

        existing = await self.store.query(
            REVIEWS,
            filters=[
                QueryFilter("business_id", "==", business_id),
                QueryFilter("user_id", "==", user_id),
            ],
            limit=1,
        )
        if existing:
            raise ValidationError("You have already reviewed this business")

        row = await self.store.add(
            REVIEWS,
            {
                "business_id": business_id,
                "user_id": user_id,
                "user_email": user_email,
                "rating": rating,
                "comment": comment or "",
                "images": images or [],
                "helpful": 0,
                "created_at": utcnow(),
            },
        )
        review = Review.model_validate(row)

        new_average = await self.recompute_rating(business_id)
        return review, new_average

    async def recompute_rating(self, business_id: str) -> float:
        """Recompute a business's rating and review count from its reviews."""
        rows = await self.store.query(
            REVIEWS,
            filters=[QueryFilter("business_id", "==", business_id)],
        )
        reviews = [Review.model_validate(row) for row in rows]
        rating = average_rating(reviews)

        await self.store.update(
            BUSINESSES,
            business_id,
            {"rating": rating, "review_count": len(reviews)},
        )
        if self.cache is not None:
            self.cache.invalidate_pattern(CACHE_PREFIX)

        logger.debug("Business %s rating now %.2f over %d reviews", business_id, rating, len(reviews))
        return rating

    async def create_report(
        self,
        business_id: str,
        reported_by: str,
        reporter_email: str | None,
        reason: str,
        description: str = "",
    ) -> Report:
        """File a report against a business listing."""
        if not business_id or not reason:
            raise ValidationError("Business ID and reason required")

        row = await self.store.add(
            REPORTS,
            {
                "business_id": business_id,
                "reported_by": reported_by,
                "reporter_email": reporter_email,
                "reason": reason,
                "description": description or "",
                "status": "pending",
                "created_at": utcnow(),
            },
        )
        logger.info("Report filed against business %s by %s", business_id, reported_by)
        return Report.model_validate(row)
