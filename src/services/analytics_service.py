"""Admin dashboard analytics and category insights."""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Callable

from src.core.cache import TTLCache, cached
from src.core.config import get_settings
from src.core.document_store import DocumentStore, QueryFilter, get_document_store
from src.models.business import Business
from src.models.user import UserProfile
from src.services.business_service import BUSINESSES
from src.services.invite_service import INVITES, USERS, utcnow

logger = logging.getLogger(__name__)

ANALYTICS_CACHE_KEY = "dashboard_analytics"
RECENT_WINDOW_DAYS = 30
GROWTH_WINDOW_DAYS = 7
RECENT_LIMIT = 10


class AnalyticsService:
    """Aggregates over users, businesses and invites for admins.

    Both reports scan whole collections, so they are served from the
    process cache.
    """

    def __init__(
        self,
        cache: TTLCache,
        store: DocumentStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize analytics service.

        Args:
            cache: Process cache.
            store: Optional document store override.
            clock: Source of the current UTC time.
        """
        settings = get_settings()
        self.cache = cache
        self.store = store or get_document_store()
        self.clock = clock or utcnow
        self.ttl = settings.analytics_cache_ttl
        self.get_insights = cached(cache, ttl_seconds=self.ttl, prefix="insights")(self._category_insights)

    async def get_analytics(self) -> dict[str, Any]:
        """Dashboard overview, growth, breakdowns and recent activity.

        Cached for ``analytics_cache_ttl`` seconds under a fixed key.
        """
        hit = self.cache.get(ANALYTICS_CACHE_KEY)
        if hit is not None:
            return hit

        now = self.clock()
        recent_since = now - timedelta(days=RECENT_WINDOW_DAYS)
        growth_since = now - timedelta(days=GROWTH_WINDOW_DAYS)

        business_rows = await self.store.query(BUSINESSES)
        businesses = [Business.model_validate(row) for row in business_rows]
        total_users = await self.store.count(USERS)
        total_invites = await self.store.count(INVITES)

        new_users = await self.store.count(USERS, [QueryFilter("created_at", ">=", growth_since)])
        new_businesses = sum(1 for b in businesses if b.created_at >= growth_since)

        recent_users = await self.store.query(
            USERS,
            filters=[QueryFilter("created_at", ">=", recent_since)],
            order_by="created_at",
            limit=RECENT_LIMIT,
        )
        recent_businesses = sorted(
            (b for b in businesses if b.created_at >= recent_since),
            key=lambda b: b.created_at,
            reverse=True,
        )[:RECENT_LIMIT]

        by_category = Counter(b.category for b in businesses)
        by_county = Counter(b.location.county for b in businesses if b.location.county)

        approved = sum(1 for b in businesses if b.is_approved)
        analytics = {
            "overview": {
                "total_users": total_users,
                "total_businesses": len(businesses),
                "approved_businesses": approved,
                "pending_businesses": len(businesses) - approved,
                "total_invites": total_invites,
            },
            "growth": {
                "new_users_this_week": new_users,
                "new_businesses_this_week": new_businesses,
            },
            "breakdown": {
                "by_category": dict(by_category),
                "by_county": dict(by_county),
            },
            "recent": {
                "users": [UserProfile.model_validate(row).model_dump(mode="json") for row in recent_users],
                "businesses": [b.model_dump(mode="json") for b in recent_businesses],
            },
            "last_updated": now.isoformat(),
        }

        self.cache.set(ANALYTICS_CACHE_KEY, analytics, self.ttl)
        logger.info("Dashboard analytics recomputed")
        return analytics

    async def _category_insights(self) -> list[dict[str, Any]]:
        """Per-category business counts, ratings, reviews and top performer.

        The average rating only counts businesses that have a rating.
        Categories are sorted by business count, largest first.
        """
        rows = await self.store.query(BUSINESSES)
        businesses = [Business.model_validate(row) for row in rows]

        stats: dict[str, dict[str, Any]] = {}
        for business in businesses:
            category = business.category or "Other"
            entry = stats.setdefault(
                category,
                {
                    "category": category,
                    "total_businesses": 0,
                    "rating_sum": 0.0,
                    "rated_businesses": 0,
                    "total_reviews": 0,
                    "top_performer": None,
                    "top_rating": 0.0,
                },
            )
            entry["total_businesses"] += 1
            entry["total_reviews"] += business.review_count

            if business.rating:
                entry["rating_sum"] += business.rating
                entry["rated_businesses"] += 1
                if business.rating > entry["top_rating"]:
                    entry["top_rating"] = business.rating
                    entry["top_performer"] = business.name

        insights = [
            {
                "category": entry["category"],
                "total_businesses": entry["total_businesses"],
                "average_rating": (
                    entry["rating_sum"] / entry["rated_businesses"] if entry["rated_businesses"] else 0.0
                ),
                "total_reviews": entry["total_reviews"],
                "top_performer": entry["top_performer"],
            }
            for entry in stats.values()
        ]
        insights.sort(key=lambda i: i["total_businesses"], reverse=True)
        return insights
