"""Business directory service."""

import logging
import math
from typing import Any

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.core.cache import TTLCache, make_cache_key
from src.core.config import get_settings
from src.core.document_store import DocumentStore, QueryFilter, SortDirection, get_document_store
from src.models.business import Business
from src.schemas.business import BusinessCreate
from src.services.invite_service import utcnow
from src.services.pagination import PageRequest, PageResult, PaginationHelper

logger = logging.getLogger(__name__)

BUSINESSES = "businesses"

# Every cache key owned by this service starts with this prefix.
CACHE_PREFIX = "businesses_"

APPROVED = QueryFilter("is_approved", "==", True)


def _dump(business: Business) -> dict[str, Any]:
    return business.model_dump(mode="json")


class BusinessService:
    """Listing, search, submission and moderation of businesses."""

    def __init__(
        self,
        cache: TTLCache,
        store: DocumentStore | None = None,
        pagination: PaginationHelper | None = None,
    ) -> None:
        """Initialize business service.

        Args:
            cache: Process cache for listings and counts.
            store: Optional document store override.
            pagination: Optional pagination helper override.
        """
        settings = get_settings()
        self.cache = cache
        self.store = store or get_document_store()
        self.pagination = pagination or PaginationHelper(store=self.store)
        self.listing_ttl = settings.businesses_cache_ttl
        self.count_ttl = settings.count_cache_ttl

    def invalidate_cache(self) -> int:
        """Drop every cached listing and count."""
        removed = self.cache.invalidate_pattern(CACHE_PREFIX)
        logger.debug("Invalidated %d business cache entries", removed)
        return removed

    async def list_businesses(
        self,
        page: int = 1,
        limit: int = 10,
        category: str | None = None,
        county: str | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        """List approved businesses with page-number pagination.

        Filtering happens in memory over all approved businesses. Category
        and county match exactly (``all`` disables the filter); ``search``
        is a case-insensitive substring match on name, description and
        category. Results are newest first and cached per parameter set.

        Returns:
            dict: ``businesses`` and ``pagination`` metadata.
        """
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        cache_key = make_cache_key(f"{CACHE_PREFIX}list", page, limit, category, county, search)
        hit = self.cache.get(cache_key)
        if hit is not None:
            return hit

        rows = await self.store.query(BUSINESSES, filters=[APPROVED])
        businesses = [Business.model_validate(row) for row in rows]

        if category and category != "all":
            businesses = [b for b in businesses if b.category == category]
        if county and county != "all":
            businesses = [b for b in businesses if b.location.county == county]
        if search:
            needle = search.lower()
            businesses = [
                b
                for b in businesses
                if needle in b.name.lower()
                or needle in b.description.lower()
                or needle in b.category.lower()
            ]

        businesses.sort(key=lambda b: b.created_at, reverse=True)

        start = (page - 1) * limit
        end = start + limit
        result = {
            "businesses": [_dump(b) for b in businesses[start:end]],
            "pagination": {
                "current_page": page,
                "has_next_page": end < len(businesses),
                "has_prev_page": page > 1,
                "total_pages": math.ceil(len(businesses) / limit),
                "total": len(businesses),
            },
        }

        self.cache.set(cache_key, result, self.listing_ttl)
        return result

    async def count_approved(self, category: str | None = None) -> int:
        """Count approved businesses, cached."""
        cache_key = make_cache_key(f"{CACHE_PREFIX}count", category or "all")
        hit = self.cache.get(cache_key)
        if hit is not None:
            return hit

        filters = [APPROVED]
        if category and category != "all":
            filters.append(QueryFilter("category", "==", category))

        count = await self.pagination.get_total_count(BUSINESSES, filters)
        self.cache.set(cache_key, count, self.count_ttl)
        return count

    async def browse(
        self,
        page_size: int,
        cursor: str | None = None,
        direction: str = "next",
        category: str | None = None,
    ) -> PageResult[dict[str, Any]]:
        """Cursor-paginate approved businesses, newest first.

        Args:
            page_size: Rows per page.
            cursor: Token from a previous page.
            direction: ``next`` reads after the cursor, ``prev`` before it.
            category: Optional exact category filter.
        """
        filters = [APPROVED]
        if category and category != "all":
            filters.append(QueryFilter("category", "==", category))

        request = PageRequest(
            page_size=page_size,
            order_field="created_at",
            direction=SortDirection.DESC,
            filters=filters,
        )
        if cursor and direction == "prev":
            request.end_before = cursor
        elif cursor:
            request.start_after = cursor

        page = await self.pagination.paginate(BUSINESSES, request)
        page.items = [_dump(Business.model_validate(row)) for row in page.items]
        page.total_count = await self.count_approved(category)
        return page

    async def search(
        self,
        term: str,
        page_size: int,
        cursor: str | None = None,
    ) -> PageResult[dict[str, Any]]:
        """Prefix search approved businesses by name."""
        request = PageRequest(
            page_size=page_size,
            direction=SortDirection.ASC,
            start_after=cursor,
            filters=[APPROVED],
        )
        page = await self.pagination.search(BUSINESSES, "name", term.strip(), request)
        page.items = [_dump(Business.model_validate(row)) for row in page.items]
        return page

    async def get_business(self, business_id: str) -> Business:
        """Get a business by id.

        Raises:
            NotFoundError: If the business does not exist.
        """
        row = await self.store.get(BUSINESSES, business_id)
        if row is None:
            raise NotFoundError("Business not found")
        return Business.model_validate(row)

    async def create_business(self, owner_id: str, data: BusinessCreate) -> Business:
        """Submit a business for approval."""
        now = utcnow()
        row = await self.store.add(
            BUSINESSES,
            {
                "name": data.name,
                "description": data.description,
                "category": data.category,
                "location": data.location.model_dump(),
                "contact": data.contact.model_dump(),
                "website": data.website,
                "images": data.images,
                "owner_id": owner_id,
                "is_approved": False,
                "is_premium": False,
                "views": 0,
                "rating": 0,
                "review_count": 0,
                "created_at": now,
                "updated_at": now,
            },
        )
        business = Business.model_validate(row)
        self.invalidate_cache()

        logger.info("Business %s submitted by %s", business.id, owner_id)
        return business

    async def list_pending(self) -> list[Business]:
        """List businesses awaiting approval, newest first."""
        rows = await self.store.query(
            BUSINESSES,
            filters=[QueryFilter("is_approved", "==", False)],
            order_by="created_at",
        )
        return [Business.model_validate(row) for row in rows]

    async def approve(self, business_id: str) -> Business:
        """Approve a pending business.

        Raises:
            NotFoundError: If the business does not exist.
        """
        row = await self.store.update(
            BUSINESSES,
            business_id,
            {"is_approved": True, "updated_at": utcnow()},
        )
        if row is None:
            raise NotFoundError("Business not found")

        self.invalidate_cache()
        logger.info("Business %s approved", business_id)
        return Business.model_validate(row)

    async def reject(self, business_id: str) -> None:
        """Reject a business by deleting it.

        Raises:
            NotFoundError: If the business does not exist.
        """
        if not await self.store.delete(BUSINESSES, business_id):
            raise NotFoundError("Business not found")

        self.invalidate_cache()
        logger.info("Business %s rejected", business_id)
