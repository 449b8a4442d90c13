"""Business directory API routes."""

from typing import Any, Literal

from fastapi import APIRouter, Query, status

from src.api.deps import AppCache, CurrentUser
from src.schemas.business import (
    BusinessCreate,
    BusinessCreatedResponse,
    BusinessListResponse,
    BusinessResponse,
)
from src.schemas.common import PageResponse
from src.services.business_service import BusinessService

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get(
    "",
    response_model=BusinessListResponse,
    summary="List approved businesses",
    description="Page-number listing with optional category, county and text filters. Cached.",
)
async def list_businesses(
    cache: AppCache,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    category: str | None = Query(default=None),
    county: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
) -> BusinessListResponse:
    service = BusinessService(cache)
    result = await service.list_businesses(
        page=page,
        limit=limit,
        category=category,
        county=county,
        search=search,
    )
    return BusinessListResponse(**result)


@router.get(
    "/browse",
    response_model=PageResponse[dict[str, Any]],
    summary="Browse approved businesses by cursor",
)
async def browse_businesses(
    cache: AppCache,
    page_size: int = Query(default=10),
    cursor: str | None = Query(default=None),
    direction: Literal["next", "prev"] = Query(default="next"),
    category: str | None = Query(default=None),
) -> PageResponse[dict[str, Any]]:
    """Cursor-paginated browse, newest first, with a cached total count.

    Pass ``next_cursor`` with ``direction=next`` to move forward or
    ``prev_cursor`` with ``direction=prev`` to move back.
    """
    page = await BusinessService(cache).browse(
        page_size=page_size,
        cursor=cursor,
        direction=direction,
        category=category,
    )
    return PageResponse[dict[str, Any]](**page.to_dict())


@router.get(
    "/search",
    response_model=PageResponse[dict[str, Any]],
    summary="Search businesses by name prefix",
)
async def search_businesses(
    cache: AppCache,
    q: str = Query(..., description="Name prefix (case-sensitive)"),
    page_size: int = Query(default=10),
    cursor: str | None = Query(default=None),
) -> PageResponse[dict[str, Any]]:
    page = await BusinessService(cache).search(q, page_size=page_size, cursor=cursor)
    return PageResponse[dict[str, Any]](**page.to_dict())


@router.get(
    "/{business_id}",
    response_model=BusinessResponse,
    summary="Get a business",
)
async def get_business(business_id: str, cache: AppCache) -> BusinessResponse:
    business = await BusinessService(cache).get_business(business_id)
    return BusinessResponse.model_validate(business)


@router.post(
    "",
    response_model=BusinessCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a business",
    description="Creates an unapproved listing that an admin must approve.",
)
async def create_business(
    data: BusinessCreate,
    user: CurrentUser,
    cache: AppCache,
) -> BusinessCreatedResponse:
    business = await BusinessService(cache).create_business(user.user_id, data)
    return BusinessCreatedResponse(business_id=business.id)
