"""Review and report API routes."""

from fastapi import APIRouter, Query, status

from src.api.deps import AppCache, CurrentUser
from src.schemas.content import (
    ReportCreate,
    ReportCreatedResponse,
    ReviewCreate,
    ReviewCreatedResponse,
    ReviewListResponse,
    ReviewResponse,
    ReviewStats,
)
from src.services.review_service import ReviewService

router = APIRouter(tags=["reviews"])


@router.get(
    "/reviews",
    response_model=ReviewListResponse,
    summary="List reviews for a business",
)
async def list_reviews(business_id: str = Query(..., min_length=1)) -> ReviewListResponse:
    result = await ReviewService().list_reviews(business_id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in result["reviews"]],
        stats=ReviewStats(**result["stats"]),
    )


@router.post(
    "/reviews",
    response_model=ReviewCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a business",
    description="One review per user per business. Recomputes the business rating.",
)
async def create_review(data: ReviewCreate, user: CurrentUser, cache: AppCache) -> ReviewCreatedResponse:
    review, average = await ReviewService(cache=cache).create_review(
        business_id=data.business_id,
        user_id=user.user_id,
        user_email=user.email,
        rating=data.rating,
        comment=data.comment,
        images=data.images,
    )
    return ReviewCreatedResponse(review_id=review.id, average_rating=round(average, 1))


@router.post(
    "/reports",
    response_model=ReportCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a business",
)
async def create_report(data: ReportCreate, user: CurrentUser) -> ReportCreatedResponse:
    report = await ReviewService().create_report(
        business_id=data.business_id,
        reported_by=user.user_id,
        reporter_email=user.email,
        reason=data.reason,
        description=data.description,
    )
    return ReportCreatedResponse(report_id=report.id)
