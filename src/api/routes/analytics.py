"""Admin analytics and insights routes."""

from fastapi import APIRouter

from src.api.deps import AdminUser, AppCache
from src.schemas.content import AnalyticsResponse, CategoryInsight, InsightsResponse
from src.services.analytics_service import AnalyticsService

router = APIRouter(tags=["analytics"])


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Dashboard analytics",
    description="Overview counts, weekly growth, breakdowns and recent activity. Cached.",
)
async def get_analytics(admin: AdminUser, cache: AppCache) -> AnalyticsResponse:
    analytics = await AnalyticsService(cache).get_analytics()
    return AnalyticsResponse(**analytics)


@router.get(
    "/insights",
    response_model=InsightsResponse,
    summary="Category insights",
)
async def get_insights(admin: AdminUser, cache: AppCache) -> InsightsResponse:
    insights = await AnalyticsService(cache).get_insights()
    return InsightsResponse(category_stats=[CategoryInsight(**i) for i in insights])
