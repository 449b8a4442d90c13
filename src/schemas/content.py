"""Review, report, deal, event, proof and analytics schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Schema for posting a review."""

    business_id: str = Field(..., min_length=1, description="Business being reviewed")
    rating: int = Field(..., ge=1, le=5, description="Star rating from 1 to 5")
    comment: str = Field(default="", max_length=2000)
    images: list[str] = Field(default_factory=list)


class ReviewResponse(BaseModel):
    """Schema for a review."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    user_id: str
    user_email: str | None = None
    rating: int
    comment: str
    images: list[str]
    helpful: int
    created_at: datetime


class ReviewStats(BaseModel):
    """Rating summary for a business."""

    average_rating: float
    total_reviews: int


class ReviewListResponse(BaseModel):
    """Schema for a business's reviews."""

    reviews: list[ReviewResponse]
    stats: ReviewStats


class ReviewCreatedResponse(BaseModel):
    """Schema returned after posting a review."""

    success: bool = True
    review_id: str
    average_rating: float


class ReportCreate(BaseModel):
    """Schema for reporting a business."""

    business_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)


class ReportCreatedResponse(BaseModel):
    """Schema returned after filing a report."""

    success: bool = True
    message: str = "Report submitted successfully"
    report_id: str


class DealCreate(BaseModel):
    """Schema for posting a deal."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    business_name: str = Field(..., min_length=1, max_length=200)
    expiry_date: date | None = Field(default=None, description="Last day the deal is valid")


class DealResponse(BaseModel):
    """Schema for a deal."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    business_name: str
    expiry_date: date | None = None
    created_at: datetime


class EventResponse(BaseModel):
    """Schema for an event."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    location: str | None = None
    event_date: date
    created_at: datetime | None = None


class ProofResponse(BaseModel):
    """Schema for a proof-of-visit photo."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    business_name: str
    image_url: str
    approved: bool
    created_at: datetime


class CategoryInsight(BaseModel):
    """Aggregate stats for one business category."""

    category: str
    total_businesses: int
    average_rating: float
    total_reviews: int
    top_performer: str | None = None


class InsightsResponse(BaseModel):
    """Schema for per-category insights."""

    category_stats: list[CategoryInsight]


class AnalyticsResponse(BaseModel):
    """Schema for the admin dashboard."""

    overview: dict[str, int]
    growth: dict[str, int]
    breakdown: dict[str, dict[str, int]]
    recent: dict[str, list[dict[str, Any]]]
    last_updated: datetime
