"""Business directory request/response schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from src.models.business import Contact, Location


class BusinessCreate(BaseModel):
    """Schema for submitting a business listing."""

    name: str = Field(..., min_length=1, max_length=200, description="Business name")
    description: str = Field(..., min_length=1, description="What the business does")
    category: str = Field(..., min_length=1, max_length=100, description="Directory category")
    location: Location = Field(..., description="County, town and address")
    contact: Contact = Field(..., description="Phone, email and WhatsApp")
    website: str | None = Field(default=None, max_length=500, description="Business website")
    images: list[str] = Field(default_factory=list, description="Image URLs")


class BusinessResponse(BaseModel):
    """Schema for a business listing."""

    id: str
    name: str
    description: str
    category: str
    location: Location
    contact: Contact
    website: str | None = None
    images: list[str] = Field(default_factory=list)
    owner_id: str | None = None
    is_approved: bool
    is_premium: bool
    views: int
    rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class BusinessCreatedResponse(BaseModel):
    """Schema returned after submitting a business."""

    message: str = "Business submitted successfully"
    business_id: str
    status: Literal["pending_approval"] = "pending_approval"


class PagePagination(BaseModel):
    """Page-number pagination metadata."""

    current_page: int
    has_next_page: bool
    has_prev_page: bool
    total_pages: int
    total: int


class BusinessListResponse(BaseModel):
    """Schema for a page of the business directory."""

    businesses: list[dict[str, Any]]
    pagination: PagePagination
