"""Business directory record definitions."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Location(BaseModel):
    """Where a business is."""

    county: str | None = None
    town: str | None = None
    address: str | None = None
    coordinates: dict[str, float] | None = None


class Contact(BaseModel):
    """How to reach a business."""

    phone: str | None = None
    email: str | None = None
    whatsapp: str | None = None


class Business(BaseModel):
    """Row of the businesses table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    category: str = "Other"
    location: Location = Field(default_factory=Location)
    contact: Contact = Field(default_factory=Contact)
    website: str | None = None
    images: list[str] = Field(default_factory=list)
    owner_id: str | None = None
    is_approved: bool = False
    is_premium: bool = False
    views: int = 0
    rating: float = 0
    review_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("location", "contact", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """Treat a null location or contact column as empty."""
        return {} if v is None else v


class Review(BaseModel):
    """Row of the reviews table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    business_id: str
    user_id: str
    user_email: str | None = None
    rating: int
    comment: str = ""
    images: list[str] = Field(default_factory=list)
    helpful: int = 0
    created_at: datetime


class Report(BaseModel):
    """Row of the reports table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    business_id: str
    reported_by: str
    reporter_email: str | None = None
    reason: str
    description: str = ""
    status: str = "pending"
    created_at: datetime


class Deal(BaseModel):
    """Row of the deals table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    title: str
    description: str = ""
    business_name: str = ""
    expiry_date: date | None = None
    created_at: datetime


class Event(BaseModel):
    """Row of the events table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    title: str
    description: str = ""
    location: str | None = None
    event_date: date
    created_at: datetime | None = None


class Proof(BaseModel):
    """Row of the proofs table (proof-of-visit photos)."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    name: str
    business_name: str
    image_url: str
    approved: bool = False
    created_at: datetime
