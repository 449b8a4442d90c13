"""User profile request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Schema for creating the caller's profile on first login."""

    referral_code: str | None = Field(default=None, max_length=32, description="Optional referral code")


class UserProfileResponse(BaseModel):
    """Schema for a user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None = None
    display_name: str | None = None
    role: str
    referral_code: str | None = None
    referred_by: str | None = None
    used_referral_code: str | None = None
    invited_by: str | None = None
    joined_via_invite: bool = False
    business_role: str | None = None
    invited_to_business: str | None = None
    joined_business_at: datetime | None = None
    favorites: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


class UserCreatedResponse(BaseModel):
    """Schema returned from create-on-first-login."""

    message: str
    role: str
    referral_applied: bool = False


class AuthUserResponse(BaseModel):
    """Schema for a user as listed by the auth provider."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: str | None = None
    display_name: str | None = None
    role: str
    disabled: bool
    last_sign_in_at: datetime | None = None
    created_at: datetime | None = None


class SetRoleRequest(BaseModel):
    """Schema for changing a user's role."""

    uid: str = Field(..., min_length=1, description="Auth id of the user")
    role: Literal["user", "admin"] = Field(..., description="Role to assign")


class FavoritesResponse(BaseModel):
    """Schema for a user's favorite businesses."""

    favorites: list[str]


class FavoriteToggleResponse(BaseModel):
    """Schema returned after toggling a favorite."""

    business_id: str
    is_favorite: bool
