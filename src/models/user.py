"""User profile record definition."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Row of the users table, keyed by the auth user id.

    Holds the application-side view of a user: role mirror, referral
    bookkeeping, invite side effects and favorites.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    email: str | None = None
    display_name: str | None = None
    role: str = "user"
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
