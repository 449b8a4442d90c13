"""Invite and referral record definitions."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InviteType(str, Enum):
    """What accepting the invite grants."""

    BUSINESS = "business"
    ADMIN = "admin"
    USER = "user"


class InviteStatus(str, Enum):
    """Invite status values.

    There is no stored expired status; expiry is derived from expires_at.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"


class ReferralStatus(str, Enum):
    """Referral status values."""

    PENDING = "pending"
    COMPLETED = "completed"


class Invite(BaseModel):
    """Row of the invites table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    inviter_id: str
    inviter_email: str | None = None
    inviter_name: str | None = None
    invitee_email: str
    type: InviteType = InviteType.USER
    business_name: str | None = None
    message: str = ""
    invite_code: str
    status: InviteStatus = InviteStatus.PENDING
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None
    accepted_by: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """Check whether the invite has passed its expiry at ``now``."""
        return now > self.expires_at

    @property
    def is_pending(self) -> bool:
        """Check whether the invite can still be accepted."""
        return self.status == InviteStatus.PENDING


class Referral(BaseModel):
    """Row of the referrals table."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    referrer_id: str
    referrer_email: str | None = None
    referred_user_id: str
    referred_email: str | None = None
    referral_code: str
    status: ReferralStatus = ReferralStatus.COMPLETED
    reward_amount: float = Field(default=0)
    created_at: datetime
    completed_at: datetime | None = None
