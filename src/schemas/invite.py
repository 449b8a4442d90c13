"""Invite and referral request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.models.invite import InviteStatus, InviteType, ReferralStatus


class InviteCreate(BaseModel):
    """Schema for sending an invite."""

    email: EmailStr = Field(..., description="Email address of the invitee")
    type: InviteType = Field(..., description="What the invite grants: business, admin or user")
    message: str = Field(default="", max_length=1000, description="Optional personal note")
    business_name: str | None = Field(default=None, max_length=200, description="Business being joined")


class InviteResponse(BaseModel):
    """Schema for an invite."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    inviter_id: str
    inviter_email: str | None = None
    inviter_name: str | None = None
    invitee_email: str
    type: InviteType
    business_name: str | None = None
    message: str
    invite_code: str
    status: InviteStatus
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None
    accepted_by: str | None = None


class InviteCreatedResponse(BaseModel):
    """Schema returned after sending an invite."""

    message: str = "Invite sent successfully"
    invite_id: str
    invite_code: str
    invite_link: str
    email_sent: bool


class InvitePreviewResponse(BaseModel):
    """Schema for previewing an invite by code."""

    invite: InviteResponse


class InviterSummary(BaseModel):
    """Who sent an accepted invite."""

    name: str | None = None
    email: str | None = None


class InviteAcceptedResponse(BaseModel):
    """Schema returned after accepting an invite."""

    message: str = "Invite accepted successfully"
    type: InviteType
    inviter: InviterSummary
    admin_granted: bool = False


class InviteStats(BaseModel):
    """Counts over the invites a user sent."""

    total_sent: int
    accepted: int
    pending: int


class InviteListResponse(BaseModel):
    """Schema for a user's sent and received invites."""

    sent_invites: list[InviteResponse]
    received_invites: list[InviteResponse]
    stats: InviteStats


class ReferralCreate(BaseModel):
    """Schema for applying a referral code."""

    referral_code: str = Field(..., min_length=1, max_length=32, description="Referral code to apply")


class ReferralResponse(BaseModel):
    """Schema for a referral."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    referrer_id: str
    referrer_email: str | None = None
    referred_user_id: str
    referred_email: str | None = None
    referral_code: str
    status: ReferralStatus
    reward_amount: float
    created_at: datetime
    completed_at: datetime | None = None


class ReferralStats(BaseModel):
    """Counts and rewards over the referrals a user made."""

    total_referrals: int
    successful_referrals: int
    pending_referrals: int
    total_rewards: float


class ReferralInfoResponse(BaseModel):
    """Schema for a user's referral code and referrals."""

    referral_code: str
    stats: ReferralStats
    referrals: list[ReferralResponse]


class ReferrerSummary(BaseModel):
    """Who issued the referral code."""

    email: str | None = None


class ReferralCreatedResponse(BaseModel):
    """Schema returned after applying a referral code."""

    message: str = "Referral processed successfully"
    reward: float
    referrer: ReferrerSummary
