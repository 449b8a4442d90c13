"""Invite and referral API routes."""

from fastapi import APIRouter, status

from src.api.deps import CurrentUser
from src.schemas.invite import (
    InviteAcceptedResponse,
    InviteCreate,
    InviteCreatedResponse,
    InviteListResponse,
    InvitePreviewResponse,
    InviteResponse,
    InviterSummary,
    InviteStats,
    ReferralCreate,
    ReferralCreatedResponse,
    ReferralInfoResponse,
    ReferralResponse,
    ReferralStats,
    ReferrerSummary,
)
from src.services.invite_service import InviteService
from src.services.referral_service import ReferralService

router = APIRouter(tags=["invites"])


@router.get(
    "/invites",
    response_model=InviteListResponse,
    summary="List my invites",
    description="Invites the caller sent and received, newest first, with counts.",
)
async def list_invites(user: CurrentUser) -> InviteListResponse:
    result = await InviteService().list_invites(user.user_id, user.email)
    return InviteListResponse(
        sent_invites=[InviteResponse.model_validate(i) for i in result["sent"]],
        received_invites=[InviteResponse.model_validate(i) for i in result["received"]],
        stats=InviteStats(**result["stats"]),
    )


@router.post(
    "/invites",
    response_model=InviteCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send an invite",
)
async def create_invite(data: InviteCreate, user: CurrentUser) -> InviteCreatedResponse:
    """Send an invite to an email address.

    Raises:
        DuplicateInviteError: 400 if a pending invite was already sent.
    """
    created = await InviteService().create_invite(
        inviter_id=user.user_id,
        invitee_email=data.email,
        invite_type=data.type,
        message=data.message,
        business_name=data.business_name,
    )
    return InviteCreatedResponse(
        invite_id=created.invite.id,
        invite_code=created.invite.invite_code,
        invite_link=created.invite_link,
        email_sent=created.email_sent,
    )


@router.get(
    "/invites/{code}",
    response_model=InvitePreviewResponse,
    summary="Preview an invite",
    description="Public. Fails if the code is unknown, expired or already used.",
)
async def get_invite(code: str) -> InvitePreviewResponse:
    invite = await InviteService().get_invite_by_code(code)
    return InvitePreviewResponse(invite=InviteResponse.model_validate(invite))


@router.post(
    "/invites/{code}/accept",
    response_model=InviteAcceptedResponse,
    summary="Accept an invite",
)
async def accept_invite(code: str, user: CurrentUser) -> InviteAcceptedResponse:
    accepted = await InviteService().accept_invite(code, user.user_id, user.email)
    invite = accepted.invite
    return InviteAcceptedResponse(
        type=invite.type,
        inviter=InviterSummary(name=invite.inviter_name, email=invite.inviter_email),
        admin_granted=accepted.admin_granted,
    )


@router.get(
    "/referrals",
    response_model=ReferralInfoResponse,
    summary="Get my referral code and referrals",
)
async def get_referrals(user: CurrentUser) -> ReferralInfoResponse:
    info = await ReferralService().get_referral_info(user.user_id)
    return ReferralInfoResponse(
        referral_code=info["referral_code"],
        stats=ReferralStats(**info["stats"]),
        referrals=[ReferralResponse.model_validate(r) for r in info["referrals"]],
    )


@router.post(
    "/referrals",
    response_model=ReferralCreatedResponse,
    summary="Apply a referral code",
)
async def create_referral(data: ReferralCreate, user: CurrentUser) -> ReferralCreatedResponse:
    referral, referrer = await ReferralService().create_referral(
        data.referral_code,
        user.user_id,
        user.email,
    )
    return ReferralCreatedResponse(
        reward=referral.reward_amount,
        referrer=ReferrerSummary(email=referrer.email),
    )
