"""Invitation business logic service."""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from src.api.middleware.error_handler import (
    AlreadyProcessedError,
    DuplicateInviteError,
    EmailMismatchError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)
from src.core.auth_provider import ADMIN_ROLE, AuthProvider, get_auth_provider
from src.core.config import get_settings
from src.core.document_store import DocumentStore, QueryFilter, get_document_store
from src.models.invite import Invite, InviteStatus, InviteType
from src.services.email_service import EmailService

logger = logging.getLogger(__name__)

INVITES = "invites"
USERS = "users"

_BASE36 = string.digits + string.ascii_lowercase
INVITE_CODE_FRAGMENT_LENGTH = 13


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_invite_code() -> str:
    """Generate an invite code from two random base-36 fragments.

    Codes are 26 characters drawn from ``secrets``; collisions are
    improbable enough that no uniqueness check is made.
    """
    return "".join(
        secrets.choice(_BASE36) for _ in range(INVITE_CODE_FRAGMENT_LENGTH * 2)
    )


@dataclass
class CreatedInvite:
    """Result of sending an invite."""

    invite: Invite
    invite_link: str
    email_sent: bool


@dataclass
class AcceptedInvite:
    """Result of accepting an invite."""

    invite: Invite
    admin_granted: bool = False


async def update_profile(store: DocumentStore, user_id: str, data: dict[str, Any], email: str | None = None) -> None:
    """Apply ``data`` to a user's profile, creating the profile if missing."""
    updated = await store.update(USERS, user_id, data)
    if updated is None:
        await store.set(USERS, user_id, {"email": email, "created_at": utcnow(), **data})


class InviteService:
    """Issues invites and applies their effects when accepted.

    An invite moves once from pending to accepted. Expiry is never stored;
    it is computed from ``expires_at`` whenever an invite is read.
    """

    def __init__(
        self,
        store: DocumentStore | None = None,
        auth: AuthProvider | None = None,
        email_service: EmailService | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize invite service.

        Args:
            store: Optional document store override.
            auth: Optional auth provider override.
            email_service: Optional email sender override.
            clock: Source of the current UTC time.
        """
        settings = get_settings()
        self.store = store or get_document_store()
        self.auth = auth or get_auth_provider()
        self.email_service = email_service or EmailService()
        self.clock = clock or utcnow
        self.expiry_days = settings.invite_expiry_days
        self.frontend_url = settings.frontend_url.rstrip("/")

    def invite_link(self, code: str) -> str:
        """Link the invitee follows to accept."""
        return f"{self.frontend_url}/invite/{code}"

    async def create_invite(
        self,
        inviter_id: str,
        invitee_email: str,
        invite_type: InviteType | str,
        message: str = "",
        business_name: str | None = None,
    ) -> CreatedInvite:
        """Create an invite and email it to the invitee.

        Args:
            inviter_id: Auth id of the sender.
            invitee_email: Address the invite is intended for.
            invite_type: business, admin or user.
            message: Optional personal note.
            business_name: Business being joined, for business invites.

        Returns:
            CreatedInvite: The stored invite, its link and whether the email went out.

        Raises:
            ValidationError: If email or type is missing or the type is unknown.
            DuplicateInviteError: If a pending, unexpired invite already exists
                for the same inviter, invitee and type.
        """
        if not invitee_email or not invite_type:
            raise ValidationError("Email and type are required")
        try:
            invite_type = InviteType(invite_type)
        except ValueError as e:
            raise ValidationError(f"Unknown invite type: {invite_type}") from e

        invitee_email = invitee_email.strip().lower()
        now = self.clock()

        existing = await self.store.query(
            INVITES,
            filters=[
                QueryFilter("inviter_id", "==", inviter_id),
                QueryFilter("invitee_email", "==", invitee_email),
                QueryFilter("type", "==", invite_type.value),
                QueryFilter("status", "==", InviteStatus.PENDING.value),
            ],
        )
        if any(not Invite.model_validate(row).is_expired(now) for row in existing):
            raise DuplicateInviteError()

        inviter = await self.auth.get_user(inviter_id)
        inviter_email = inviter.email if inviter else None
        inviter_name = (inviter.display_name if inviter else None) or inviter_email

        code = generate_invite_code()
        row = await self.store.add(
            INVITES,
            {
                "inviter_id": inviter_id,
                "inviter_email": inviter_email,
                "inviter_name": inviter_name,
                "invitee_email": invitee_email,
                "type": invite_type,
                "business_name": business_name,
                "message": message or "",
                "invite_code": code,
                "status": InviteStatus.PENDING,
                "created_at": now,
                "expires_at": now + timedelta(days=self.expiry_days),
            },
        )
        invite = Invite.model_validate(row)
        link = self.invite_link(code)

        logger.info("User %s invited %s (%s)", inviter_id, invitee_email, invite_type.value)

        result = await self.email_service.send_invite_email(
            to_email=invitee_email,
            inviter_name=inviter_name or "A ThikaBizHub member",
            invite_type=invite_type.value,
            invite_link=link,
            message=invite.message,
            business_name=business_name,
        )

        return CreatedInvite(invite=invite, invite_link=link, email_sent=bool(result.get("success")))

    async def _find_by_code(self, code: str) -> Invite:
        if not code:
            raise ValidationError("Invite code is required")

        rows = await self.store.query(
            INVITES,
            filters=[QueryFilter("invite_code", "==", code)],
            limit=1,
        )
        if not rows:
            raise NotFoundError("Invalid invite code")
        return Invite.model_validate(rows[0])

    def _check_open(self, invite: Invite) -> None:
        if invite.is_expired(self.clock()):
            raise ExpiredError()
        if not invite.is_pending:
            raise AlreadyProcessedError()

    async def get_invite_by_code(self, code: str) -> Invite:
        """Look up an invite for preview.

        Raises:
            NotFoundError: If no invite has this code.
            ExpiredError: If the invite is past its expiry.
            AlreadyProcessedError: If the invite is no longer pending.
        """
        invite = await self._find_by_code(code)
        self._check_open(invite)
        return invite

    async def accept_invite(self, code: str, user_id: str, user_email: str | None) -> AcceptedInvite:
        """Accept an invite on behalf of the signed-in user.

        Checks run in order: unknown code, expiry, status, then the
        recipient address (case-insensitive). On success the invite is
        marked accepted and its type-specific effect is applied:

        - business: the acceptor becomes a member of the named business.
        - admin: the inviter's role is re-read from the auth provider and
          admin is granted only if the inviter still holds it.
        - user: the acceptor is linked to the inviter.

        Raises:
            NotFoundError, ExpiredError, AlreadyProcessedError, EmailMismatchError
        """
        invite = await self._find_by_code(code)
        self._check_open(invite)

        if (user_email or "").strip().lower() != invite.invitee_email.lower():
            raise EmailMismatchError()

        now = self.clock()
        updated = await self.store.update(
            INVITES,
            invite.id,
            {
                "status": InviteStatus.ACCEPTED,
                "accepted_at": now,
                "accepted_by": user_id,
            },
        )
        if updated is not None:
            invite = Invite.model_validate(updated)

        admin_granted = False
        if invite.type == InviteType.BUSINESS:
            await update_profile(
                self.store,
                user_id,
                {
                    "business_role": "member",
                    "invited_to_business": invite.business_name,
                    "joined_business_at": now,
                },
                email=user_email,
            )
        elif invite.type == InviteType.ADMIN:
            inviter = await self.auth.get_user(invite.inviter_id)
            if inviter is not None and inviter.role == ADMIN_ROLE:
                await self.auth.set_role(user_id, ADMIN_ROLE)
                await update_profile(self.store, user_id, {"role": ADMIN_ROLE}, email=user_email)
                admin_granted = True
            else:
                logger.warning(
                    "Admin invite %s accepted but inviter %s is no longer admin",
                    invite.id,
                    invite.inviter_id,
                )
        else:
            await update_profile(
                self.store,
                user_id,
                {"invited_by": invite.inviter_id, "joined_via_invite": True},
                email=user_email,
            )

        logger.info("User %s accepted %s invite %s", user_id, invite.type.value, invite.id)
        return AcceptedInvite(invite=invite, admin_granted=admin_granted)

    async def list_invites(self, user_id: str, email: str | None) -> dict[str, Any]:
        """List invites the user sent and received, newest first.

        Returns:
            dict: ``sent``, ``received`` and ``stats`` with total_sent,
            accepted and pending counts for sent invites.
        """
        sent_rows = await self.store.query(
            INVITES,
            filters=[QueryFilter("inviter_id", "==", user_id)],
            order_by="created_at",
        )
        sent = [Invite.model_validate(row) for row in sent_rows]

        received: list[Invite] = []
        if email:
            received_rows = await self.store.query(
                INVITES,
                filters=[QueryFilter("invitee_email", "==", email.strip().lower())],
                order_by="created_at",
            )
            received = [Invite.model_validate(row) for row in received_rows]

        return {
            "sent": sent,
            "received": received,
            "stats": {
                "total_sent": len(sent),
                "accepted": sum(1 for i in sent if i.status == InviteStatus.ACCEPTED),
                "pending": sum(1 for i in sent if i.status == InviteStatus.PENDING),
            },
        }
