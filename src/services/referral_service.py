"""Referral code and referral record service."""

import logging
import secrets
import string
from datetime import datetime
from typing import Any, Callable

from src.api.middleware.error_handler import (
    AlreadyReferredError,
    InvalidCodeError,
    NotFoundError,
    SelfReferralError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.document_store import DocumentStore, QueryFilter, get_document_store
from src.models.invite import Referral, ReferralStatus
from src.models.user import UserProfile
from src.services.invite_service import USERS, update_profile, utcnow

logger = logging.getLogger(__name__)

REFERRALS = "referrals"

REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 10


def generate_referral_code() -> str:
    """Generate an 8-character referral code from A-Z and 0-9."""
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))


class ReferralService:
    """Hands out referral codes and records who referred whom."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store or get_document_store()
        self.clock = clock or utcnow
        self.reward_amount = get_settings().referral_reward_amount

    async def _code_in_use(self, code: str) -> bool:
        rows = await self.store.query(
            USERS,
            filters=[QueryFilter("referral_code", "==", code)],
            limit=1,
        )
        return bool(rows)

    async def _unique_referral_code(self) -> str:
        """Generate a code no user holds yet.

        Raises:
            RuntimeError: If every attempt collided.
        """
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_referral_code()
            if not await self._code_in_use(code):
                return code
        raise RuntimeError(f"Could not generate a unique referral code in {MAX_CODE_ATTEMPTS} attempts")

    async def get_referral_info(self, user_id: str) -> dict[str, Any]:
        """Get the user's referral code, referrals and stats.

        A referral code is assigned on the first call.

        Returns:
            dict: ``referral_code``, ``referrals`` and ``stats`` with
            total_referrals, successful_referrals, pending_referrals and
            total_rewards.

        Raises:
            NotFoundError: If the user has no profile.
        """
        row = await self.store.get(USERS, user_id)
        if row is None:
            raise NotFoundError("User not found")

        profile = UserProfile.model_validate(row)
        referral_code = profile.referral_code
        if not referral_code:
            referral_code = await self._unique_referral_code()
            await self.store.update(USERS, user_id, {"referral_code": referral_code})
            logger.info("Assigned referral code to user %s", user_id)

        rows = await self.store.query(
            REFERRALS,
            filters=[QueryFilter("referrer_id", "==", user_id)],
            order_by="created_at",
        )
        referrals = [Referral.model_validate(r) for r in rows]

        return {
            "referral_code": referral_code,
            "referrals": referrals,
            "stats": {
                "total_referrals": len(referrals),
                "successful_referrals": sum(1 for r in referrals if r.status == ReferralStatus.COMPLETED),
                "pending_referrals": sum(1 for r in referrals if r.status == ReferralStatus.PENDING),
                "total_rewards": sum(r.reward_amount for r in referrals),
            },
        }

    async def create_referral(
        self,
        code: str,
        referred_user_id: str,
        referred_email: str | None,
    ) -> tuple[Referral, UserProfile]:
        """Record that ``referred_user_id`` signed up with ``code``.

        Args:
            code: Referral code, matched case-insensitively.
            referred_user_id: The new user's auth id.
            referred_email: The new user's email.

        Returns:
            tuple: The stored referral and the referrer's profile.

        Raises:
            ValidationError: If no code is given.
            InvalidCodeError: If no user holds the code.
            AlreadyReferredError: If the user already has a referral.
            SelfReferralError: If the code belongs to the user.
        """
        if not code:
            raise ValidationError("Referral code is required")
        code = code.strip().upper()

        referrer_rows = await self.store.query(
            USERS,
            filters=[QueryFilter("referral_code", "==", code)],
            limit=1,
        )
        if not referrer_rows:
            raise InvalidCodeError()
        referrer = UserProfile.model_validate(referrer_rows[0])

        existing = await self.store.query(
            REFERRALS,
            filters=[QueryFilter("referred_user_id", "==", referred_user_id)],
            limit=1,
        )
        if existing:
            raise AlreadyReferredError()

        if referrer.id == referred_user_id:
            raise SelfReferralError()

        now = self.clock()
        row = await self.store.add(
            REFERRALS,
            {
                "referrer_id": referrer.id,
                "referrer_email": referrer.email,
                "referred_user_id": referred_user_id,
                "referred_email": referred_email,
                "referral_code": code,
                "status": ReferralStatus.COMPLETED,
                "reward_amount": self.reward_amount,
                "created_at": now,
                "completed_at": now,
            },
        )

        await update_profile(
            self.store,
            referred_user_id,
            {"used_referral_code": code, "referred_by": referrer.id},
            email=referred_email,
        )

        logger.info("User %s referred by %s", referred_user_id, referrer.id)
        return Referral.model_validate(row), referrer
