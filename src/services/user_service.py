"""User profile business logic service."""

import logging
from typing import Any

from src.api.middleware.error_handler import APIError, NotFoundError, ValidationError
from src.core.auth_provider import ADMIN_ROLE, DEFAULT_ROLE, AuthProvider, AuthUser, get_auth_provider
from src.core.document_store import DocumentStore, StoreError, get_document_store
from src.models.user import UserProfile
from src.services.invite_service import USERS, update_profile, utcnow
from src.services.referral_service import ReferralService

logger = logging.getLogger(__name__)

BUSINESSES = "businesses"

ROLES = (DEFAULT_ROLE, ADMIN_ROLE)


class UserService:
    """Service for user profiles, roles and favorites."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        auth: AuthProvider | None = None,
        referrals: ReferralService | None = None,
    ) -> None:
        """Initialize user service.

        Args:
            store: Optional document store override.
            auth: Optional auth provider override.
            referrals: Optional referral service override.
        """
        self.store = store or get_document_store()
        self.auth = auth or get_auth_provider()
        self.referrals = referrals or ReferralService(store=self.store)

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Get a user's profile, or None if it has not been created."""
        row = await self.store.get(USERS, user_id)
        return UserProfile.model_validate(row) if row else None

    async def create_profile(
        self,
        user_id: str,
        email: str | None,
        referral_code: str | None = None,
    ) -> dict[str, Any]:
        """Create the caller's profile on first login.

        The very first profile in the system gets the admin role, both on
        the profile and as an auth role claim. A referral code, when given,
        is applied on a best-effort basis: failures are logged and do not
        prevent the profile from being created.

        Args:
            user_id: Auth id of the caller.
            email: Caller's email address.
            referral_code: Optional code of the user who referred them.

        Returns:
            dict: ``created`` flag, ``role``, ``referral_applied`` flag and the
            ``profile``.
        """
        existing = await self.get_profile(user_id)
        if existing is not None:
            return {
                "created": False,
                "role": existing.role,
                "referral_applied": False,
                "profile": existing,
            }

        is_first_user = await self.store.count(USERS) == 0
        role = ADMIN_ROLE if is_first_user else DEFAULT_ROLE

        row = await self.store.set(
            USERS,
            user_id,
            {"email": email, "role": role, "favorites": [], "created_at": utcnow()},
        )
        profile = UserProfile.model_validate(row)

        if is_first_user:
            await self.auth.set_role(user_id, ADMIN_ROLE)
            logger.info("First user %s created with admin role", email)

        referral_applied = False
        if referral_code and not is_first_user:
            try:
                await self.referrals.create_referral(referral_code, user_id, email)
                referral_applied = True
            except (APIError, StoreError) as e:
                logger.warning("Referral code %s not applied for %s: %s", referral_code, user_id, e)

            if referral_applied:
                profile = await self.get_profile(user_id) or profile

        return {
            "created": True,
            "role": role,
            "referral_applied": referral_applied,
            "profile": profile,
        }

    async def list_users(self) -> list[AuthUser]:
        """List every user the auth provider knows about."""
        return await self.auth.list_users()

    async def set_role(self, user_id: str, role: str) -> None:
        """Set a user's role claim and mirror it onto the profile.

        Raises:
            ValidationError: If the user id is missing or the role is unknown.
        """
        if not user_id or not role:
            raise ValidationError("Bad Request: Missing uid or role")
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")

        await self.auth.set_role(user_id, role)
        await self.store.update(USERS, user_id, {"role": role})

    async def get_favorites(self, user_id: str) -> list[str]:
        """Get the ids of the user's favorite businesses."""
        profile = await self.get_profile(user_id)
        return profile.favorites if profile else []

    async def toggle_favorite(self, user_id: str, business_id: str, email: str | None = None) -> bool:
        """Add or remove a business from the user's favorites.

        Returns:
            bool: Whether the business is a favorite after the toggle.

        Raises:
            NotFoundError: If adding a business that does not exist.
        """
        favorites = await self.get_favorites(user_id)

        if business_id in favorites:
            favorites = [f for f in favorites if f != business_id]
            is_favorite = False
        else:
            if await self.store.get(BUSINESSES, business_id) is None:
                raise NotFoundError("Business not found")
            favorites = [*favorites, business_id]
            is_favorite = True

        await update_profile(self.store, user_id, {"favorites": favorites}, email=email)
        return is_favorite
