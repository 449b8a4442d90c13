"""Supabase auth admin wrapper for user records and role claims."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from supabase import Client
from supabase_auth.errors import AuthApiError

from src.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "user"
ADMIN_ROLE = "admin"


class AuthProviderError(Exception):
    """Raised when the auth provider rejects or fails a request."""


@dataclass
class AuthUser:
    """User record as seen by the auth provider."""

    uid: str
    email: str | None
    display_name: str | None
    role: str
    disabled: bool
    created_at: datetime | None
    last_sign_in_at: datetime | None


def _to_auth_user(user: Any) -> AuthUser:
    app_metadata = getattr(user, "app_metadata", None) or {}
    user_metadata = getattr(user, "user_metadata", None) or {}
    display_name = (
        user_metadata.get("display_name")
        or user_metadata.get("full_name")
        or user_metadata.get("name")
    )
    return AuthUser(
        uid=str(user.id),
        email=getattr(user, "email", None),
        display_name=display_name,
        role=app_metadata.get("role") or DEFAULT_ROLE,
        disabled=bool(getattr(user, "banned_until", None)),
        created_at=getattr(user, "created_at", None),
        last_sign_in_at=getattr(user, "last_sign_in_at", None),
    )


class AuthProvider:
    """Reads and updates users through the Supabase auth admin API.

    Roles live in ``app_metadata.role`` so they are carried as a claim in
    every access token the provider issues.
    """

    def __init__(self, client: Client | None = None) -> None:
        self.client = client or get_supabase_client()

    async def get_user(self, uid: str) -> AuthUser | None:
        """Get a user by id, or None if the provider does not know it."""
        try:
            response = self.client.auth.admin.get_user_by_id(str(uid))
        except AuthApiError as e:
            if getattr(e, "status", None) == 404:
                return None
            raise AuthProviderError(f"Failed to load user {uid}: {e}") from e

        if response is None or response.user is None:
            return None
        return _to_auth_user(response.user)

    async def set_role(self, uid: str, role: str) -> None:
        """Set the role claim on a user."""
        try:
            self.client.auth.admin.update_user_by_id(
                str(uid),
                {"app_metadata": {"role": role}},
            )
        except AuthApiError as e:
            raise AuthProviderError(f"Failed to set role for user {uid}: {e}") from e

        logger.info("Set role %s for user %s", role, uid)

    async def list_users(self) -> list[AuthUser]:
        """List all users known to the auth provider."""
        try:
            users = self.client.auth.admin.list_users()
        except AuthApiError as e:
            raise AuthProviderError(f"Failed to list users: {e}") from e

        return [_to_auth_user(user) for user in users]


_auth_provider: AuthProvider | None = None


def get_auth_provider() -> AuthProvider:
    """Get or create the global auth provider instance."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = AuthProvider()
    return _auth_provider
