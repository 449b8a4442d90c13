"""Verification of Supabase access tokens.

Access tokens are ES256 JWTs signed with the project's asymmetric signing
key. The public half is configured as a JWK, so tokens are verified
locally without calling the auth server.
"""

import json
from enum import Enum
from functools import lru_cache
from typing import Any

import jwt
from jwt import PyJWK

from src.core.config import get_settings
from src.schemas.auth import TokenPayload

ALGORITHM = "ES256"
REQUIRED_CLAIMS = ["exp", "iat", "sub"]


class AuthErrorCode(str, Enum):
    """Why a token was refused."""

    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """A token failed verification."""

    def __init__(self, message: str, code: AuthErrorCode) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# Checked in order; subclasses before the classes they derive from.
_JWT_ERRORS: list[tuple[type[jwt.PyJWTError], str, AuthErrorCode]] = [
    (jwt.ExpiredSignatureError, "Token has expired", AuthErrorCode.TOKEN_EXPIRED),
    (jwt.InvalidSignatureError, "Invalid token signature", AuthErrorCode.INVALID_SIGNATURE),
    (jwt.InvalidAudienceError, "Token not issued for this application", AuthErrorCode.INVALID_TOKEN),
    (jwt.InvalidIssuerError, "Token issued by an unknown project", AuthErrorCode.INVALID_TOKEN),
    (jwt.MissingRequiredClaimError, "Token missing required claim", AuthErrorCode.INVALID_TOKEN),
    (jwt.DecodeError, "Invalid token format", AuthErrorCode.INVALID_TOKEN),
]


def expected_issuer() -> str:
    """Issuer claim Supabase puts on this project's tokens."""
    return f"{get_settings().supabase_url.rstrip('/')}/auth/v1"


@lru_cache
def get_signing_key() -> Any:
    """Public verification key parsed from ``SUPABASE_SIGNING_KEY_JWK``.

    Raises:
        AuthError: If the JWK is missing or not valid JSON.
    """
    jwk_json = get_settings().supabase_signing_key_jwk
    if not jwk_json:
        raise AuthError("Signing key not configured", AuthErrorCode.INVALID_TOKEN)

    try:
        jwk_data = json.loads(jwk_json)
    except json.JSONDecodeError as e:
        raise AuthError(f"Invalid signing key JWK format: {e}", AuthErrorCode.INVALID_TOKEN) from e

    return PyJWK.from_dict(jwk_data, algorithm=ALGORITHM).key


def decode_jwt(token: str) -> TokenPayload:
    """Verify an access token and return its claims.

    Checks the signature, expiry, audience and issuer. The application
    role is read later from ``app_metadata``; the top-level ``role`` claim
    is the database role and is kept only for reference.

    Args:
        token: Encoded JWT from the Authorization header.

    Returns:
        TokenPayload: The verified claims.

    Raises:
        AuthError: If the token is expired, tampered with, or malformed.
    """
    settings = get_settings()
    public_key = get_signing_key()

    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            public_key,
            algorithms=[ALGORITHM],
            audience=settings.supabase_jwt_audience,
            issuer=expected_issuer(),
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.PyJWTError as e:
        for error_class, message, code in _JWT_ERRORS:
            if isinstance(e, error_class):
                raise AuthError(message, code) from e
        raise AuthError(f"Token validation failed: {e}", AuthErrorCode.INVALID_TOKEN) from e

    claims["app_metadata"] = claims.get("app_metadata") or {}
    return TokenPayload.model_validate(claims)
