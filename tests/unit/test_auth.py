"""Unit tests for JWT decoding and authentication utilities."""

import pytest

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.schemas.auth import TokenPayload
from tests.tokens import create_test_token, generate_private_key_pem


class TestDecodeJWT:
    """Tests for decode_jwt function."""

    def test_decode_valid_token(self) -> None:
        """Test decoding a valid token returns the payload."""
        token = create_test_token(sub="user-1", email="wanjiru@example.com", role="admin")

        payload = decode_jwt(token)

        assert isinstance(payload, TokenPayload)
        assert payload.sub == "user-1"
        assert payload.email == "wanjiru@example.com"
        assert payload.role == "authenticated"
        assert payload.app_role == "admin"

    def test_missing_app_role_defaults_to_user(self) -> None:
        """Test tokens without an application role are regular users."""
        payload = decode_jwt(create_test_token(role=None))

        assert payload.app_role == "user"
        assert payload.to_user_context().is_admin is False

    def test_expired_token(self) -> None:
        """Test an expired token raises TOKEN_EXPIRED."""
        token = create_test_token(exp_offset=-60)

        with pytest.raises(AuthError) as exc_info:
            decode_jwt(token)

        assert exc_info.value.code == AuthErrorCode.TOKEN_EXPIRED

    def test_wrong_signing_key(self) -> None:
        """Test a token signed by another key is rejected."""
        token = create_test_token(key=generate_private_key_pem()[0])

        with pytest.raises(AuthError) as exc_info:
            decode_jwt(token)

        assert exc_info.value.code == AuthErrorCode.INVALID_SIGNATURE

    def test_wrong_audience(self) -> None:
        """Test a token for another audience is rejected."""
        token = create_test_token(audience="anon")

        with pytest.raises(AuthError) as exc_info:
            decode_jwt(token)

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN

    def test_malformed_token(self) -> None:
        """Test garbage is an invalid token."""
        with pytest.raises(AuthError) as exc_info:
            decode_jwt("not.a.jwt")

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN


class TestTokenPayload:
    """Tests for TokenPayload conversion."""

    def test_to_user_context(self) -> None:
        """Test the user context takes its role from app_metadata."""
        payload = TokenPayload(
            sub="user-1",
            email="a@example.com",
            role="authenticated",
            app_metadata={"role": "admin"},
            exp=2_000_000_000,
            iat=1_000_000_000,
        )

        context = payload.to_user_context()

        assert context.user_id == "user-1"
        assert context.role == "admin"
        assert context.is_admin is True
