"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeAuthProvider, FakeDocumentStore, FakeEmailService, FakeObjectStorage
from tests.tokens import SIGNING_KEY_JWK, create_test_token

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ["SUPABASE_SIGNING_KEY_JWK"] = SIGNING_KEY_JWK
os.environ["RESEND_API_KEY"] = ""
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")


@pytest.fixture(scope="session", autouse=True)
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    get_settings.cache_clear()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for signed access tokens."""
    return create_test_token


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Factory for Authorization headers.

    Call as ``auth_headers("user-1", "a@example.com", role="admin")``.
    """

    def _headers(sub: str = "user-1", email: str | None = "user1@example.com", role: str = "user") -> dict[str, str]:
        return {"Authorization": f"Bearer {create_test_token(sub=sub, email=email, role=role)}"}

    return _headers


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    """Provide an empty in-memory document store."""
    return FakeDocumentStore()


@pytest.fixture
def fake_auth() -> FakeAuthProvider:
    """Provide an empty in-memory auth provider."""
    return FakeAuthProvider()


@pytest.fixture
def fake_storage() -> FakeObjectStorage:
    """Provide in-memory object storage."""
    return FakeObjectStorage()


@pytest.fixture
def fake_email() -> FakeEmailService:
    """Provide an email sender that records messages."""
    return FakeEmailService()


@pytest.fixture
def client(
    fake_store: FakeDocumentStore,
    fake_auth: FakeAuthProvider,
    fake_storage: FakeObjectStorage,
) -> Generator[TestClient, None, None]:
    """Provide a test client wired to the in-memory backends.

    Services resolve their store, auth provider and storage through the
    module-level singletons, so replacing those is enough.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with (
        patch("src.core.document_store._document_store", fake_store),
        patch("src.core.auth_provider._auth_provider", fake_auth),
        patch("src.core.storage._object_storage", fake_storage),
        patch(
            "src.api.routes.health.check_database_connection",
            new=AsyncMock(return_value={"healthy": True}),
        ),
        TestClient(app) as test_client,
    ):
        yield test_client
