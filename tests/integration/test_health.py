"""Integration tests for health check endpoints."""

from collections.abc import Callable
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_healthy_status(self, client: TestClient) -> None:
        """Test that /health endpoint returns 200 with healthy status."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["timestamp"] is not None


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    def test_readiness_returns_200_when_healthy(self, client: TestClient) -> None:
        """Test that /health/ready returns 200 when the database is reachable."""
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        db_check = next(c for c in data["checks"] if c["name"] == "database")
        assert db_check["healthy"] is True
        assert db_check["latency_ms"] is not None

    def test_readiness_reports_cache_and_latency_stats(self, client: TestClient) -> None:
        """Test that readiness includes cache and request latency statistics."""
        client.get("/api/v1/deals")
        response = client.get("/health/ready")
        data = response.json()

        assert data["cache"]["default_ttl_seconds"] == 300
        assert "total_entries" in data["cache"]
        assert data["latency"]["total_requests"] >= 1

    def test_readiness_returns_503_when_database_unhealthy(self, client: TestClient) -> None:
        """Test that /health/ready returns 503 and the error when the database is down."""
        with patch(
            "src.api.routes.health.check_database_connection",
            new=AsyncMock(return_value={"healthy": False, "error": "Connection timeout"}),
        ):
            response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        db_check = next(c for c in data["checks"] if c["name"] == "database")
        assert db_check["error"] == "Connection timeout"


class TestAuthenticatedHealth:
    """Tests for /health/auth endpoint."""

    def test_returns_claims(self, client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
        """Test that a valid token is echoed back with its role claim."""
        response = client.get("/health/auth", headers=auth_headers("u1", "u1@example.com", role="admin"))

        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is True
        assert data["user_id"] == "u1"
        assert data["role"] == "admin"

    def test_requires_token(self, client: TestClient) -> None:
        """Test that missing tokens are rejected with the standard error body."""
        response = client.get("/health/auth")

        assert response.status_code == 401
        data = response.json()
        assert data["code"] == "unauthorized"
        assert "timestamp" in data

    def test_rejects_expired_token(self, client: TestClient, make_token: Callable[..., str]) -> None:
        """Test that an expired token is rejected."""
        token = make_token(exp_offset=-60)

        response = client.get("/health/auth", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "Token has expired"
