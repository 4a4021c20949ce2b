"""Tests for API middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from category_api.api.categories import get_service
from category_api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get(
            "/health",
            headers={"X-Request-ID": custom_id},
        )
        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == custom_id


class TestErrorHandlerMiddleware:
    """Tests for unhandled error reporting."""

    def test_unhandled_error_returns_internal_error(self, client: TestClient) -> None:
        """Unexpected exceptions become a 500 with the standard error body."""
        broken = MagicMock()
        broken.get_category_page = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_service] = lambda: broken
        try:
            response = client.get("/v1/shoes", headers={"X-Request-ID": "req-500"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert data["request_id"] == "req-500"
