"""Tests for middleware functions and request logging context."""

import pytest
import structlog
from httpx import AsyncClient

from vulcan.api.middleware import validate_pagination
from vulcan.logging_config import APP_NAME, app_context_processor, request_context


class TestValidatePagination:
    """Tests for pagination validation."""

    def test_valid_values_unchanged(self):
        assert validate_pagination(10, 50) == (10, 50)

    def test_negative_offset_clamped(self):
        assert validate_pagination(-5, 50) == (0, 50)

    def test_limit_bounds(self):
        assert validate_pagination(0, 0) == (0, 1)
        assert validate_pagination(0, 5000) == (0, 1000)
        assert validate_pagination(0, 500, max_limit=100) == (0, 100)


class TestLoggingContext:
    """Tests for the processors and context bound around each request."""

    def test_app_context_added(self):
        processor = app_context_processor("staging")

        event = processor(None, "info", {"event": "Guide imported"})

        assert event == {"event": "Guide imported", "app": APP_NAME, "environment": "staging"}

    def test_app_context_keeps_explicit_values(self):
        processor = app_context_processor("staging")

        event = processor(None, "info", {"event": "x", "environment": "production"})

        assert event["environment"] == "production"

    def test_request_context_bound_only_inside_block(self):
        with request_context("abc12345", path="/api/v1/guides"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["request_id"] == "abc12345"
            assert bound["path"] == "/api/v1/guides"

        assert "request_id" not in structlog.contextvars.get_contextvars()


@pytest.mark.asyncio
class TestRequestLoggingMiddleware:
    """Tests for the request id header."""

    async def test_request_id_generated(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert len(response.headers["X-Request-ID"]) == 8
        assert response.headers["X-Response-Time"].endswith("ms")

    async def test_incoming_request_id_reused(self, client: AsyncClient):
        response = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
