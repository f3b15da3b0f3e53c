"""API middleware for request processing."""

import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from vulcan.logging_config import get_logger, request_context

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses.

    The request id is bound for the whole request, so service events logged
    while handling it carry the same ``request_id`` as the access lines.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())[:8]
        request.state.request_id = request_id

        with request_context(request_id, method=request.method, path=request.url.path):
            start_time = time.time()
            logger.info("Request started", query=str(request.query_params))

            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware for adding security headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'"

        return response


def validate_pagination(offset: int, limit: int, max_limit: int = 1000) -> tuple[int, int]:
    """Clamp pagination parameters to sane bounds."""
    validated_offset = max(0, offset)
    validated_limit = min(max(1, limit), max_limit)
    return validated_offset, validated_limit
