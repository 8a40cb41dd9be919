"""Request logging middleware for list endpoints."""

import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of list-page-data requests."""

    def __init__(self, app, path_marker: str = "/list-page-data"):
        super().__init__(app)
        self.path_marker = path_marker

    async def dispatch(self, request: Request, call_next):
        """Time the request and log its outcome."""
        if self.path_marker not in request.url.path:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f}ms",
            extra={
                "path": str(request.url.path),
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 1)
            }
        )
        return response
