"""Request / response logging middleware using structlog.

Logs each request with method, path, status code and timing.  The
``x-request-id`` header, when present, is bound to the structlog context so
every log line emitted while handling the request carries it.
"""

from __future__ import annotations

import time

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from sayso.utils.logging import get_logger

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP request with timing and response status."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        request_id = request.headers.get("x-request-id", "")

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            logger.info("request_started", method=method, path=path)
            try:
                response = await call_next(request)
            except Exception:
                elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
                logger.error("request_failed", method=method, path=path, elapsed_ms=elapsed_ms)
                raise

            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            log_fn = logger.info if response.status_code < 400 else logger.warning
            log_fn(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                elapsed_ms=elapsed_ms,
            )
        return response
