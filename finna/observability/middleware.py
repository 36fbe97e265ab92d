"""
Request tracing middleware.

CorrelationMiddleware binds the caller's X-Correlation-ID (or a fresh one)
for the duration of a request and echoes it back. RequestLoggingMiddleware
writes one line when a request arrives and one when it completes.

Dependencies: fastapi, starlette, finna.observability.correlation
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from finna.observability.correlation import (
    CORRELATION_HEADER,
    clear_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

# Probed by load balancers every few seconds
QUIET_PATH_SUFFIXES = ("/health", "/health/ready")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of each request."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        path = request.url.path
        level = logging.DEBUG if path.endswith(QUIET_PATH_SUFFIXES) else logging.INFO

        logger.log(
            level,
            f"--> {method} {path}",
            extra={"method": method, "path": path, "client_host": request.client.host if request.client else None},
        )

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"<-- {method} {path} failed",
                extra={"method": method, "path": path, "duration_ms": _elapsed_ms(started), "error_type": type(e).__name__},
            )
            raise

        logger.log(
            level,
            f"<-- {method} {path} {response.status_code}",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": _elapsed_ms(started),
            },
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Binds a correlation id to each request and returns it in the response headers."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
