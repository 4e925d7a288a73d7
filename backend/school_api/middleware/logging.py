"""
School API Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request.
How:   Measures the time spent downstream and logs method, path, status,
       duration, request ID, culture and client address. The log level
       follows the status class. `/health` is not logged.

Example line:
    2026-01-15T12:00:00 [WARNING] school_api.access: POST /api/students 400 12.3ms [a1b2c3d4] en-US from 10.0.0.7

Request bodies and Authorization headers are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from school_api.localization import current_locale
from school_api.middleware.request_id import request_id_var

logger = logging.getLogger("school_api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request's outcome and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")
        culture = current_locale()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] %s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            culture,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
