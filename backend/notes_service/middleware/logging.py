"""
Notes Service — Request Logging Middleware
==========================================

What:  One access log line per HTTP request with status and duration.
How:   Measures time around call_next, picks the level from the status class
       (5xx ERROR, 4xx WARNING, else INFO) and attaches structured fields via
       `extra` for log processors.
Who:   Applied to every request except /health.

Request bodies are never logged; note content stays out of the logs.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notes_service.middleware.request_id import request_id_var

logger = logging.getLogger("notes_service.access")

# Probed every few seconds by orchestrators; logging them drowns real traffic
SILENT_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration and request id for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SILENT_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
