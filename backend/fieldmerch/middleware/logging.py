"""
FieldMerch Backend: Request Logging Middleware
================================================

What:  One access-log line per HTTP request on the "fieldmerch.access" logger.
When:  After RequestIDMiddleware and IdentityMiddleware, so both IDs are set.

Log line example:
    PUT /podravka-facing/batch 200 12.4ms [a1b2c3d4] user=7 from 10.0.0.5

Request bodies are never logged: facing submissions identify employees
and their store routes.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from fieldmerch.middleware.identity import caller_id_var
from fieldmerch.middleware.request_id import request_id_var

logger = logging.getLogger("fieldmerch.access")

# Load balancer health checks would drown out real traffic
UNLOGGED_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Times each request and logs it at a level chosen by status class."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        fields = {
            "request_id": request_id_var.get(""),
            "caller_id": caller_id_var.get("-"),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            _level_for(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] "
            "user=%(caller_id)s from %(client_ip)s",
            fields,
            extra=fields,
        )

        return response
