"""
FieldMerch Backend: Request ID Middleware
===========================================

What:  Assigns a correlation ID to each request and echoes it in the response.
Why:   Every log line of a batch submission, from validation to insert,
       shares the same ID; the mobile client reports it with errors.
How:   Uses the client's X-Request-ID if sent, otherwise a short UUID.
When:  Runs before identity resolution and request logging.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Use the X-Request-ID header when the client sent one
        2. Otherwise generate an 8-character UUID prefix
        3. Store in ContextVar (loggers, exception handlers) and request.state
        4. Add to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid

        return response
