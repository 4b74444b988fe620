"""
FieldMerch Backend: Rate Limiting Middleware
==============================================

What:  In-memory sliding-window rate limiter.
Why:   A misbehaving mobile client retrying a batch submission in a loop
       would otherwise create a new batch on every attempt.
How:   Keys each request by caller id (from the identity headers) or, for
       anonymous requests, by client IP. Rejects with 429 once a key has
       made rate_limit_requests calls within rate_limit_window seconds.

Scope:
    Safe for a single uvicorn process. Multiple workers each keep their
    own window, so the effective limit scales with the worker count.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from fieldmerch.config import settings
from fieldmerch.exceptions import RateLimitExceededError
from fieldmerch.middleware.identity import parse_identity

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limiter keyed by caller (or IP).

    Excluded paths: /health and the API documentation.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        # key → timestamps of requests inside the current window
        self._requests: Dict[str, List[float]] = defaultdict(list)

    @staticmethod
    def _client_key(request: Request) -> str:
        caller = parse_identity(
            request.headers.get(settings.identity_user_header),
            request.headers.get(settings.identity_role_header),
        )
        if caller is not None:
            return f"user:{caller.user_id}"
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        return f"ip:{client_ip}"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        key = self._client_key(request)
        now = time.time()
        window_start = now - settings.rate_limit_window

        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        if len(self._requests[key]) >= settings.rate_limit_requests:
            oldest = self._requests[key][0]
            exc = RateLimitExceededError(
                retry_after=int(oldest + settings.rate_limit_window - now) + 1,
                context={"key": key},
            )
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds window",
                key,
                len(self._requests[key]),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": {"retry_after": exc.retry_after},
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        self._requests[key].append(now)

        # Periodic cleanup of inactive keys, roughly every 1000 requests
        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive_keys(window_start)

        return await call_next(request)

    def _cleanup_inactive_keys(self, window_start: float) -> None:
        """Drops keys with no requests inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate-limit keys", len(inactive))
