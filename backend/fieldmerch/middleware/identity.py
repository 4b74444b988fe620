"""
FieldMerch Backend: Caller Identity Middleware
================================================

What:  Reads the caller identity injected by the authentication gateway.
Why:   Credential issuance and verification live in the auth service. By the
       time a request reaches this backend, the gateway has replaced the
       bearer token with trusted headers naming the user and role.
How:   Parses the configured headers into a CallerIdentity and stores it on
       request.state.caller (None when absent or malformed) and in a
       ContextVar for log correlation.
When:  After RequestIDMiddleware, before request logging.

Header contract (names configurable in settings):
    X-User-Id:   positive integer user id
    X-User-Role: role name, e.g. "admin" or "employee"
"""

import logging
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from fieldmerch.config import settings
from fieldmerch.schemas.identity import CallerIdentity

logger = logging.getLogger(__name__)

caller_id_var: ContextVar[str] = ContextVar("caller_id", default="-")


def parse_identity(user_header: Optional[str], role_header: Optional[str]) -> Optional[CallerIdentity]:
    """
    Builds a CallerIdentity from raw header values.

    Returns None unless the user id is a positive integer and a role is present.
    """
    if not user_header or not role_header:
        return None
    user_header = user_header.strip()
    if not user_header.isdigit() or int(user_header) <= 0:
        logger.warning("Ignoring malformed identity header value: %r", user_header)
        return None
    return CallerIdentity(user_id=int(user_header), role=role_header.strip().lower())


class IdentityMiddleware(BaseHTTPMiddleware):
    """Attaches the gateway-supplied caller identity to each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        caller = parse_identity(
            request.headers.get(settings.identity_user_header),
            request.headers.get(settings.identity_role_header),
        )
        request.state.caller = caller
        caller_id_var.set(str(caller.user_id) if caller else "-")

        return await call_next(request)
