"""
FieldMerch Backend: Route Dependencies
========================================

What:  FastAPI dependencies that turn request state into service arguments.
How:   get_caller reads the identity IdentityMiddleware attached to the
       request; authorize_role(roles) wraps it with a role check.

Usage:
    @router.get("/podravka-facing")
    async def list_facings(caller: CallerIdentity = Depends(authorize_role(["admin", "employee"]))):
        ...
"""

from typing import Callable, List, Optional

from fastapi import Depends, Request

from fieldmerch.exceptions import AuthenticationError, PermissionDeniedError
from fieldmerch.schemas.identity import CallerIdentity


def get_caller(request: Request) -> Optional[CallerIdentity]:
    """The caller identity for this request, or None when unauthenticated."""
    return getattr(request.state, "caller", None)


def authorize_role(roles: List[str]) -> Callable[..., CallerIdentity]:
    """
    Dependency factory restricting a route to the given roles.

    Raises:
        AuthenticationError: No caller identity (→ 401)
        PermissionDeniedError: Caller's role is not in `roles` (→ 403)
    """
    allowed = {role.lower() for role in roles}

    def role_checker(caller: Optional[CallerIdentity] = Depends(get_caller)) -> CallerIdentity:
        if caller is None:
            raise AuthenticationError()
        if caller.role not in allowed:
            raise PermissionDeniedError(
                message=f"Access denied. Required role: {', '.join(sorted(allowed))}",
                context={"role": caller.role},
            )
        return caller

    return role_checker
