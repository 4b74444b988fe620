"""
FieldMerch Backend: Custom Exception Hierarchy
================================================

What:  Typed failures raised by the identity guard and the facings services.
How:   Every error carries a client-safe `message` and a `context` dict for
       the server log. main.py maps each class to its HTTP status.

    FieldMerchError
    ├── AuthenticationError      401  no caller identity on the request
    ├── PermissionDeniedError    403  impersonation, foreign store, wrong role
    ├── ValidationError          400  empty batch, missing or malformed field
    ├── NotFoundError            404  unknown store, batch with no rows
    ├── DatabaseError            500  storage failure (message kept generic)
    └── RateLimitExceededError   429  caller over the request window

Every failure is terminal for the request: nothing in this package retries.
"""

from typing import Any, Dict, Optional


class FieldMerchError(Exception):
    """
    Base class for FieldMerch errors.

    Attributes:
        message:  Returned to the client (except for 500s)
        context:  Logged server-side only
    """

    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.context = dict(context or {})
        super().__init__(self.message)


class AuthenticationError(FieldMerchError):
    """The gateway did not supply a usable caller identity."""

    default_message = "Authentication is required"


class PermissionDeniedError(FieldMerchError):
    """
    The caller is known but may not do this.

    Raised when an entry names another user, when a non-admin submits for
    a store they do not own, or when the caller's role is not allowed.
    """

    default_message = "You are not allowed to perform this action"


class ValidationError(FieldMerchError):
    """
    A batch payload is empty or an entry is incomplete.

    Services validate raw bodies themselves so that a bad batch answers
    400 rather than FastAPI's 422. The offending field and entry index
    go into `context` and are returned as `details`:

        {
            "error": "validation_error",
            "message": "Each facing must have all fields filled!",
            "details": {"field": "category", "index": 2}
        }
    """

    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.field = field
        if field:
            self.context["field"] = field


class NotFoundError(FieldMerchError):
    """A referenced store, or every row of a batch, does not exist."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if resource_id:
            message = f"{resource.capitalize()} '{resource_id}' not found"
        else:
            message = f"{resource.capitalize()} not found"
        super().__init__(message=message, context=context)
        self.context["resource"] = resource
        if resource_id:
            self.context["resource_id"] = resource_id


class DatabaseError(FieldMerchError):
    """
    A query or write failed underneath a service.

    The client always sees a generic message; driver text and the failing
    batch id stay in `context` and the log.
    """

    default_message = "A database error occurred. Please try again later."


class RateLimitExceededError(FieldMerchError):
    """The caller (or anonymous IP) used up its request window. Sent with Retry-After."""

    def __init__(self, retry_after: int = 60, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Too many requests. Try again in {retry_after} seconds.",
            context=context,
        )
        self.retry_after = retry_after
        self.context["retry_after"] = retry_after
