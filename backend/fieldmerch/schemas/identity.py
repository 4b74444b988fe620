"""
FieldMerch Backend: Caller Identity Schema
============================================

What:  The authenticated caller, as injected by the upstream auth gateway.
Who:   Built by IdentityMiddleware; passed explicitly into every service call.
"""

from pydantic import BaseModel, Field

from fieldmerch.config import settings


class CallerIdentity(BaseModel):
    """Who is making the request and with which role."""

    user_id: int = Field(description="Authenticated user's id")
    role: str = Field(description="Role granted by the auth service, e.g. 'admin' or 'employee'")

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == settings.admin_role.lower()
