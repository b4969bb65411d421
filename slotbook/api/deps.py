"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from slotbook.core.exceptions import AuthenticationError, AuthorizationError
from slotbook.core.permissions import UserRole
from slotbook.core.security import verify_token
from slotbook.database import get_db

__all__ = [
    "CurrentUser",
    "RoleChecker",
    "get_current_user",
    "get_db",
    "require_admin",
    "require_user",
    "require_any_role",
]

# Security scheme
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Identity of the caller as asserted by the access token."""

    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """Get the current caller from the bearer token."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise AuthenticationError("Invalid token payload")

    try:
        user = CurrentUser(id=UUID(str(user_id)), role=UserRole(role))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    request.state.user_id = user.id
    return user


class RoleChecker:
    """Allow only callers holding one of ``roles``."""

    def __init__(self, *roles: UserRole):
        self.roles = set(roles)

    async def __call__(
        self,
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role not in self.roles:
            raise AuthorizationError(
                f"{' or '.join(sorted(r.value for r in self.roles))} role required"
            )
        return current_user


# Convenience instances
require_user = RoleChecker(UserRole.USER)
require_admin = RoleChecker(UserRole.ADMIN)
require_any_role = RoleChecker(UserRole.USER, UserRole.ADMIN)
