"""
FastAPI dependencies for authentication.

Provides ``get_auth_service``, ``get_current_user`` (route protection) and
``restrict_to`` (role gate) used across all protected routes.
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Header, Request

from auth.policy import allowed
from auth.service import AuthService
from database.models import User
from utils.errors import ForbiddenError, InternalServerError

BEARER_PREFIX = "Bearer "
FORBIDDEN_MESSAGE = "You do not have permission to perform this action"


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise InternalServerError(
            "An internal server error occurred",
            details={"reason": "auth service not initialised"},
        )
    return service


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>``, or None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Extract and verify the Bearer token, returning the authenticated user.

    The user is also attached to ``request.state.user`` for handlers that
    do not take it as a parameter.
    """
    user = await service.current_user(extract_bearer_token(authorization))
    request.state.user = user
    return user


def restrict_to(*roles: str) -> Callable:
    """Dependency factory: allow only users whose role is in ``roles``."""

    async def _role_gate(user: User = Depends(get_current_user)) -> User:
        if not allowed(user.role, roles):
            raise ForbiddenError(FORBIDDEN_MESSAGE, details={"role": user.role})
        return user

    return _role_gate
