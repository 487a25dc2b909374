"""
Auth service — register / login orchestration.

Wires the credential store, password hasher and token issuer together.
All three are injected, so the service holds no global state and tests can
swap any of them.

Failure modes:
  • BadRequestError: missing or malformed input
  • ConflictError: email already registered
  • UnauthorizedError: wrong email or password (one message for both)
  • InternalServerError: store, hashing or signing faults
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from auth.jwt import TokenIssuer
from auth.models import DEFAULT_ROLE, AuthResult, Role
from auth.password import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from database.models import User
from database.store import DUPLICATE_EMAIL_MESSAGE, UserStore
from utils.errors import (
    BadRequestError,
    ConflictError,
    InternalServerError,
    InvalidTokenError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

BAD_CREDENTIALS_MESSAGE = "Incorrect email or password"
NOT_AUTHORIZED_MESSAGE = "Not authorized to access this route"
USER_GONE_MESSAGE = "User no longer exists"

_VALID_ROLES = {r.value for r in Role}


def _missing_fields(email: Optional[str], password: Optional[str]) -> List[str]:
    missing = []
    if not email or not email.strip():
        missing.append("email")
    if not password:
        missing.append("password")
    return missing


def _missing_credentials(missing: List[str]) -> BadRequestError:
    return BadRequestError(
        f"Please provide {' and '.join(missing)}", details={"missingFields": missing}
    )


class AuthService:
    def __init__(self, store: UserStore, hasher: PasswordHasher, tokens: TokenIssuer):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    async def _hash(self, password: str) -> str:
        try:
            return await asyncio.to_thread(self.hasher.hash, password)
        except (ValueError, TypeError) as exc:
            raise InternalServerError(
                "An internal server error occurred",
                details={"reason": "password hashing failed", "error": exc.__class__.__name__},
            ) from exc

    async def register(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Optional[str] = None,
    ) -> AuthResult:
        missing = _missing_fields(email, password)
        if missing:
            raise _missing_credentials(missing)

        if password_too_long(password):
            raise BadRequestError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                details={"field": "password"},
            )

        role = role or DEFAULT_ROLE
        if role not in _VALID_ROLES:
            raise BadRequestError(
                f"Invalid role '{role}'. Allowed: {', '.join(sorted(_VALID_ROLES))}",
                details={"field": "role"},
            )

        # Fail before writing anything if tokens cannot be signed.
        self.tokens.ensure_configured()

        if await self.store.find_by_email(email) is not None:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        password_hash = await self._hash(password)
        # A concurrent registration may win the race between the lookup and
        # this insert; the store's unique constraint turns that into Conflict.
        user = await self.store.create_user(
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
            email=email,
            password_hash=password_hash,
            role=role,
        )

        token = self.tokens.issue(str(user.user_id))
        logger.info("Registered user %s (role=%s)", user.user_id, user.role)
        return AuthResult(token=token, user=user)

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        missing = _missing_fields(email, password)
        if missing:
            raise _missing_credentials(missing)

        user = await self.store.find_by_email(email, include_password=True)
        if user is None:
            # Same bcrypt cost as a wrong password for a known account.
            await asyncio.to_thread(self.hasher.burn, password)
            logger.info("Login failed: unknown account")
            raise UnauthorizedError(BAD_CREDENTIALS_MESSAGE, details={"reason": "user not found"})

        matched = await asyncio.to_thread(self.hasher.verify, password, user.password_hash)
        if not matched:
            logger.info("Login failed for user %s: password mismatch", user.user_id)
            raise UnauthorizedError(BAD_CREDENTIALS_MESSAGE, details={"reason": "password mismatch"})

        token = self.tokens.issue(str(user.user_id))
        logger.info("Login succeeded for user %s", user.user_id)
        return AuthResult(token=token, user=user)

    async def current_user(self, token: Optional[str]) -> User:
        """
        Resolve a bearer token to a live user record.

        Raises ``UnauthorizedError`` when the token is absent, invalid or
        expired, or when its user has since been removed.
        """
        if not token:
            raise UnauthorizedError(NOT_AUTHORIZED_MESSAGE)

        try:
            user_id = self.tokens.verify(token)
        except InvalidTokenError as exc:
            logger.debug("Rejected token: %s", exc.reason)
            raise

        user = await self.store.get_by_id(user_id)
        if user is None:
            logger.info("Token for missing user %s rejected", user_id)
            raise UnauthorizedError(USER_GONE_MESSAGE)
        return user
