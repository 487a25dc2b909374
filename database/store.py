"""
Credential store — persistence of user records, addressed by email.

Every call opens its own short-lived session from the injected factory and
is bounded by ``timeout`` seconds, so a database outage surfaces as
``StoreUnavailableError`` instead of a hung request.

Email uniqueness is enforced by the ``users.email`` UNIQUE constraint; a
violation on insert is reported as ``ConflictError``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import defer

from database.models import Base, User
from utils.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class UserStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout: float = 5.0,
    ):
        self._session_factory = session_factory
        self._timeout = timeout

    async def _bounded(self, operation: str, coro: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Credential store %s timed out after %.1fs", operation, self._timeout)
            raise StoreUnavailableError(operation, "timeout") from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Credential store %s failed: %s", operation, exc.__class__.__name__)
            raise StoreUnavailableError(operation, str(exc)) from exc

    # ── Schema ───────────────────────────────────────────────────────────

    @staticmethod
    async def create_schema(engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # ── Writes ───────────────────────────────────────────────────────────

    async def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        role: str = "user",
    ) -> User:
        """Insert a new user; ``ConflictError`` if the email is taken."""

        async def _insert() -> User:
            async with self._session_factory() as session:
                user = User(
                    user_id=uuid.uuid4(),
                    first_name=first_name,
                    last_name=last_name,
                    email=normalize_email(email),
                    password_hash=password_hash,
                    role=role,
                )
                session.add(user)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
                return user

        return await self._bounded("create_user", _insert())

    # ── Reads ────────────────────────────────────────────────────────────

    async def find_by_email(self, email: str, *, include_password: bool = False) -> Optional[User]:
        """
        Look a user up by email.

        The password hash is not loaded unless ``include_password`` is set;
        touching it on a record loaded without it raises.
        """

        async def _select() -> Optional[User]:
            stmt = select(User).where(User.email == normalize_email(email))
            if not include_password:
                stmt = stmt.options(defer(User.password_hash, raiseload=True))
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

        return await self._bounded("find_by_email", _select())

    async def get_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        uid = _to_uuid(user_id)
        if uid is None:
            return None

        async def _select() -> Optional[User]:
            stmt = (
                select(User)
                .where(User.user_id == uid)
                .options(defer(User.password_hash, raiseload=True))
            )
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

        return await self._bounded("get_by_id", _select())
