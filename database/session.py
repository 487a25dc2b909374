"""
Async SQLAlchemy engine and session factory construction.

Nothing here is module-global: the application factory builds one engine
per process and hands the session factory to the credential store.
"""

from __future__ import annotations

from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def build_engine(database_url: str, *, connect_timeout: float = 5.0) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=False,
            connect_args={"timeout": connect_timeout},
        )
    return create_async_engine(
        database_url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,
        pool_timeout=connect_timeout,
        connect_args={"timeout": connect_timeout},
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def build_database(
    database_url: str, *, connect_timeout: float = 5.0
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = build_engine(database_url, connect_timeout=connect_timeout)
    return engine, build_session_factory(engine)
