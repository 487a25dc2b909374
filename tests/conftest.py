"""
Shared fixtures: an isolated SQLite credential store per test and fast
bcrypt settings.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from auth.jwt import TokenIssuer
from auth.password import PasswordHasher
from auth.service import AuthService
from config.settings import Settings
from database.session import build_database
from database.store import UserStore
from main import create_app

TEST_SECRET = "test-signing-secret"


def _make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "jwt_secret": TEST_SECRET,
        "bcrypt_rounds": 4,
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        "session_file": str(tmp_path / "session.json"),
        "environment": "production",
        "debug": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def make_settings(tmp_path):
    """Build isolated settings with overrides, e.g. ``make_settings(jwt_secret="")``."""

    def _factory(**overrides) -> Settings:
        return _make_settings(tmp_path, **overrides)

    return _factory


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def session_factory(settings):
    engine, factory = build_database(settings.database_url)
    await UserStore.create_schema(engine)
    yield factory
    await engine.dispose()


@pytest.fixture
def store(session_factory) -> UserStore:
    return UserStore(session_factory, timeout=5.0)


@pytest.fixture
def auth_service(store) -> AuthService:
    return AuthService(store, PasswordHasher(rounds=4), TokenIssuer(TEST_SECRET, 86400))


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
