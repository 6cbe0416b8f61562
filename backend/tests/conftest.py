"""
RentOK Admin Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:   Mock async session (no real DB needed)
    ├── admin_user / vendor_user: identities as stored in the session cookie
    ├── session_cookie:    factory building a cookie value for a user and time
    ├── test_client:       HTTPX AsyncClient on the ASGI app, no cookie
    ├── admin_client:      same, carrying a fresh admin session cookie
    └── vendor_client:     same, carrying a fresh vendor session cookie
"""

import os

# Override settings for testing BEFORE any rentok imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RESEND_API_KEY"] = ""
os.environ["IMAGEKIT_PUBLIC_KEY"] = ""
os.environ["IMAGEKIT_PRIVATE_KEY"] = ""
os.environ["IMAGEKIT_URL_ENDPOINT"] = ""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from rentok.config import settings
from rentok.database import get_db_session
from rentok.schemas.session import Role, SessionUser
from rentok.services.session_service import now_ms, session_cookie_value


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_tag(mock_db_session):
            mock_db_session.get.return_value = tag
            result = await tag_service.get_tag(mock_db_session, tag_id)

    `begin_nested()` returns a MagicMock, which works as an async context
    manager, so savepoint blocks run their body normally.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.begin_nested = MagicMock()
    return session


@pytest.fixture
def admin_user() -> SessionUser:
    return SessionUser(id="a-1", email="admin@rentok.test", type=Role.ADMIN, is_verified=True)


@pytest.fixture
def vendor_user() -> SessionUser:
    return SessionUser(id="v-1", email="vendor@rentok.test", type=Role.VENDOR, is_verified=True)


@pytest.fixture
def session_cookie():
    """Factory: cookie value for `user` issued `age_ms` milliseconds ago."""

    def build(user: SessionUser, age_ms: int = 0) -> str:
        return session_cookie_value(user, now_ms() - age_ms)

    return build


def _app_with_db(mock_db_session):
    from rentok.main import app

    async def override():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override
    return app


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to the ASGI app, without a session cookie.

    The database dependency is replaced by `mock_db_session`; redirects are
    not followed so gate decisions can be asserted directly.
    """
    app = _app_with_db(mock_db_session)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client(mock_db_session, admin_user, session_cookie):
    app = _app_with_db(mock_db_session)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.cookies.set(settings.session_cookie_name, session_cookie(admin_user))
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def vendor_client(mock_db_session, vendor_user, session_cookie):
    app = _app_with_db(mock_db_session)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.cookies.set(settings.session_cookie_name, session_cookie(vendor_user))
        yield client
    app.dependency_overrides.clear()
