"""
Shared test fixtures for the School Attendance Tracker test suite.

Each test gets a fresh in-memory database (aiosqlite + StaticPool) and an
httpx AsyncClient wired to the app with the DB and auth dependencies
overridden.
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.api.v1.endpoints.auth import limiter
from app.db.base import Base
from app.main import app
from app.models.teacher import Teacher
from app.models.user import ROLE_ADMIN, User

limiter.enabled = False

ADMIN_USER = User(id=1, name="Admin", phone_or_email="admin@example.com", is_active=True, role=ROLE_ADMIN)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create all tables in a private in-memory database, drop it afterwards."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Auth Overrides ──────────────────────────────────────────────────
async def _override_get_current_active_user() -> User:
    return ADMIN_USER


async def _override_require_admin() -> User:
    return ADMIN_USER


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app, authenticated as admin."""
    app.dependency_overrides[get_current_active_user] = _override_get_current_active_user
    app.dependency_overrides[require_admin] = _override_require_admin
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_current_active_user, None)
    app.dependency_overrides.pop(require_admin, None)


@pytest.fixture
async def anon_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """A client with no auth overrides, for login / token tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def teacher(db_session: AsyncSession) -> Teacher:
    row = Teacher(name="Ada Lovelace", department="Science", subject="Mathematics")
    db_session.add(row)
    await db_session.commit()
    await db_session.refresh(row)
    return row
