"""
Async SQLAlchemy engine and session factory.

PostgreSQL (asyncpg) gets a sized connection pool for the API workers;
SQLite (aiosqlite, used for tests and local runs) keeps SQLAlchemy's
default pool, which does not accept sizing arguments.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if make_url(database_url).get_backend_name() == "postgresql":
        options.update(pool_size=20, max_overflow=10, pool_recycle=300)
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
