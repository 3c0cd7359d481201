"""Tests for engine configuration per database backend."""

from app.db.session import engine_options


def test_postgres_gets_sized_pool():
    options = engine_options("postgresql+asyncpg://u:p@db:5432/attendance")
    assert options["pool_size"] == 20
    assert options["max_overflow"] == 10
    assert options["pool_pre_ping"] is True


def test_sqlite_keeps_default_pool():
    options = engine_options("sqlite+aiosqlite:///:memory:")
    assert "pool_size" not in options
    assert "max_overflow" not in options
