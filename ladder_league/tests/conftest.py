"""
Shared pytest configuration for ladder league tests.

Database tests run against an in-memory SQLite database by default. Set
TEST_DATABASE_URL to run them against PostgreSQL instead.

SAFETY: a PostgreSQL URL is REFUSED unless the database name contains the
substring "test", since every test drops and recreates all tables.
"""

import os
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from ladder_league.database.db import Base

DEFAULT_TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _resolve_test_database_url() -> str:
    """Build the test database URL with safety checks.

    Raises ``RuntimeError`` if a non-SQLite URL does not point to a database
    whose name contains "test".
    """
    url = os.getenv("TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)
    if url.startswith("sqlite"):
        return url

    db_name = url.rsplit("/", 1)[-1].split("?")[0]  # strip query params
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"\n{'=' * 70}\n"
            f"  SAFETY: Refusing to run tests against database '{db_name}'.\n"
            f"  The database name must contain 'test' to prevent accidental\n"
            f"  data loss in development or production databases.\n\n"
            f"  Fix: set TEST_DATABASE_URL to a test database, e.g.:\n"
            f"    export TEST_DATABASE_URL=postgresql+asyncpg://.../{db_name}_test\n"
            f"  Or unset it to use in-memory SQLite.\n"
            f"{'=' * 70}"
        )
    return url


# Validated at import time so pytest fails immediately with a clear message
TEST_DATABASE_URL = _resolve_test_database_url()


def _create_test_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection, otherwise every session sees its own empty database
        return create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    # No pooling, avoids "Future attached to different loop" across tests
    return create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with a fresh schema."""
    engine = _create_test_engine()

    async with engine.begin() as conn:
        # Ensure models are imported so Base.metadata includes all tables
        from ladder_league.database import models  # noqa: F401

        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # Code that opens its own sessions (stats_queue._run_calculation) must hit
    # the test database too
    from ladder_league.database import db

    test_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    original_async_session_local = db.AsyncSessionLocal
    db.AsyncSessionLocal = test_session_maker

    yield engine

    db.AsyncSessionLocal = original_async_session_local

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


PLAYER_NAMES = [
    "Alice Adams", "Ben Brown", "Cara Clark", "Dan Davis",
    "Eve Evans", "Finn Ford", "Gia Green", "Hal Hill",
]


@pytest_asyncio.fixture
async def ladder_day(db_session):
    """
    A points league with two configured courts and one pending game day.

    Players 0-3 are on court 1 and players 4-7 on court 2, in slot order.
    """
    from ladder_league.services import data_service

    league = await data_service.create_league(
        db_session,
        name="Wednesday Ladder",
        start_date="2025-06-02",
        end_date="2025-06-30",
        play_day=2,
        win_type="points",
        courts=2,
    )
    players = [await data_service.create_player(db_session, name) for name in PLAYER_NAMES]
    for court_number in (1, 2):
        await data_service.update_court_size(db_session, league.id, court_number, 4)
    game_day = await data_service.create_game_day(db_session, league.id, "2025-06-04")
    await data_service.save_court_assignments(
        db_session,
        league.id,
        game_day.id,
        {
            1: [{"player_id": p.id} for p in players[:4]],
            2: [{"player_id": p.id} for p in players[4:]],
        },
    )
    return {"league": league, "game_day": game_day, "players": players}


@pytest.fixture
def no_background_jobs(monkeypatch):
    """Keep enqueued standings jobs from running in the background."""
    from ladder_league.services.stats_queue import get_stats_queue

    async def _noop(job_id):
        return None

    queue = get_stats_queue()
    monkeypatch.setattr(queue, "_run_calculation", _noop)
    return queue
