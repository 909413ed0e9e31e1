"""Service test fixtures — async DB, FastAPI test client, and in-memory collaborators.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness check sees the test engine
    - Fake collaborators satisfy the repository protocols without IO

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (ADR: PostgreSQL-specific features not exercised here)
"""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from haccp_compliance.db.base import Base
from haccp_compliance.infrastructure.database import get_db, DatabaseSessionManager
import haccp_compliance.infrastructure.database as db_module
import haccp_compliance.models  # noqa: F401
from haccp_compliance.main import app

from tests.services.fakes import (
    FIXED_NOW, MERGED_STERILIZATION, STERILIZATION, SUMMER_STANDARDS, TRAPS,
    FakeCCPCatalog, FakePestCatalog, RecordingNotifier,
)


# --- database -----------------------------------------------------------------

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def ccp_catalog():
    return FakeCCPCatalog([STERILIZATION, MERGED_STERILIZATION])


@pytest.fixture
def pest_catalog():
    return FakePestCatalog(SUMMER_STANDARDS, TRAPS)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def summer_day():
    return date(2024, 7, 1)
