"""
Notes Service — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine:        in-memory SQLite engine with the notes table created
    ├── db_session:       AsyncSession bound to db_engine (service-level tests)
    ├── mock_db_session:  AsyncMock session for failure paths
    ├── app:              fresh FastAPI app with get_db_session overridden
    └── test_client:      HTTPX AsyncClient talking to `app` over ASGI
"""

import os

# Override settings for testing BEFORE any notes_service imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["DEBUG"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from notes_service.database import Base, get_db_session  # noqa: E402
from notes_service.main import create_app  # noqa: E402
from notes_service.models import note as _note_model  # noqa: E402,F401


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite engine shared by every session of one test.

    StaticPool keeps a single connection alive, so the tables created here
    are visible to every request the test makes.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """A real AsyncSession for NoteService / NoteStore tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.execute.side_effect = SQLAlchemyError("gone")
            await note_service.get_note(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    """
    A fresh application whose sessions come from the test engine.

    The override mirrors database.get_db_session: commit on success,
    rollback on error.
    """
    application = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    raise_app_exceptions=False lets tests observe the 500 response produced
    by the catch-all handler instead of the re-raised exception.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/notes")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def note_payload():
    return {"title": "Groceries", "content": "Milk, eggs, bread"}
