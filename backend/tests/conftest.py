"""
Blog Backend - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Store and API tests run against a real SQLite database (aiosqlite) in
       a per-test temporary file; service unit tests use AsyncMock stores.

Fixture Hierarchy (all function-scoped):
    ├── engine:            async engine on a fresh SQLite file, tables created
    ├── session_factory:   async_sessionmaker bound to that engine
    ├── db_session:        one AsyncSession for store tests
    ├── mock_db_session:   AsyncMock standing in for an AsyncSession
    ├── temp_storage:      temporary image storage directory
    ├── sample_png_bytes:  minimal PNG upload payload
    └── test_client:       httpx AsyncClient wired to a fresh app whose
                           session dependency uses session_factory
"""

import os
import tempfile

# Settings are read at import time; point them at throwaway locations
# before anything from the blog package is imported.
_TEST_DIR = tempfile.mkdtemp(prefix="blog_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/health.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "storage")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import blog.models  # noqa: E402,F401  (registers tables on Base.metadata)
from blog.database import Base, get_db_session  # noqa: E402


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    A single session for store tests. Nothing is committed unless the test
    commits; the database file is discarded afterwards anyway.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for service tests whose stores are mocked too; it
    only has to be passed through.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR chunk header; enough for upload tests."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    Each request gets its own session from session_factory, committed on
    success and rolled back on error, like get_db_session in production.

    Usage:
        async def test_get_post(test_client):
            response = await test_client.get("/api/posts/1")
    """
    from blog.main import create_app

    app = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
