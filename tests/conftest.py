import pytest
import pytest_asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
import sys
from pathlib import Path


sys.path.append(str(Path(__file__).resolve().parent.parent))

from foodfinder.core.database import Base
from foodfinder import models  # noqa: F401


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, future=True
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async_session = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with async_session() as session:
        yield session


@pytest.fixture(autouse=True)
def redis_mock():
    """Keep tests off a real Redis: every lookup is a cache miss."""
    mock = AsyncMock()
    mock.get.return_value = None
    mock.keys.return_value = []
    with patch("foodfinder.utils.cache.redis_client", mock):
        yield mock


@pytest.fixture
def session_factory(session):
    """Drop-in replacement for core.database.get_session bound to the test session."""

    @asynccontextmanager
    async def _get_session():
        yield session

    return _get_session
