"""Shared fixtures for catalog tests.

Database tests run against a throwaway SQLite file through aiosqlite,
one file per test.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from category_api.catalog import models  # noqa: F401  registers tables on Base
from category_api.infrastructure.database import Base


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create a session factory bound to a fresh SQLite database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a session for arranging test data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def deleted_at() -> datetime:
    """Timestamp used to soft-delete records."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)
