"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from category_api.infrastructure.config import settings

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base class for models
Base = declarative_base()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory.

    Resolution runs independent stages concurrently, and an AsyncSession
    must not be shared between concurrent tasks, so services receive the
    factory and open one session per branch.

    Returns:
        Session factory bound to the application engine.
    """
    return async_session_factory
