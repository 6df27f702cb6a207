"""
Database engine and sessions.

One async engine per process (asyncpg in production). Request handlers get
a session from ``get_db``; the booking scheduler commits inside that
session while it holds the vehicle's admission lock, so sessions never
expire loaded rows on commit.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from carshare.app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

# Rows stay readable after commit: endpoints serialize them afterwards
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Shared declarative base of the carshare models
Base = declarative_base()


async def get_db():
    """
    FastAPI dependency yielding one session per request.

    Whatever the handler left uncommitted is rolled back when the session
    closes.
    """
    async with AsyncSessionLocal() as session:
        yield session
