from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, Integer, DateTime
from datetime import datetime, timezone
from daycare.core.config import settings, get_database_url

# Database URL from settings
SQLALCHEMY_DATABASE_URL = get_database_url()


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=20,         # Maximum number of connections in the pool
            max_overflow=10,      # Connections allowed beyond pool_size
            pool_timeout=30,      # Seconds to wait on pool checkout
            pool_recycle=1800,    # Recycle connections after 30 minutes
        )
    return options


# Create async engine
engine = create_async_engine(SQLALCHEMY_DATABASE_URL, **_engine_options(SQLALCHEMY_DATABASE_URL))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,    # Don't expire objects after commit
    autoflush=False            # Explicit flush management
)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Primary key plus created/updated timestamps shared by every table"""
    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


# FastAPI dependency for database sessions
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async database session.
    Usage: db: AsyncSession = Depends(get_db)
    """
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()

async def init_db() -> None:
    """Initialize database tables"""
    import daycare.models  # noqa: F401  registers every table on Base.metadata
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
