from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scout.config import get_settings
from scout.core.logging import get_logger

logger = get_logger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict[str, Any]:
    """
    Pick engine options for the configured backend.

    SQLite (aiosqlite) uses a single-file database and rejects the pool
    sizing arguments; PostgreSQL (asyncpg) gets a small recycled pool.
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 280,
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.bind(error=str(e)).error("database_transaction_rollback")
            await session.rollback()
            raise


async def create_all() -> None:
    """Create every table that does not exist yet (dev and tests; prod uses alembic)."""
    from scout.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
