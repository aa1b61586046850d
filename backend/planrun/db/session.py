"""Async engine and sessions for the plan tables. Plan writers commit themselves; get_db only guards."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from planrun.config import settings
from planrun.core.plan_cache import close_plan_cache
from planrun.db.base import Base

logger = logging.getLogger(__name__)


def _engine_kwargs(database_url: str) -> dict:
    # Pool tuning applies to server databases only
    if database_url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_kwargs(settings.database_url),
)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create plan tables that do not exist yet (dev/tests; production uses Alembic)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Shutdown hook for workers: drop pooled connections and the plan cache client."""
    await close_plan_cache()
    await engine.dispose()
    logger.info("Plan store connections closed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
