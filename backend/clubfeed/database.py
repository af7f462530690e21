from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from clubfeed.config import get_settings


class Base(DeclarativeBase):
    pass


def create_engine_for(database_url: str) -> AsyncEngine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


async def init_db(database_url: str | None = None) -> None:
    """Create the seen-activity table if it does not exist yet."""
    import clubfeed.models  # noqa: F401  (registers tables on Base.metadata)

    engine = create_engine_for(database_url or get_settings().database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@asynccontextmanager
async def get_task_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh engine + session for one unit of polling work.

    Celery tasks use asyncio.run() which creates a new event loop each time,
    and an engine's pool is bound to the loop it was first used on, so each
    invocation builds and disposes its own engine.
    """
    task_engine = create_engine_for(get_settings().database_url)
    factory = async_sessionmaker(
        task_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()
    await task_engine.dispose()
