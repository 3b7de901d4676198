from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for ``settings.DATABASE_URL``."""
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        # In-memory SQLite must share one connection or every session sees an
        # empty database.
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=settings.DB_ECHO, **kwargs)

    return create_async_engine(
        url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,  # Test connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


class Database:
    """Owns the engine and session factory for one running process.

    Created once in the application lifespan and stored on ``app.state``;
    request handlers get sessions through ``libs.db.session.get_async_db``.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.engine: AsyncEngine = build_engine(self.settings)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """Create missing tables (local/test convenience; use Alembic elsewhere)."""
        from libs.db.base import Base
        from libs.db.registry import import_all_models

        import_all_models()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


@asynccontextmanager
async def database_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Attach a ``Database`` to ``app.state`` for the life of the process.

    Tables are created automatically in local/test environments; deployed
    environments are expected to run ``alembic upgrade head``.
    """
    settings = get_settings()
    database = Database(settings)
    if settings.ENVIRONMENT in ("local", "test"):
        await database.create_all()
    app.state.database = database
    logger.info(f"Database ready ({database.engine.url.get_backend_name()})")
    try:
        yield
    finally:
        await database.dispose()
