from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.base import Base
from libs.db.registry import import_all_models
from libs.db.session import get_async_db

import_all_models()

STAFF_USER = AuthUser(sub="staff-user", email="desk@example.com", role="staff")


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same
    database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session configured like the application's session factory."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


def _override(app, db_session: AsyncSession, user: AuthUser = STAFF_USER) -> None:
    async def _get_db():
        yield db_session

    async def _current_user():
        return user

    app.dependency_overrides[get_async_db] = _get_db
    app.dependency_overrides[get_current_user] = _current_user


async def _client_for(app, db_session) -> AsyncGenerator[AsyncClient, None]:
    _override(app, db_session)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def members_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.members_service.app.main import create_app

    async for ac in _client_for(create_app(), db_session):
        yield ac


@pytest_asyncio.fixture
async def payments_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.payments_service.app.main import create_app

    async for ac in _client_for(create_app(), db_session):
        yield ac


@pytest_asyncio.fixture
async def attendance_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.attendance_service.app.main import create_app

    async for ac in _client_for(create_app(), db_session):
        yield ac


async def _client_with_weather(app, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Like ``_client_for`` but with a keyless (disabled) weather client."""
    from services.ai_service.providers.weather import WeatherClient, get_weather_client

    weather = WeatherClient()
    app.dependency_overrides[get_weather_client] = lambda: weather
    async for ac in _client_for(app, db_session):
        yield ac
    await weather.aclose()


@pytest_asyncio.fixture
async def ai_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.ai_service.app.main import create_app

    async for ac in _client_with_weather(create_app(), db_session):
        yield ac


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Gateway client: every router under ``/api/v1``."""
    from services.gateway_service.app.main import create_app

    async for ac in _client_with_weather(create_app(), db_session):
        yield ac
