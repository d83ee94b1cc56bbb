"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sse_starlette.sse import AppStatus

from app.api.deps import (
    create_access_token,
    get_llm_gateway,
    get_profile_cache,
    get_session_factory,
    get_tool_registry,
)
from app.config import get_settings
from app.db.base import Base
from app.db.models import User
from app.db.session import get_db
from app.main import app
from app.services.profile_cache import LocalProfileCache
from app.tools import ToolContext, ToolRegistry, default_registry

from tests.fakes import FakeGateway, RecordingWriter


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """The SSE exit event binds to the loop it was created on; start fresh per test."""
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def user(db) -> User:
    user = User(email="learner@example.com", name="Ada Learner")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def other_user(db) -> User:
    user = User(email="someone@example.com", name="Someone Else")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def profile_cache(tmp_path) -> LocalProfileCache:
    return LocalProfileCache(tmp_path / "cache")


@pytest.fixture
def registry() -> ToolRegistry:
    return default_registry()


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def make_context(db, writer, gateway, profile_cache) -> Callable[..., ToolContext]:
    """Build a tool context; keyword arguments override the defaults."""

    def _make(**overrides) -> ToolContext:
        values = {
            "db": db,
            "writer": writer,
            "gateway": gateway,
            "model": "test-model",
            "user_id": None,
            "profile_cache": profile_cache,
            "settings": get_settings(),
        }
        values.update(overrides)
        return ToolContext(**values)

    return _make


@pytest.fixture
async def client(
    session_factory, gateway, profile_cache, registry
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_llm_gateway] = lambda: gateway
    app.dependency_overrides[get_profile_cache] = lambda: profile_cache
    app.dependency_overrides[get_tool_registry] = lambda: registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
