"""
Pytest configuration.
Provides storage backends, session stores and HTTP clients bound to the app.
"""
import os

# Must be set before teamflow.core.config is imported
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SESSION_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["FIRST_ADMIN_PASSWORD"] = ""

from contextlib import asynccontextmanager  # noqa: E402
from typing import AsyncGenerator, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

import teamflow.models.relationships  # noqa: E402,F401
from teamflow.api.deps import get_session_store, get_storage  # noqa: E402
from teamflow.core.config import settings  # noqa: E402
from teamflow.db.base import Base  # noqa: E402
from teamflow.main import app  # noqa: E402
from teamflow.services.session import MemorySessionStore  # noqa: E402
from teamflow.storage.database import DatabaseStorage  # noqa: E402
from teamflow.storage.memory import MemStorage  # noqa: E402
from tests.mocks.services import MockRedisClient  # noqa: E402


@asynccontextmanager
async def sqlite_storage(path) -> AsyncGenerator[DatabaseStorage, None]:
    """DatabaseStorage over a throwaway SQLite file with the full schema"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            yield DatabaseStorage(session)
    finally:
        await engine.dispose()


@pytest.fixture
def storage() -> MemStorage:
    """In-memory storage used by the API tests."""
    return MemStorage()


@pytest_asyncio.fixture
async def sql_storage(tmp_path) -> AsyncGenerator[DatabaseStorage, None]:
    async with sqlite_storage(tmp_path / "teamflow.db") as db_storage:
        yield db_storage


@pytest_asyncio.fixture(params=["memory", "database"])
async def any_storage(request, tmp_path):
    """Runs a test once per storage backend."""
    if request.param == "memory":
        yield MemStorage()
        return
    async with sqlite_storage(tmp_path / "contract.db") as db_storage:
        yield db_storage


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore(settings.SESSION_IDLE_TIMEOUT, settings.SESSION_MAX_LIFETIME)


@pytest.fixture
def mock_redis() -> MockRedisClient:
    return MockRedisClient()


@pytest_asyncio.fixture
async def make_client(storage, session_store) -> AsyncGenerator[Callable[[], AsyncClient], None]:
    """
    Factory of HTTP clients bound to the app.
    Each client keeps its own cookie jar, so one client acts as one logged-in user.
    """
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_session_store] = lambda: session_store
    clients = []

    def factory() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(make_client) -> AsyncClient:
    """A single anonymous client."""
    return make_client()
