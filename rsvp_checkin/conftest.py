import os
from contextlib import asynccontextmanager

# Settings are read at import time; point the default engine at sqlite before
# anything from the application is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "false")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from rsvp_checkin.attendance.credentials.tokens import TokenService  # noqa: E402
from rsvp_checkin.attendance.repository import orm_models  # noqa: E402, F401
from rsvp_checkin.attendance.repository.store import SqlAttendanceStore  # noqa: E402
from rsvp_checkin.attendance.repository.tests.inmemory_store import (  # noqa: E402
    InMemoryAttendanceStore,
)
from rsvp_checkin.config.database import create_engine  # noqa: E402
from rsvp_checkin.live_updates.bus import LiveUpdateBus  # noqa: E402
from rsvp_checkin.main import app  # noqa: E402
from rsvp_checkin.models.base import BaseModel  # noqa: E402

TEST_SECRET = "test-secret-key-that-is-at-least-32-bytes-long"


@pytest.fixture
def client_factory():
    """Build an AsyncClient against the app with dependency overrides applied."""

    @asynccontextmanager
    async def _factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return _factory


@pytest_asyncio.fixture
async def client(client_factory):
    """Create a test client."""
    async with client_factory() as ac:
        yield ac


@pytest_asyncio.fixture
async def sqlite_session_maker(tmp_path):
    """File-backed sqlite so concurrent sessions really use separate connections."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'attendance.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def sql_store(sqlite_session_maker) -> SqlAttendanceStore:
    return SqlAttendanceStore(session_maker=sqlite_session_maker)


@pytest.fixture
def memory_store() -> InMemoryAttendanceStore:
    return InMemoryAttendanceStore()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def bus() -> LiveUpdateBus:
    return LiveUpdateBus(queue_size=10)
