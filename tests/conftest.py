"""
Shared fixtures: an in-memory database per test, a recording object store,
a fresh review feed, and an HTTP client whose session can be switched.
"""
from __future__ import annotations

import os
import tempfile
from typing import Optional

# Must be set before config.settings is created
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="service-desk-test-"))
os.environ.setdefault("UPLOAD_DELAY_SECONDS", "0")
os.environ.setdefault("ROLLBACK_BATCH_DELAY_SECONDS", "0")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api.deps import SessionUser, get_optional_session
from database import Base, get_db
from main import app
from services.review_feed import ReviewFeedStore, get_review_feed
from services.storage import get_storage
from tests.fakes import RecordingStorage


class Auth:
    """Which user the next requests are made as."""

    def __init__(self):
        self.session: Optional[SessionUser] = None

    def login(self, user_id: str, authority: str = "user") -> None:
        self.session = SessionUser(id=user_id, authority=authority)

    def logout(self) -> None:
        self.session = None


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def feed():
    return ReviewFeedStore()


@pytest.fixture
def auth():
    return Auth()


@pytest_asyncio.fixture
async def seed(session_factory):
    """seed(*rows) inserts rows and commits."""

    async def _seed(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows

    return _seed


@pytest_asyncio.fixture
async def http_client(session_factory, storage, feed, auth):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_review_feed] = lambda: feed
    app.dependency_overrides[get_optional_session] = lambda: auth.session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
