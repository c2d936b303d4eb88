"""
Pytest configuration and fixtures for testing.

Runs against in-memory SQLite unless TEST_DATABASE_URL points elsewhere
(see create_test_db.py for the PostgreSQL setup).
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["ENVIRONMENT"] = "test"

import fnmatch
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable, Awaitable
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from app.main import app
from app.db import session as db_session_module
from app.db.session import Base, get_session
from app.core.security import hash_password, create_access_token
from app.cache.redis_client import cache
from app.db.models.user import User
from app.db.models.event import Event
from app.db.models.participant import Participant, ParticipationStatus
from app.db.models.mixins import utcnow
from app.db.repositories import users as users_repo
from app.db.repositories import events as events_repo
from app.db.repositories import participants as participants_repo
import app.api.v1.routes.auth as auth_routes


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
TEST_PASSWORD = "Test123!@#"


class FakeRedis:
    """Dict-backed stand-in for the handful of redis commands RedisCache uses."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value

    async def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def exists(self, key):
        return int(key in self.store)

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self):
        self.store.clear()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(cache, "_get_client", lambda: fake)
    return fake


@pytest.fixture(autouse=True)
def mock_password_hashing(monkeypatch):
    """
    Mock bcrypt password hashing for testing environments where bcrypt cannot be installed.
    This fixture is autouse, so it applies to all tests automatically.
    """
    class MockPasswordContext:
        def hash(self, password: str) -> str:
            return f"$2b$12$mockedhash{password}"

        def verify(self, plain: str, hashed: str) -> bool:
            return hashed == f"$2b$12$mockedhash{plain}"

    from app.core import security
    monkeypatch.setattr(security, "pwd_context", MockPasswordContext())


@pytest.fixture(autouse=True)
def disable_rate_limiting(monkeypatch):
    """Disable rate limiting for all tests."""
    monkeypatch.setattr(auth_routes.limiter, "enabled", False)


@pytest.fixture(autouse=True)
def published_events(monkeypatch) -> list:
    """Capture bus publishes instead of talking to RabbitMQ."""
    published = []

    async def mock_publish(routing_key, payload):
        published.append((routing_key, payload))

    from app.events import publisher
    monkeypatch.setattr(publisher, "publish_event", mock_publish)
    return published


@pytest_asyncio.fixture
async def test_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        # one shared in-memory database for every session in the test
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine, monkeypatch):
    """Session factory bound to the test database, also used by the notification dispatcher."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(db_session_module, "AsyncSessionLocal", factory)
    return factory


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.
    Every request gets its own session on the test database.
    """
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(email: str, full_name: str = None) -> User:
        return await users_repo.create_user(db_session, email, hash_password(TEST_PASSWORD), full_name)
    return _make_user


@pytest.fixture
def make_event(db_session: AsyncSession) -> Callable[..., Awaitable[Event]]:
    async def _make_event(organizer: User, **fields) -> Event:
        data = {"title": "Test Event", "description": "A test event description", "location": "Nairobi"}
        data.update(fields)
        return await events_repo.create_event(db_session, organizer.id, data)
    return _make_event


@pytest.fixture
def add_participant(db_session: AsyncSession) -> Callable[..., Awaitable[Participant]]:
    async def _add(event: Event, user: User, status: ParticipationStatus = ParticipationStatus.ACCEPTED) -> Participant:
        now = utcnow()
        return await participants_repo.add_participant(
            db_session,
            event_id=event.id,
            user_id=user.id,
            status=status,
            invited_at=now,
            responded_at=None if status == ParticipationStatus.PENDING else now,
        )
    return _add


@pytest_asyncio.fixture
async def organizer(make_user) -> User:
    return await make_user("organizer@example.com", "Olive Organizer")


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    return await make_user("testuser@example.com", "Test User")


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user("other@example.com", "Other User")


@pytest_asyncio.fixture
async def private_event(make_event, organizer) -> Event:
    return await make_event(organizer, title="Private Dinner", is_public=False)


@pytest_asyncio.fixture
async def public_event(make_event, organizer) -> Event:
    return await make_event(organizer, title="Open Meetup", is_public=True)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    return auth_headers
