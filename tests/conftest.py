"""Test fixtures: a fresh database per test and HTTP clients bound to it.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own engine with the schema created from the models.
   By default that is an in-memory SQLite database (StaticPool keeps the
   single connection alive for the whole test). Point
   TASKBOARD_TEST_DATABASE_URL at PostgreSQL to run the same suite there.
2. The app's get_db dependency is overridden to hand out sessions from
   that engine, so every route runs the real service code against it.
3. After the test the schema is dropped and the engine disposed.

bcrypt is slowed down on purpose in production (12 rounds); tests use
the minimum work factor so sign-ups stay fast.
"""

import os
import uuid

os.environ.setdefault("TASKBOARD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKBOARD_JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskboard.auth.dependencies import get_token_codec
from taskboard.auth.jwt import TokenCodec
from taskboard.db.engine import get_db
from taskboard.db.models import Base
from taskboard.main import app

TEST_DB_URL = os.environ.get("TASKBOARD_TEST_DATABASE_URL", "sqlite+aiosqlite://")
TEST_SECRET = "test-secret"


@pytest_asyncio.fixture()
async def session_factory():
    """Per-test engine with a freshly created schema."""
    if TEST_DB_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DB_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DB_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for driving services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def codec():
    return TokenCodec(secret=TEST_SECRET)


@pytest_asyncio.fixture()
async def client(session_factory, codec):
    """HTTP client against the real app with get_db pointed at the test DB.

    Learn: Auth is NOT mocked. Tests sign up through the API and send the
    returned token, so the whole pipeline (codec, session resolver,
    collaborator checks) runs on every request.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_codec] = lambda: codec

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _sign_up(client, name: str, password: str = "password_123") -> dict:
    """Register a fresh user through the API. Returns {user, token, email, headers}."""
    email = f"{name.split()[0].lower()}-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        "/api/v1/auth/sign-up",
        json={"email": email, "name": name, "password": password},
    )
    assert r.status_code == 201, r.text
    data = r.json()
    data["email"] = email
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


@pytest_asyncio.fixture()
async def alice(client):
    return await _sign_up(client, "Alice Liddell")


@pytest_asyncio.fixture()
async def bob(client):
    return await _sign_up(client, "Bob Builder")


@pytest.fixture()
def make_user(client):
    """Factory for extra users: `await make_user("Carol")`."""

    async def _make(name: str = "Test User", password: str = "password_123") -> dict:
        return await _sign_up(client, name, password)

    return _make
