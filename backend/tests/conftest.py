"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test runs inside one transaction that rolls back after the test.
- The test database `travelworld_test` must exist before running tests
  (override with TEST_DATABASE_URL).
"""

import os
import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from travelworld.auth.jwt import create_access_token
from travelworld.auth.passwords import hash_password
from travelworld.config import settings
from travelworld.database import Base, get_db
from travelworld.main import app
from travelworld.models.tour import Tour
from travelworld.models.user import ROLE_ADMIN, ROLE_USER, User
from travelworld.services.storage import LocalImageStore, get_image_store

TEST_PASSWORD = "testpass123"

# ---------------------------------------------------------------------------
# Test database engine on the same PG instance, `travelworld_test` DB.
# Replace the last path segment of the configured URL with the test DB name.
# ---------------------------------------------------------------------------

_test_db_url = os.environ.get(
    "TEST_DATABASE_URL",
    settings.async_database_url.rsplit("/", 1)[0] + "/travelworld_test",
)


def _make_engine():
    return create_async_engine(
        _test_db_url,
        echo=False,
        pool_pre_ping=True,
    )


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest.fixture
def image_store(tmp_path) -> LocalImageStore:
    """Image store writing into a per-test temporary directory."""
    return LocalImageStore(tmp_path / "uploads", "http://testserver")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, image_store: LocalImageStore) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB session and image store."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_store] = lambda: image_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users and their tokens
# ---------------------------------------------------------------------------


async def make_user(
    db_session: AsyncSession,
    prefix: str = "user",
    role: str = ROLE_USER,
    password: str = TEST_PASSWORD,
) -> User:
    """Insert a user directly in the DB with a unique username and email."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        username=f"{prefix}_{unique}",
        email=f"{prefix}-{unique}@test.com",
        hashed_password=hash_password(password),
        role=role,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def bearer(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.role, user.username)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "alice")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "bob")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin", role=ROLE_ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    """Authorization headers for the regular test user."""
    return bearer(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    return bearer(other_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: catalogue
# ---------------------------------------------------------------------------


async def make_tour(db_session: AsyncSession, **overrides) -> Tour:
    data = {
        "title": f"Tour {uuid.uuid4().hex[:8]}",
        "city": "Bali",
        "address": "Jl. Raya Ubud",
        "distance": 120.0,
        "desc": "Rice terraces and temples.",
        "price": Decimal("99.00"),
        "max_group_size": 8,
        "featured": False,
    }
    data.update(overrides)
    tour = Tour(**data)
    db_session.add(tour)
    await db_session.flush()
    await db_session.refresh(tour)
    return tour


@pytest_asyncio.fixture
async def test_tour(db_session: AsyncSession) -> Tour:
    return await make_tour(db_session)
