"""
Shared pytest configuration for backend tests.

Service tests run against an in-memory SQLite database (aiosqlite) by
default. Set TEST_DATABASE_URL to run them against PostgreSQL instead.

SAFETY: a TEST_DATABASE_URL whose database name does not contain "test" is
refused, so a misconfigured environment can never drop real tables.
"""

import os

os.environ.setdefault("ENV", "test")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from sparmatch.database.db import Base  # noqa: E402
from sparmatch.database.models import User  # noqa: E402


def _resolve_test_database_url() -> str:
    """Build the test database URL with safety checks.

    Raises ``RuntimeError`` if TEST_DATABASE_URL points to a database whose
    name does not contain "test".
    """
    url = os.getenv("TEST_DATABASE_URL", "")
    if not url:
        return "sqlite+aiosqlite:///:memory:"

    db_name = url.rsplit("/", 1)[-1].split("?")[0]  # strip query params
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"SAFETY: Refusing to run tests against database '{db_name}'. "
            f"The database name must contain 'test'."
        )
    return url


TEST_DATABASE_URL = _resolve_test_database_url()


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with all tables for a single test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """
    Create a test database session.

    Services only flush, so everything a test writes is rolled back when the
    session closes.
    """
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture(autouse=True)
def no_mapbox_token(monkeypatch):
    """Keep geocoding offline: without a token the geocoder returns (None, None)."""
    monkeypatch.delenv("MAPBOX_ACCESS_TOKEN", raising=False)


async def _create_user(db_session, email, first_name, last_name=None) -> int:
    """Helper: create a user row (flush only) and return its id."""
    user = User(email=email, first_name=first_name, last_name=last_name)
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user.id


@pytest_asyncio.fixture
async def users(db_session):
    """Create four test users."""
    return {
        "alice": await _create_user(db_session, "alice@example.com", "Alice", "Alpha"),
        "bob": await _create_user(db_session, "bob@example.com", "Bob", "Beta"),
        "carol": await _create_user(db_session, "carol@example.com", "Carol", "Gamma"),
        "dave": await _create_user(db_session, "dave@example.com", "Dave", "Delta"),
    }
