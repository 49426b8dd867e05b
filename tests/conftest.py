import os
import sys
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Load environment variables from .env file
load_dotenv()

# Settings are read at import time; make the app importable without a .env
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./rideshare_dev.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_FORMAT", "console")

from app.config import settings  # noqa: E402
from app.core.redis_client import CacheManager  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.database import enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.dependencies import get_cache_manager  # noqa: E402
from app.main import app  # noqa: E402
from app.models import metadata  # noqa: E402
from app.models.users import users  # noqa: E402

# Test database URL - MUST be different from the application database.
# Without TEST_DATABASE_URL each test gets a fresh SQLite file.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

if TEST_DATABASE_URL and settings.database_url == TEST_DATABASE_URL:
    print("\n❌ CRITICAL ERROR: Test database URL is same as application database!")
    print("This would DROP all application data during tests.")
    print("Please set TEST_DATABASE_URL to a separate test database in .env")
    sys.exit(1)


@pytest.fixture
def test_database_url(tmp_path) -> str:
    """Database URL for this test, using the asyncpg driver for PostgreSQL."""
    if not TEST_DATABASE_URL:
        return f"sqlite+aiosqlite:///{tmp_path / 'rideshare_test.db'}"
    return TEST_DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)


@pytest_asyncio.fixture
async def db_session(test_database_url: str) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session over freshly created tables."""
    test_engine = create_async_engine(test_database_url, echo=False, poolclass=NullPool)
    if test_database_url.startswith("sqlite"):
        event.listen(test_engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def mock_redis() -> MagicMock:
    """Redis stand-in that behaves like an empty cache."""
    redis_client = MagicMock()
    redis_client.get.return_value = None
    redis_client.exists.return_value = 0
    return redis_client


@pytest.fixture
def cache_manager(mock_redis: MagicMock) -> CacheManager:
    return CacheManager(redis_client=mock_redis)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    cache_manager: CacheManager,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_manager] = lambda: cache_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory inserting a user row and returning its data."""

    async def _make_user(name: str = "Test User", **overrides) -> dict:
        user_id = uuid4()
        user_data = {
            "id": user_id,
            "firebase_uid": f"firebase_uid_{user_id}",
            "name": name,
            "email": f"{user_id.hex[:8]}@example.com",
            "email_verified": True,
            "image": None,
            "is_active": True,
            **overrides,
        }
        await db_session.execute(insert(users).values(**user_data))
        await db_session.commit()
        return user_data

    return _make_user


@pytest_asyncio.fixture
async def test_user(make_user: Callable) -> dict:
    """The driver in most ride tests."""
    return await make_user("Dana Driver")


@pytest_asyncio.fixture
async def other_user(make_user: Callable) -> dict:
    """A passenger in most ride tests."""
    return await make_user("Pat Passenger")


def headers_for(user_id: UUID) -> dict:
    """Bearer headers carrying an access token for a user."""
    token = create_access_token(data={"sub": str(user_id)}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_auth_headers() -> Callable[[UUID], dict]:
    return headers_for


@pytest.fixture
def auth_headers(test_user: dict) -> dict:
    """Create authentication headers for testing protected endpoints."""
    return headers_for(test_user["id"])


@pytest.fixture
def other_auth_headers(other_user: dict) -> dict:
    return headers_for(other_user["id"])


@pytest.fixture
def sample_ride_data() -> dict:
    """Sample ride data for testing."""
    return {
        "from_location": "Ithaca",
        "to_location": "New York",
        "time": (datetime.now(UTC) + timedelta(days=1)).isoformat(),
        "description": "Leaving from Collegetown, one stop in Binghamton",
        "car_description": "Blue Honda Civic",
        "price": 25.0,
        "capacity": 2,
    }
