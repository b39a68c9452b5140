import os
from typing import AsyncGenerator, Awaitable, Callable, Dict

# Settings are read at import time; tests run against in-memory SQLite
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SERVICE_TIMEZONE", "UTC")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.models import User
from app.auth.security import access_token_for
from app.db.session import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory for users. The password hash is a placeholder; use the register API to test logins."""

    async def _make(role: str = "student", name: str = "Test User", email: str = None) -> User:
        user = User(
            full_name=name,
            email=email or f"{name.lower().replace(' ', '.')}.{role}@school.test",
            password_hash="not-a-bcrypt-hash",
            role=role,
            status="ACTIVE",
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture()
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Bearer headers for a user, signed with the test secret."""

    def _headers(user: User) -> Dict[str, str]:
        token = access_token_for(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
async def teacher(make_user) -> User:
    return await make_user("teacher", "Encik Rosli")


@pytest.fixture()
async def student(make_user) -> User:
    return await make_user("student", "Ahmad Razak")
