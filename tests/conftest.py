import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.auth import User, get_jwt_strategy
from app.core.database import Base, get_async_session
from app.main import app


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(db, email: str = "ana@example.com", monthly_budget: float = 0.0) -> User:
    user = User(
        email=email,
        hashed_password="not-a-real-hash",
        full_name="Ana",
        currency="USD",
        monthly_budget=monthly_budget,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def user(db) -> User:
    return await make_user(db, monthly_budget=500.0)


@pytest.fixture
async def other_user(db) -> User:
    return await make_user(db, email="ben@example.com")


@pytest.fixture
async def anon_client(session_factory):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def bearer(user: User) -> dict:
    token = await get_jwt_strategy().write_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(anon_client, user):
    anon_client.headers.update(await bearer(user))
    return anon_client


@pytest.fixture
def headers_for():
    return bearer
