"""Shared fixtures: in-memory SQLite, an in-memory object store and an httpx client over the ASGI app."""
import os
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("MINIO_ENDPOINT", "localhost:9000")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gs_portfolio.core.database import Base, get_db
from gs_portfolio.core.security import hash_password
from gs_portfolio.core.storage import BlobStorage, get_storage
from gs_portfolio.main import app
from gs_portfolio.models import AdminUser
from tests.utils import ADMIN_PASSWORD, ADMIN_USERNAME, TEST_BUCKET, FakeMinio


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_minio():
    client = FakeMinio()
    client.make_bucket(TEST_BUCKET)
    return client


@pytest.fixture
def storage(fake_minio):
    return BlobStorage(fake_minio, TEST_BUCKET)


@pytest.fixture
async def admin_user(db_session) -> AdminUser:
    user = AdminUser(
        username=ADMIN_USERNAME,
        email="admin@example.com",
        password_hash=hash_password(ADMIN_PASSWORD),
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def override_dependencies(session_factory, storage):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client(override_dependencies) -> AsyncGenerator[httpx.AsyncClient, None]:
    # https so the Secure session cookie is sent back
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="https://test") as ac:
        yield ac


@pytest.fixture
async def admin_client(client, admin_user) -> httpx.AsyncClient:
    resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return client
