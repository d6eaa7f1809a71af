import os

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from auth.application.services import register_user
from auth.infrastructure.user_repository import DbUserRepository
from main import app
from shared.dependencies import get_db, get_share_notifier
from shared.infrastructure.database import Base

import auth.infrastructure.orm_models  # noqa: F401
import documents.infrastructure.models  # noqa: F401


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    async def share_created(self, document, target, shared_by, permission):
        self.sent.append(
            {
                "document_id": document.id,
                "target": target.username,
                "shared_by": shared_by.username if shared_by else None,
                "permission": permission,
            }
        )


@pytest.fixture
def database_url(tmp_path):
    return os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
async def test_engine(database_url):
    engine = create_async_engine(database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    async def _make(username: str):
        return await register_user(
            DbUserRepository(db),
            username=username,
            email=f"{username}@example.com",
            first_name=username.title(),
            last_name="Tester",
            password="secret123",
        )

    return _make


@pytest.fixture
def notifier():
    return RecordingNotifier()


async def create_user_and_get_headers(client: AsyncClient, suffix: str = "") -> dict:
    """Register a user and return auth headers."""
    await client.post(
        "/api/auth/register",
        json={
            "username": f"testuser{suffix}",
            "email": f"test{suffix}@example.com",
            "first_name": "Test",
            "last_name": "User",
            "password": "secret123",
        },
    )
    resp = await client.post(
        "/api/auth/login",
        json={"email": f"test{suffix}@example.com", "password": "secret123"},
    )
    token = resp.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(client) -> dict:
    return await create_user_and_get_headers(client)


@pytest.fixture
async def client(session_factory, notifier):
    async def _override_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_share_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
