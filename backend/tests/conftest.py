import os

# Must be set before incidenthub.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from incidenthub.core.database import Base, get_db
from incidenthub.core.security import create_access_token, get_password_hash
from incidenthub.main import app
from incidenthub.models.user import Role, User
from incidenthub.services import incident_service

PASSWORD = "s3cret-pass"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock(monkeypatch):
    """Deterministic clock for incident timestamps: each call is one second later."""
    state = {"now": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)}

    def tick():
        state["now"] += timedelta(seconds=1)
        return state["now"]

    monkeypatch.setattr(incident_service, "utcnow", tick)
    return state


async def _make_user(db, username, role=Role.USER, enabled=True):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password=get_password_hash(PASSWORD),
        role=role,
        enabled=enabled,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def alice(db):
    return await _make_user(db, "alice")


@pytest.fixture
async def bob(db):
    return await _make_user(db, "bob")


@pytest.fixture
async def admin(db):
    return await _make_user(db, "admin", role=Role.ADMIN)


@pytest.fixture
def make_user(db):
    async def factory(username, **kwargs):
        return await _make_user(db, username, **kwargs)
    return factory


def _auth_headers(user):
    token = create_access_token({"sub": user.username, "role": user.role.value, "user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return _auth_headers


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
