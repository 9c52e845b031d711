import os
import tempfile

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="smartleave-logs-"))

import pytest
import uuid
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

import smartleave.models  # noqa: F401
from smartleave.core.database import Base, get_db
from smartleave.core.security import create_access_token
from smartleave.main import app
from smartleave.models.leave_type import LeaveType
from smartleave.models.profile import Profile, ProfileRole
from smartleave.services.profile_service import create_profile


@pytest.fixture
async def engine(tmp_path):
    """Fresh file-backed SQLite database per test; each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'smartleave.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 10},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncClient:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def leave_type(db: AsyncSession) -> LeaveType:
    leave_type = LeaveType(id=uuid.uuid4(), name="Annual Leave", max_days=20)
    db.add(leave_type)
    await db.commit()
    await db.refresh(leave_type)
    return leave_type


@pytest.fixture
async def employee(db: AsyncSession) -> Profile:
    """Employee with 10 days of leave."""
    return await create_profile(db, "Test Employee", role=ProfileRole.EMPLOYEE, leave_balance=10)


@pytest.fixture
async def other_employee(db: AsyncSession) -> Profile:
    return await create_profile(db, "Other Employee", role=ProfileRole.EMPLOYEE, leave_balance=10)


@pytest.fixture
async def manager(db: AsyncSession) -> Profile:
    return await create_profile(db, "Test Manager", role=ProfileRole.MANAGER, leave_balance=30)


@pytest.fixture
def auth_headers():
    """Bearer header for a profile, as the external auth service would issue it."""
    def _headers(profile: Profile) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': str(profile.id)})}"}
    return _headers
