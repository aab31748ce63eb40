"""Fixtures communes / Shared fixtures.

Chaque test a sa propre base SQLite fichier / Each test gets its own SQLite file database.
"""

import email_validator
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import fleetfuel.models  # noqa: F401
from fleetfuel.api.deps import get_current_user
from fleetfuel.database import Base, enable_sqlite_foreign_keys, get_db
from fleetfuel.main import app
from fleetfuel.models.user import User
from fleetfuel.rate_limit import limiter
from fleetfuel.utils.auth import hash_password

# Fixtures use the reserved .test TLD; email-validator's documented test mode accepts it.
email_validator.TEST_ENVIRONMENT = True


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_sqlite_foreign_keys(engine)
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
async def admin(session_factory):
    async with session_factory() as session:
        user = User(
            username="admin",
            email="admin@fleetfuel.test",
            full_name="Ada Admin",
            hashed_password=hash_password("secret"),
            is_active=True,
            is_superadmin=True,
            roles=[],
        )
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def client(session_factory, admin):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_current_user():
        return admin

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True
