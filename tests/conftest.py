# tests/conftest.py: Shared test fixtures
import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-key-for-unit-tests-only-min-32-chars"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["SIGNUP_POLICY"] = "optional_organization"

from taskgate.core.database.base import Base
from taskgate.core.database.engine import get_db
from taskgate.features.organizations.models import Organization
from taskgate.features.permissions.identity import Actor
from taskgate.features.permissions.rbac import Role
from taskgate.features.tasks.models import Task
from taskgate.features.users.auth import create_access_token, hash_password
from taskgate.features.users.models import User
from taskgate.main import app

TEST_PASSWORD = "TestPassword123!"
# bcrypt is slow; hash once for every fixture user
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP test client with the request-scoped session bound to the test database"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def make_org(db, name, parent=None) -> Organization:
    org = Organization(name=name, parent_id=parent.id if parent else None)
    db.add(org)
    await db.commit()
    await db.refresh(org)
    return org


async def make_user(db, email, role, org=None) -> User:
    user = User(
        email=email,
        password_hash=TEST_PASSWORD_HASH,
        role=role,
        organization_id=org.id if org else None,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_task(db, title, org, creator) -> Task:
    task = Task(title=title, organization_id=org.id, created_by_id=creator.id)
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


def actor_for(user: User) -> Actor:
    return Actor.from_user(user)


def get_auth_headers(user: User) -> dict:
    """Generate auth headers for a user"""
    token = create_access_token(user.id, user.email, user.role.value, user.organization_id)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def tenant(db_session):
    """
    Two-level tenant plus an unrelated root:

        root ── child ── (admin, viewer)
          └──── sibling ── (sibling_admin)
        other_root ── (other_owner)
    """
    root = await make_org(db_session, "Root")
    child = await make_org(db_session, "Child", parent=root)
    sibling = await make_org(db_session, "Sibling", parent=root)
    other_root = await make_org(db_session, "Other Root")

    owner = await make_user(db_session, "owner@acme.com", Role.OWNER, root)
    admin = await make_user(db_session, "admin@acme.com", Role.ADMIN, child)
    viewer = await make_user(db_session, "viewer@acme.com", Role.VIEWER, child)
    sibling_admin = await make_user(db_session, "sibling@acme.com", Role.ADMIN, sibling)
    other_owner = await make_user(db_session, "owner@globex.com", Role.OWNER, other_root)

    return {
        "root": root,
        "child": child,
        "sibling": sibling,
        "other_root": other_root,
        "owner": owner,
        "admin": admin,
        "viewer": viewer,
        "sibling_admin": sibling_admin,
        "other_owner": other_owner,
    }
