"""
Pytest configuration and fixtures for TaskHub tests

Every test gets its own in-memory SQLite database. StaticPool keeps the one
connection alive so the request session and the audit session see the same
tables.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from taskhub.auth import create_access_token, hash_password
from taskhub.constants.plans import PLAN_LIMITS, SubscriptionPlan
from taskhub.constants.roles import RoleName
from taskhub.core.audit import AuditRecorder
from taskhub.core.principal import Principal
from taskhub.database import Database
from taskhub.models import Project, Task, Tenant, User

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "password123"

# bcrypt is slow on purpose; hash the shared test password once
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database = Database(engine=engine)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def db(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def audit(database: Database) -> AuditRecorder:
    return AuditRecorder(database.session_factory)


# ── factories ──────────────────────────────────────────────────────────────────


@pytest.fixture
def make_tenant(db: AsyncSession):
    async def _make_tenant(
        subdomain: str,
        name: str | None = None,
        plan: SubscriptionPlan = SubscriptionPlan.FREE,
        status: str = "active",
        **overrides,
    ) -> Tenant:
        limits = PLAN_LIMITS[plan]
        tenant = Tenant(
            name=name or subdomain.title(),
            subdomain=subdomain,
            status=status,
            subscription_plan=plan.value,
            max_users=overrides.pop("max_users", limits.max_users),
            max_projects=overrides.pop("max_projects", limits.max_projects),
            **overrides,
        )
        db.add(tenant)
        await db.commit()
        return tenant

    return _make_tenant


@pytest.fixture
def make_user(db: AsyncSession):
    async def _make_user(
        tenant: Tenant | None,
        email: str,
        role: RoleName = RoleName.USER,
        full_name: str | None = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            tenant_id=tenant.id if tenant else None,
            email=email,
            password_hash=TEST_PASSWORD_HASH,
            full_name=full_name or email.split("@")[0].title(),
            role=RoleName(role).value,
            is_active=is_active,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_project(db: AsyncSession):
    async def _make_project(tenant: Tenant, creator: User | None, name: str = "Project", **fields) -> Project:
        project = Project(
            tenant_id=tenant.id,
            name=name,
            created_by=creator.id if creator else None,
            **fields,
        )
        db.add(project)
        await db.commit()
        return project

    return _make_project


@pytest.fixture
def make_task(db: AsyncSession):
    async def _make_task(project: Project, creator: User | None, title: str = "Task", **fields) -> Task:
        task = Task(
            tenant_id=project.tenant_id,
            project_id=project.id,
            title=title,
            created_by=creator.id if creator else None,
            **fields,
        )
        db.add(task)
        await db.commit()
        return task

    return _make_task


# ── a standard two-tenant world ───────────────────────────────────────────────


@pytest.fixture
async def tenant_x(make_tenant) -> Tenant:
    return await make_tenant("acme", name="Acme")


@pytest.fixture
async def tenant_y(make_tenant) -> Tenant:
    return await make_tenant("globex", name="Globex")


@pytest.fixture
async def super_admin(make_user) -> User:
    return await make_user(None, "root@taskhub.io", role=RoleName.SUPER_ADMIN, full_name="Root")


@pytest.fixture
async def admin_x(make_user, tenant_x) -> User:
    return await make_user(tenant_x, "admin@acme.com", role=RoleName.TENANT_ADMIN, full_name="Alice Admin")


@pytest.fixture
async def user_x(make_user, tenant_x) -> User:
    return await make_user(tenant_x, "bob@acme.com", full_name="Bob")


@pytest.fixture
async def other_user_x(make_user, tenant_x) -> User:
    return await make_user(tenant_x, "carol@acme.com", full_name="Carol")


@pytest.fixture
async def admin_y(make_user, tenant_y) -> User:
    return await make_user(tenant_y, "admin@globex.com", role=RoleName.TENANT_ADMIN, full_name="Gina Admin")


@pytest.fixture
async def user_y(make_user, tenant_y) -> User:
    return await make_user(tenant_y, "dave@globex.com", full_name="Dave")


def principal_of(user: User) -> Principal:
    return Principal.from_user(user)


@pytest.fixture
def principal_for():
    return principal_of


# ── HTTP ───────────────────────────────────────────────────────────────────────


@pytest.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    from main import create_app

    app = create_app(database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user."""

    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _auth_headers
