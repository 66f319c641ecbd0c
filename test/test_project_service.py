"""
Tests for ProjectService: tenant isolation, creator-or-admin edits, quota
and cascade delete.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from taskhub.core.audit import AuditRecorder
from taskhub.exceptions import (
    AccessDeniedError,
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from taskhub.models import AuditLog, Project, Task
from taskhub.schemas.project import ProjectCreate, ProjectUpdate
from taskhub.services.project_service import ProjectService


@pytest.fixture
def service(db, audit):
    return ProjectService(db, audit)


class TestCreateProject:
    @pytest.mark.asyncio
    async def test_create_and_get_round_trip(self, service, admin_x, principal_for):
        principal = principal_for(admin_x)
        created = await service.create(principal, ProjectCreate(name="Website", description="Relaunch"))

        fetched = await service.get(principal, created.id)
        assert fetched.name == "Website"
        assert fetched.description == "Relaunch"
        assert fetched.status == "active"
        assert fetched.tenant_id == admin_x.tenant_id
        assert fetched.created_by == admin_x.id
        assert fetched.creator.full_name == "Alice Admin"
        assert fetched.task_count == 0

    @pytest.mark.asyncio
    async def test_plain_user_can_create(self, service, user_x, principal_for):
        created = await service.create(principal_for(user_x), ProjectCreate(name="Mine"))
        assert created.created_by == user_x.id

    @pytest.mark.asyncio
    async def test_scoped_user_cannot_target_other_tenant(self, service, user_x, tenant_y, principal_for):
        with pytest.raises(ValidationError):
            await service.create(principal_for(user_x), ProjectCreate(name="Sneaky", tenant_id=tenant_y.id))

    @pytest.mark.asyncio
    async def test_super_admin_must_name_tenant(self, service, super_admin, principal_for):
        with pytest.raises(ValidationError) as exc_info:
            await service.create(principal_for(super_admin), ProjectCreate(name="Orphan"))
        assert exc_info.value.details["field"] == "tenant_id"

    @pytest.mark.asyncio
    async def test_quota_blocks_user_but_not_super_admin(
        self, service, make_tenant, make_user, make_project, super_admin, principal_for
    ):
        tenant = await make_tenant("busy", max_projects=15)
        member = await make_user(tenant, "m@busy.io")
        for i in range(15):
            await make_project(tenant, member, name=f"P{i}")

        with pytest.raises(QuotaExceededError):
            await service.create(principal_for(member), ProjectCreate(name="One too many"))

        created = await service.create(
            principal_for(super_admin), ProjectCreate(name="Granted", tenant_id=tenant.id)
        )
        assert created.tenant_id == tenant.id

    @pytest.mark.asyncio
    async def test_create_is_audited(self, service, db, admin_x, principal_for):
        created = await service.create(principal_for(admin_x), ProjectCreate(name="Audited"), origin="10.1.1.1")

        result = await db.execute(select(AuditLog).where(AuditLog.resource_id == created.id))
        entry = result.scalars().one()
        assert entry.action == "CREATE_PROJECT"
        assert entry.tenant_id == admin_x.tenant_id
        assert entry.actor_user_id == admin_x.id
        assert entry.origin_address == "10.1.1.1"


class TestReadProject:
    @pytest.mark.asyncio
    async def test_other_tenant_sees_not_found(self, service, admin_x, user_y, principal_for):
        project = await service.create(principal_for(admin_x), ProjectCreate(name="Secret"))
        with pytest.raises(NotFoundError):
            await service.get(principal_for(user_y), project.id)

    @pytest.mark.asyncio
    async def test_super_admin_sees_everything(self, service, admin_x, super_admin, principal_for):
        project = await service.create(principal_for(admin_x), ProjectCreate(name="Visible"))
        fetched = await service.get(principal_for(super_admin), project.id)
        assert fetched.id == project.id

    @pytest.mark.asyncio
    async def test_get_is_repeatable(self, service, admin_x, user_x, tenant_x, make_project, make_task, principal_for):
        project = await make_project(tenant_x, admin_x, name="Stable")
        await make_task(project, admin_x)
        principal = principal_for(user_x)

        first = await service.get(principal, project.id)
        second = await service.get(principal, project.id)
        assert first.model_dump() == second.model_dump()
        assert first.task_count == 1

    @pytest.mark.asyncio
    async def test_reads_are_not_audited(self, service, db, admin_x, tenant_x, make_project, principal_for):
        project = await make_project(tenant_x, admin_x)
        principal = principal_for(admin_x)
        count_entries = select(func.count()).select_from(AuditLog)
        before = (await db.execute(count_entries)).scalar()

        await service.get(principal, project.id)
        await service.list(principal)

        assert (await db.execute(count_entries)).scalar() == before

    @pytest.mark.asyncio
    async def test_list_is_tenant_scoped(self, service, admin_x, admin_y, principal_for):
        await service.create(principal_for(admin_x), ProjectCreate(name="X1"))
        await service.create(principal_for(admin_x), ProjectCreate(name="X2"))
        await service.create(principal_for(admin_y), ProjectCreate(name="Y1"))

        page = await service.list(principal_for(admin_x))
        assert {p.name for p in page.items} == {"X1", "X2"}
        assert all(p.tenant_id == admin_x.tenant_id for p in page.items)
        assert page.pagination.total_items == 2

    @pytest.mark.asyncio
    async def test_list_unrestricted_for_super_admin(self, service, admin_x, admin_y, super_admin, principal_for):
        await service.create(principal_for(admin_x), ProjectCreate(name="X1"))
        await service.create(principal_for(admin_y), ProjectCreate(name="Y1"))

        page = await service.list(principal_for(super_admin))
        assert page.pagination.total_items == 2

    @pytest.mark.asyncio
    async def test_list_filters(self, service, admin_x, principal_for):
        principal = principal_for(admin_x)
        await service.create(principal, ProjectCreate(name="Website redesign"))
        await service.create(principal, ProjectCreate(name="Mobile app", status="archived"))

        by_search = await service.list(principal, search="website")
        assert [p.name for p in by_search.items] == ["Website redesign"]

        by_status = await service.list(principal, status="archived")
        assert [p.name for p in by_status.items] == ["Mobile app"]

    @pytest.mark.asyncio
    async def test_list_default_page_size(self, service, admin_x, principal_for):
        page = await service.list(principal_for(admin_x))
        assert page.pagination.limit == 10

    @pytest.mark.asyncio
    async def test_task_counts(self, service, admin_x, make_project, make_task, tenant_x, principal_for):
        project = await make_project(tenant_x, admin_x)
        await make_task(project, admin_x, status="completed")
        await make_task(project, admin_x)

        fetched = await service.get(principal_for(admin_x), project.id)
        assert fetched.task_count == 2
        assert fetched.completed_task_count == 1


class TestUpdateProject:
    @pytest.mark.asyncio
    async def test_non_creator_user_is_forbidden(self, service, admin_x, user_x, principal_for):
        project = await service.create(principal_for(admin_x), ProjectCreate(name="Admin's"))
        await service.get(principal_for(admin_x), project.id)

        with pytest.raises(ForbiddenError):
            await service.update(principal_for(user_x), project.id, ProjectUpdate(name="Hijacked"))

    @pytest.mark.asyncio
    async def test_creator_and_admin_may_update(self, service, admin_x, user_x, principal_for):
        project = await service.create(principal_for(user_x), ProjectCreate(name="Bob's"))

        updated = await service.update(principal_for(user_x), project.id, ProjectUpdate(name="Bob's v2"))
        assert updated.name == "Bob's v2"

        updated = await service.update(principal_for(admin_x), project.id, ProjectUpdate(status="completed"))
        assert updated.status == "completed"

    @pytest.mark.asyncio
    async def test_other_tenant_is_denied(self, service, admin_x, admin_y, principal_for):
        project = await service.create(principal_for(admin_x), ProjectCreate(name="X"))
        with pytest.raises(AccessDeniedError):
            await service.update(principal_for(admin_y), project.id, ProjectUpdate(name="Y"))

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, service, admin_x, principal_for):
        principal = principal_for(admin_x)
        project = await service.create(principal, ProjectCreate(name="Keep", description="Original"))

        updated = await service.update(principal, project.id, ProjectUpdate(status="archived"))
        assert updated.name == "Keep"
        assert updated.description == "Original"
        assert updated.status == "archived"

    @pytest.mark.asyncio
    async def test_repeated_update_is_idempotent(self, service, admin_x, principal_for):
        principal = principal_for(admin_x)
        project = await service.create(principal, ProjectCreate(name="Same"))

        first = await service.update(principal, project.id, ProjectUpdate(name="Renamed"))
        second = await service.update(principal, project.id, ProjectUpdate(name="Renamed"))
        assert first.model_dump(exclude={"updated_at"}) == second.model_dump(exclude={"updated_at"})

    @pytest.mark.asyncio
    async def test_name_cannot_be_nulled(self, service, admin_x, principal_for):
        principal = principal_for(admin_x)
        project = await service.create(principal, ProjectCreate(name="Named"))
        with pytest.raises(ValidationError):
            await service.update(principal, project.id, ProjectUpdate(name=None))

    @pytest.mark.asyncio
    async def test_missing_project(self, service, admin_x, principal_for):
        with pytest.raises(NotFoundError):
            await service.update(principal_for(admin_x), "missing", ProjectUpdate(name="x"))


class TestDeleteProject:
    @pytest.mark.asyncio
    async def test_delete_removes_tasks(self, service, db, admin_x, tenant_x, make_project, make_task, principal_for):
        project = await make_project(tenant_x, admin_x)
        other = await make_project(tenant_x, admin_x, name="Other")
        await make_task(project, admin_x)
        await make_task(project, admin_x)
        await make_task(other, admin_x)

        await service.delete(principal_for(admin_x), project.id)

        assert await db.get(Project, project.id) is None
        remaining = await db.execute(select(func.count(Task.id)))
        assert remaining.scalar() == 1
        with pytest.raises(NotFoundError):
            await service.get(principal_for(admin_x), project.id)

    @pytest.mark.asyncio
    async def test_non_creator_user_cannot_delete(self, service, admin_x, user_x, principal_for):
        project = await service.create(principal_for(admin_x), ProjectCreate(name="Admin's"))
        with pytest.raises(ForbiddenError):
            await service.delete(principal_for(user_x), project.id)

    @pytest.mark.asyncio
    async def test_creator_can_delete(self, service, user_x, principal_for):
        project = await service.create(principal_for(user_x), ProjectCreate(name="Bob's"))
        await service.delete(principal_for(user_x), project.id)
        with pytest.raises(NotFoundError):
            await service.get(principal_for(user_x), project.id)

    @pytest.mark.asyncio
    async def test_other_tenant_admin_denied(self, service, admin_x, admin_y, principal_for):
        project = await service.create(principal_for(admin_x), ProjectCreate(name="X"))
        with pytest.raises(AccessDeniedError):
            await service.delete(principal_for(admin_y), project.id)


class TestAuditOutage:
    @pytest.fixture
    def broken_service(self, db):
        return ProjectService(db, AuditRecorder(MagicMock(side_effect=RuntimeError("audit store down"))))

    @pytest.mark.asyncio
    async def test_mutations_succeed_without_audit(self, broken_service, db, admin_x, principal_for):
        principal = principal_for(admin_x)

        created = await broken_service.create(principal, ProjectCreate(name="Resilient"))
        updated = await broken_service.update(principal, created.id, ProjectUpdate(name="Still here"))
        assert updated.name == "Still here"

        await broken_service.delete(principal, created.id)
        assert await db.get(Project, created.id) is None
        assert (await db.execute(select(func.count()).select_from(AuditLog))).scalar() == 0
