"""
Tests for TenantService
"""

import pytest

from taskhub.constants.plans import SubscriptionPlan
from taskhub.exceptions import AccessDeniedError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from taskhub.schemas.tenant import TenantCreate, TenantUpdate
from taskhub.services.tenant_service import TenantService, get_tenant_by_subdomain


@pytest.fixture
def service(db, audit):
    return TenantService(db, audit)


class TestCreateTenant:
    @pytest.mark.asyncio
    async def test_plan_limits_applied(self, service, super_admin, principal_for):
        tenant = await service.create(
            principal_for(super_admin), TenantCreate(name="Initech", subdomain="initech", subscription_plan="pro")
        )
        assert tenant.subscription_plan == "pro"
        assert tenant.max_users == 25
        assert tenant.max_projects == 15
        assert tenant.status == "active"

    @pytest.mark.asyncio
    async def test_explicit_limits_win(self, service, super_admin, principal_for):
        tenant = await service.create(
            principal_for(super_admin), TenantCreate(name="Hooli", subdomain="hooli", max_projects=40)
        )
        assert tenant.max_projects == 40
        assert tenant.max_users == 5

    @pytest.mark.asyncio
    async def test_duplicate_subdomain(self, service, super_admin, tenant_x, principal_for):
        with pytest.raises(ConflictError):
            await service.create(principal_for(super_admin), TenantCreate(name="Acme 2", subdomain="acme"))

    @pytest.mark.asyncio
    async def test_only_super_admin_creates(self, service, admin_x, principal_for):
        with pytest.raises(ForbiddenError):
            await service.create(principal_for(admin_x), TenantCreate(name="Rogue", subdomain="rogue"))


class TestReadTenant:
    @pytest.mark.asyncio
    async def test_admin_reads_own_tenant_with_stats(
        self, service, admin_x, user_x, tenant_x, make_project, make_task, principal_for
    ):
        project = await make_project(tenant_x, admin_x)
        await make_task(project, admin_x)

        detail = await service.get(principal_for(admin_x), tenant_x.id)
        assert detail.subdomain == "acme"
        assert detail.stats.total_users == 2
        assert detail.stats.total_projects == 1
        assert detail.stats.total_tasks == 1

    @pytest.mark.asyncio
    async def test_admin_cannot_read_other_tenant(self, service, admin_x, tenant_y, principal_for):
        with pytest.raises(NotFoundError):
            await service.get(principal_for(admin_x), tenant_y.id)

    @pytest.mark.asyncio
    async def test_plain_user_has_no_tenant_access(self, service, user_x, tenant_x, principal_for):
        with pytest.raises(ForbiddenError):
            await service.get(principal_for(user_x), tenant_x.id)

    @pytest.mark.asyncio
    async def test_list_and_filter(self, service, super_admin, make_tenant, principal_for):
        await make_tenant("one")
        await make_tenant("two", status="suspended")
        await make_tenant("three", plan=SubscriptionPlan.PRO)

        principal = principal_for(super_admin)
        page = await service.list(principal)
        assert [t.subdomain for t in page.items] == ["one", "two", "three"]

        suspended = await service.list(principal, status="suspended")
        assert [t.subdomain for t in suspended.items] == ["two"]

        pro = await service.list(principal, subscription_plan="pro")
        assert [t.subdomain for t in pro.items] == ["three"]

    @pytest.mark.asyncio
    async def test_tenant_admin_cannot_list(self, service, admin_x, principal_for):
        with pytest.raises(ForbiddenError):
            await service.list(principal_for(admin_x))

    @pytest.mark.asyncio
    async def test_get_by_subdomain(self, db, tenant_x):
        assert (await get_tenant_by_subdomain("acme", db)).id == tenant_x.id
        assert await get_tenant_by_subdomain("nope", db) is None


class TestUpdateTenant:
    @pytest.mark.asyncio
    async def test_admin_renames_own_tenant(self, service, admin_x, tenant_x, principal_for):
        updated = await service.update(principal_for(admin_x), tenant_x.id, TenantUpdate(name="Acme Corp"))
        assert updated.name == "Acme Corp"
        assert updated.subdomain == "acme"

    @pytest.mark.asyncio
    async def test_admin_cannot_change_plan(self, service, admin_x, tenant_x, principal_for):
        with pytest.raises(ForbiddenError):
            await service.update(principal_for(admin_x), tenant_x.id, TenantUpdate(subscription_plan="enterprise"))

    @pytest.mark.asyncio
    async def test_admin_cannot_touch_other_tenant(self, service, admin_x, tenant_y, principal_for):
        with pytest.raises(AccessDeniedError):
            await service.update(principal_for(admin_x), tenant_y.id, TenantUpdate(name="Mine"))

    @pytest.mark.asyncio
    async def test_plan_change_resets_limits(self, service, super_admin, tenant_x, principal_for):
        updated = await service.update(
            principal_for(super_admin), tenant_x.id, TenantUpdate(subscription_plan="enterprise")
        )
        assert updated.max_users == 100
        assert updated.max_projects == 50

    @pytest.mark.asyncio
    async def test_super_admin_suspends(self, service, super_admin, tenant_x, principal_for):
        updated = await service.update(principal_for(super_admin), tenant_x.id, TenantUpdate(status="suspended"))
        assert updated.status == "suspended"

    @pytest.mark.asyncio
    async def test_required_field_cannot_be_nulled(self, service, super_admin, tenant_x, principal_for):
        with pytest.raises(ValidationError):
            await service.update(principal_for(super_admin), tenant_x.id, TenantUpdate(name=None))

    @pytest.mark.asyncio
    async def test_missing_tenant(self, service, super_admin, principal_for):
        with pytest.raises(NotFoundError):
            await service.update(principal_for(super_admin), "missing", TenantUpdate(name="x"))
