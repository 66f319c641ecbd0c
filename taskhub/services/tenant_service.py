"""
Tenant Service

super_admin creates, lists and fully edits tenants. A tenant_admin may read
its own tenant and rename it; plan, limits and status stay with super_admin.
Tenants are never hard-deleted: suspension goes through `status`.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from taskhub.config import settings
from taskhub.constants.plans import get_plan_limits
from taskhub.core.permissions import Action, ResourceKind, require
from taskhub.core.principal import Principal
from taskhub.core.scope import authorize_tenant_match, in_scope
from taskhub.exceptions import ConflictError, ForbiddenError, NotFoundError
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.schemas.tenant import TenantCreate, TenantDetail, TenantResponse, TenantStats, TenantUpdate
from taskhub.services.base import BaseService, apply_changes
from taskhub.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

# What a tenant_admin may change on its own tenant
TENANT_ADMIN_FIELDS = frozenset({"name"})


async def get_tenant_by_subdomain(subdomain: str, db) -> Tenant | None:
    """Return a Tenant by subdomain, or None if not found."""
    result = await db.execute(select(Tenant).where(Tenant.subdomain == subdomain))
    return result.scalars().first()


class TenantService(BaseService):
    async def create(self, principal: Principal, payload: TenantCreate, origin: str | None = None) -> TenantResponse:
        require(principal, Action.CREATE, ResourceKind.TENANT)
        if await get_tenant_by_subdomain(payload.subdomain, self.db) is not None:
            raise ConflictError("Tenant", "subdomain", payload.subdomain)

        limits = get_plan_limits(payload.subscription_plan)
        tenant = Tenant(
            name=payload.name,
            subdomain=payload.subdomain,
            status=payload.status,
            subscription_plan=payload.subscription_plan,
            max_users=payload.max_users if payload.max_users is not None else limits.max_users,
            max_projects=payload.max_projects if payload.max_projects is not None else limits.max_projects,
        )
        self.db.add(tenant)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("Tenant", "subdomain", payload.subdomain) from e
        logger.info("Tenant created: id=%s subdomain=%s", tenant.id, tenant.subdomain)

        await self.audit.record(tenant.id, principal.user_id, "CREATE_TENANT", "tenant", tenant.id, origin)
        return TenantResponse.model_validate(tenant)

    async def list(
        self,
        principal: Principal,
        *,
        status: str | None = None,
        subscription_plan: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Page:
        """List every tenant in creation order (super_admin only)."""
        require(principal, Action.LIST, ResourceKind.TENANT)
        statement = select(Tenant)
        if status:
            statement = statement.where(Tenant.status == status)
        if subscription_plan:
            statement = statement.where(Tenant.subscription_plan == subscription_plan)
        if search:
            statement = statement.where(Tenant.name.icontains(search, autoescape=True))

        result = await paginate(
            self.db,
            statement,
            order_by=[Tenant.created_at, Tenant.id],
            page=page,
            limit=limit or settings.default_page_size,
        )
        result.items = [TenantResponse.model_validate(t) for t in result.items]
        return result

    async def get(self, principal: Principal, tenant_id: str) -> TenantDetail:
        require(principal, Action.READ, ResourceKind.TENANT)
        tenant = await self.db.get(Tenant, tenant_id)
        if tenant is None or not in_scope(principal, tenant.id):
            raise NotFoundError("Tenant", tenant_id)
        stats = await self.stats(tenant.id)
        return TenantDetail(**TenantResponse.model_validate(tenant).model_dump(), stats=stats)

    async def update(
        self,
        principal: Principal,
        tenant_id: str,
        payload: TenantUpdate,
        origin: str | None = None,
    ) -> TenantResponse:
        tenant = await self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)
        authorize_tenant_match(principal, tenant.id)
        require(principal, Action.UPDATE, ResourceKind.TENANT)

        changes = payload.model_dump(exclude_unset=True)
        if not principal.is_super_admin:
            restricted = sorted(set(changes) - TENANT_ADMIN_FIELDS)
            if restricted:
                raise ForbiddenError(f"Only super_admin can change: {', '.join(restricted)}")

        plan = changes.get("subscription_plan")
        if plan and plan != tenant.subscription_plan:
            limits = get_plan_limits(plan)
            changes.setdefault("max_users", limits.max_users)
            changes.setdefault("max_projects", limits.max_projects)

        apply_changes(
            tenant,
            changes,
            required=("name", "status", "subscription_plan", "max_users", "max_projects"),
        )
        await self.db.commit()
        logger.info("Tenant updated: id=%s fields=%s", tenant.id, sorted(changes))

        await self.audit.record(tenant.id, principal.user_id, "UPDATE_TENANT", "tenant", tenant.id, origin)
        return TenantResponse.model_validate(tenant)

    async def stats(self, tenant_id: str) -> TenantStats:
        totals = {}
        for key, model in (("total_users", User), ("total_projects", Project), ("total_tasks", Task)):
            result = await self.db.execute(select(func.count(model.id)).where(model.tenant_id == tenant_id))
            totals[key] = result.scalar() or 0
        return TenantStats(**totals)
