"""
Quota Guard.

Blocks creation of users and projects once a tenant reaches the cap set by
its subscription. The tenant row is read with SELECT ... FOR UPDATE inside
the caller's transaction, so on PostgreSQL concurrent creates for the same
tenant queue behind each other until the insert commits. SQLite ignores the
lock; there the count-then-insert can be overrun by concurrent creates.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.permissions import ResourceKind
from taskhub.core.principal import Principal
from taskhub.exceptions import NotFoundError, QuotaExceededError, ValidationError
from taskhub.models.project import Project
from taskhub.models.tenant import Tenant
from taskhub.models.user import User

logger = logging.getLogger(__name__)

# resource kind -> (counted model, Tenant attribute holding the cap)
_QUOTAS = {
    ResourceKind.USER: (User, "max_users"),
    ResourceKind.PROJECT: (Project, "max_projects"),
}


class QuotaGuard:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def count(self, tenant_id: str, kind: ResourceKind) -> int:
        model, _ = _QUOTAS[kind]
        result = await self.db.execute(select(func.count(model.id)).where(model.tenant_id == tenant_id))
        return result.scalar() or 0

    async def check_create_quota(self, principal: Principal, tenant_id: str, kind: ResourceKind) -> None:
        """
        Raise QuotaExceededError if *tenant_id* already holds its cap of *kind*.

        super_admin principals are never blocked.
        """
        if principal.is_super_admin:
            return
        if kind not in _QUOTAS:
            raise ValidationError(f"No quota is defined for {kind.value} resources")

        # Refresh the identity-mapped tenant so a limit changed since it was loaded applies
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id).with_for_update().execution_options(populate_existing=True)
        )
        tenant = result.scalars().first()
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)

        _, limit_attr = _QUOTAS[kind]
        limit = getattr(tenant, limit_attr)
        current = await self.count(tenant_id, kind)
        if current >= limit:
            logger.info("Quota reached: tenant=%s kind=%s count=%d limit=%d", tenant_id, kind.value, current, limit)
            raise QuotaExceededError(kind.value, limit)
