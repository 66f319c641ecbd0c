"""
Tenant Scope Resolver.

Decides which rows a principal may see and whether a known row may be touched.

Reporting rule: when a row is looked up by id and turns out to belong to
another tenant, `ensure_visible` reports NotFound so the lookup does not
reveal that the id exists elsewhere. Update/delete flows that have already
fetched the row use `authorize_tenant_match`, which reports AccessDenied.
"""

import logging

from sqlalchemy import Select

from taskhub.core.principal import Principal, Scoped, TenantScope, UNRESTRICTED
from taskhub.exceptions import AccessDeniedError, NotFoundError

logger = logging.getLogger(__name__)


def resolve_scope(principal: Principal) -> TenantScope:
    """Return the visibility filter for *principal*."""
    if principal.is_super_admin:
        return UNRESTRICTED
    return principal.scope


def apply_scope(statement: Select, model, scope: TenantScope) -> Select:
    """Narrow *statement* to the rows of *model* visible under *scope*."""
    if isinstance(scope, Scoped):
        return statement.where(model.tenant_id == scope.tenant_id)
    return statement


def in_scope(principal: Principal, resource_tenant_id: str | None) -> bool:
    scope = resolve_scope(principal)
    if isinstance(scope, Scoped):
        return resource_tenant_id == scope.tenant_id
    return True


def authorize_tenant_match(principal: Principal, resource_tenant_id: str | None) -> None:
    """Raise AccessDeniedError if a known resource lies outside the principal's tenant."""
    if not in_scope(principal, resource_tenant_id):
        logger.warning(
            "Cross-tenant access denied: user=%s tenant=%s target_tenant=%s",
            principal.user_id,
            principal.tenant_id,
            resource_tenant_id,
        )
        raise AccessDeniedError()


def ensure_visible(principal: Principal, resource, resource_type: str, resource_id) -> None:
    """Raise NotFoundError if *resource* is missing or outside the principal's scope."""
    if resource is None or not in_scope(principal, resource.tenant_id):
        raise NotFoundError(resource_type, resource_id)
