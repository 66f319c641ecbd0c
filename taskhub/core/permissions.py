"""
Permission Evaluator.

One fixed allow-list over (role, resource kind, action). Tenant boundaries are
not decided here; the scope resolver handles those. A triple missing from
the matrix is denied.

Rules:
  ALLOW  the role may always perform the action
  OWNER  only when the principal owns the target row (creator, assignee,
         or the user row itself)
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Collection

from taskhub.constants.roles import RoleName
from taskhub.core.principal import Principal
from taskhub.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"


class ResourceKind(str, enum.Enum):
    TENANT = "tenant"
    USER = "user"
    PROJECT = "project"
    TASK = "task"


class Rule(enum.Enum):
    ALLOW = "allow"
    OWNER = "owner"


_ALL_ACTIONS = tuple(Action)

PERMISSION_MATRIX: dict[RoleName, dict[ResourceKind, dict[Action, Rule]]] = {
    RoleName.SUPER_ADMIN: {kind: dict.fromkeys(_ALL_ACTIONS, Rule.ALLOW) for kind in ResourceKind},
    RoleName.TENANT_ADMIN: {
        ResourceKind.TENANT: {
            Action.READ: Rule.ALLOW,
            Action.UPDATE: Rule.ALLOW,
        },
        ResourceKind.USER: dict.fromkeys(_ALL_ACTIONS, Rule.ALLOW),
        ResourceKind.PROJECT: dict.fromkeys(_ALL_ACTIONS, Rule.ALLOW),
        ResourceKind.TASK: dict.fromkeys(_ALL_ACTIONS, Rule.ALLOW),
    },
    RoleName.USER: {
        ResourceKind.USER: {
            Action.READ: Rule.ALLOW,
            Action.LIST: Rule.ALLOW,
            Action.UPDATE: Rule.OWNER,
        },
        ResourceKind.PROJECT: {
            Action.CREATE: Rule.ALLOW,
            Action.READ: Rule.ALLOW,
            Action.LIST: Rule.ALLOW,
            Action.UPDATE: Rule.OWNER,
            Action.DELETE: Rule.OWNER,
        },
        ResourceKind.TASK: {
            Action.CREATE: Rule.ALLOW,
            Action.READ: Rule.ALLOW,
            Action.LIST: Rule.ALLOW,
            Action.UPDATE: Rule.OWNER,
            Action.DELETE: Rule.OWNER,
        },
    },
}


def _owns(principal: Principal, owner_user_id: str | Collection[str | None] | None) -> bool:
    if owner_user_id is None:
        return False
    if isinstance(owner_user_id, str):
        return owner_user_id == principal.user_id
    return principal.user_id in owner_user_id


def can(
    principal: Principal,
    action: Action,
    kind: ResourceKind,
    owner_user_id: str | Collection[str | None] | None = None,
) -> bool:
    """
    Return True if *principal*'s role permits *action* on *kind*.

    *owner_user_id* is the id (or ids) of the user(s) owning the target row;
    it only matters for OWNER rules.
    """
    rule = PERMISSION_MATRIX.get(principal.role, {}).get(kind, {}).get(action)
    if rule is Rule.ALLOW:
        return True
    if rule is Rule.OWNER:
        return _owns(principal, owner_user_id)
    return False


def require(
    principal: Principal,
    action: Action,
    kind: ResourceKind,
    owner_user_id: str | Collection[str | None] | None = None,
    message: str | None = None,
) -> None:
    """Raise ForbiddenError unless `can(...)` allows the action."""
    if can(principal, action, kind, owner_user_id):
        return
    logger.info(
        "Permission denied: user=%s role=%s action=%s kind=%s",
        principal.user_id,
        principal.role.value,
        action.value,
        kind.value,
    )
    raise ForbiddenError(
        message or f"Role '{principal.role.value}' may not {action.value} {kind.value} resources",
        action=f"{action.value}_{kind.value}",
    )
