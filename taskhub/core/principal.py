"""
The authenticated actor behind a request.

A Principal never carries a nullable tenant id. Its reach is an explicit
TenantScope: either Scoped to one tenant or Unrestricted (super_admin only).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from taskhub.constants.roles import RoleName

if TYPE_CHECKING:
    from taskhub.models.user import User


@dataclass(frozen=True)
class Scoped:
    tenant_id: str


@dataclass(frozen=True)
class Unrestricted:
    pass


TenantScope = Union[Scoped, Unrestricted]

UNRESTRICTED = Unrestricted()


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: RoleName
    scope: TenantScope

    def __post_init__(self) -> None:
        role = RoleName(self.role)
        object.__setattr__(self, "role", role)
        if role is RoleName.SUPER_ADMIN and not isinstance(self.scope, Unrestricted):
            raise ValueError("super_admin principals must be unrestricted")
        if role is not RoleName.SUPER_ADMIN and not isinstance(self.scope, Scoped):
            raise ValueError(f"{role.value} principals must be scoped to a tenant")

    @classmethod
    def build(cls, user_id: str, role: str, tenant_id: str | None) -> Principal:
        """Build a principal from the flat (user_id, role, tenant_id) triple."""
        if RoleName(role) is RoleName.SUPER_ADMIN:
            return cls(user_id=user_id, role=RoleName.SUPER_ADMIN, scope=UNRESTRICTED)
        if not tenant_id:
            raise ValueError(f"{role} principals require a tenant id")
        return cls(user_id=user_id, role=RoleName(role), scope=Scoped(tenant_id))

    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls.build(user.id, user.role, user.tenant_id)

    @property
    def is_super_admin(self) -> bool:
        return self.role is RoleName.SUPER_ADMIN

    @property
    def tenant_id(self) -> str | None:
        """Tenant id for scoped principals; None for unrestricted ones."""
        if isinstance(self.scope, Scoped):
            return self.scope.tenant_id
        return None
