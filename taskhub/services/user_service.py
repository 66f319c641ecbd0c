"""
User Service

Tenant admins manage the users of their own tenant within the tenant's user
quota. Plain users may read their tenant's directory and edit their own
profile. Nobody may delete their own account.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from taskhub.auth import hash_password
from taskhub.config import settings
from taskhub.constants.roles import TENANT_ASSIGNABLE_ROLES, RoleName
from taskhub.core.permissions import Action, ResourceKind, can, require
from taskhub.core.principal import Principal
from taskhub.core.quota import QuotaGuard
from taskhub.core.scope import authorize_tenant_match, ensure_visible, in_scope
from taskhub.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.schemas.user import UserCreate, UserResponse, UserUpdate
from taskhub.services.base import BaseService, apply_changes
from taskhub.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

# Fields only an administrator may change
ADMIN_ONLY_FIELDS = frozenset({"role", "is_active"})


class UserService(BaseService):
    async def create(
        self,
        principal: Principal,
        tenant_id: str,
        payload: UserCreate,
        origin: str | None = None,
    ) -> UserResponse:
        require(principal, Action.CREATE, ResourceKind.USER)
        await self._visible_tenant(principal, tenant_id)
        self._check_assignable_role(payload.role)
        await QuotaGuard(self.db).check_create_quota(principal, tenant_id, ResourceKind.USER)

        email = payload.email.lower()
        existing = await self.db.execute(select(User.id).where(User.tenant_id == tenant_id, User.email == email))
        if existing.first() is not None:
            raise ConflictError("User", "email", email)

        user = User(
            tenant_id=tenant_id,
            email=email,
            password_hash=hash_password(payload.password),
            full_name=payload.full_name,
            role=payload.role,
            is_active=True,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("User", "email", email) from e
        logger.info("User created: id=%s tenant=%s role=%s", user.id, tenant_id, user.role)

        await self.audit.record(tenant_id, principal.user_id, "CREATE_USER", "user", user.id, origin)
        return UserResponse.model_validate(user)

    async def list(
        self,
        principal: Principal,
        tenant_id: str,
        *,
        search: str | None = None,
        role: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Page:
        """List a tenant's users in creation order."""
        require(principal, Action.LIST, ResourceKind.USER)
        await self._visible_tenant(principal, tenant_id)

        statement = select(User).where(User.tenant_id == tenant_id)
        if search:
            statement = statement.where(
                or_(
                    User.full_name.icontains(search, autoescape=True),
                    User.email.icontains(search, autoescape=True),
                )
            )
        if role:
            statement = statement.where(User.role == role)

        result = await paginate(
            self.db,
            statement,
            order_by=[User.created_at, User.id],
            page=page,
            limit=limit or settings.default_page_size,
        )
        result.items = [UserResponse.model_validate(u) for u in result.items]
        return result

    async def get(self, principal: Principal, user_id: str) -> UserResponse:
        require(principal, Action.READ, ResourceKind.USER)
        user = await self.db.get(User, user_id)
        if user is not None and user.id == principal.user_id:
            return UserResponse.model_validate(user)
        ensure_visible(principal, user, "User", user_id)
        return UserResponse.model_validate(user)

    async def update(
        self,
        principal: Principal,
        user_id: str,
        payload: UserUpdate,
        origin: str | None = None,
    ) -> UserResponse:
        user = await self._fetch(user_id)
        authorize_tenant_match(principal, user.tenant_id)
        require(principal, Action.UPDATE, ResourceKind.USER, owner_user_id=user.id)

        changes = payload.model_dump(exclude_unset=True)
        touched_admin_fields = ADMIN_ONLY_FIELDS.intersection(changes)
        if touched_admin_fields:
            if not can(principal, Action.UPDATE, ResourceKind.USER):
                raise ForbiddenError("Only an administrator can change role or active status")
            if user.id == principal.user_id:
                raise ForbiddenError("You cannot change your own role or active status")
        if "role" in changes:
            self._check_assignable_role(changes["role"])

        password = changes.pop("password", None)
        if password is not None:
            user.password_hash = hash_password(password)
        apply_changes(user, changes, required=("full_name", "role", "is_active"))
        await self.db.commit()
        logger.info("User updated: id=%s fields=%s", user.id, sorted(payload.model_dump(exclude_unset=True)))

        await self.audit.record(user.tenant_id, principal.user_id, "UPDATE_USER", "user", user.id, origin)
        return UserResponse.model_validate(user)

    async def delete(self, principal: Principal, user_id: str, origin: str | None = None) -> None:
        user = await self._fetch(user_id)
        authorize_tenant_match(principal, user.tenant_id)
        require(principal, Action.DELETE, ResourceKind.USER)
        if user.id == principal.user_id:
            raise ForbiddenError("You cannot delete your own account")

        tenant_id = user.tenant_id
        # Weak references are cleared rather than cascaded
        await self.db.execute(update(Task).where(Task.assigned_to == user.id).values(assigned_to=None))
        await self.db.execute(update(Task).where(Task.created_by == user.id).values(created_by=None))
        await self.db.execute(update(Project).where(Project.created_by == user.id).values(created_by=None))
        await self.db.delete(user)
        await self.db.commit()
        logger.info("User deleted: id=%s tenant=%s", user_id, tenant_id)

        await self.audit.record(tenant_id, principal.user_id, "DELETE_USER", "user", user_id, origin)

    # ── helpers ──────────────────────────────────────────────────────────────

    async def _fetch(self, user_id: str) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _visible_tenant(self, principal: Principal, tenant_id: str) -> Tenant:
        tenant = await self.db.get(Tenant, tenant_id)
        if tenant is None or not in_scope(principal, tenant.id):
            raise NotFoundError("Tenant", tenant_id)
        return tenant

    @staticmethod
    def _check_assignable_role(role: str) -> None:
        if RoleName(role) not in TENANT_ASSIGNABLE_ROLES:
            raise ValidationError(f"Role '{role}' cannot be assigned to tenant users", field="role")
