"""
Project Service

Creation is quota-bound per tenant. Updates and deletes are open to the
tenant's admins and to the project's creator. Deleting a project deletes its
tasks.
"""

from __future__ import annotations

import logging

from sqlalchemy import case, delete, func, select

from taskhub.config import settings
from taskhub.core.permissions import Action, ResourceKind, require
from taskhub.core.principal import Principal
from taskhub.core.quota import QuotaGuard
from taskhub.core.scope import apply_scope, authorize_tenant_match, ensure_visible, resolve_scope
from taskhub.exceptions import NotFoundError, ValidationError
from taskhub.models.project import Project
from taskhub.models.task import Task, TaskStatus
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.schemas.common import UserRef
from taskhub.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from taskhub.services.base import BaseService, apply_changes
from taskhub.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)


class ProjectService(BaseService):
    async def create(self, principal: Principal, payload: ProjectCreate, origin: str | None = None) -> ProjectResponse:
        require(principal, Action.CREATE, ResourceKind.PROJECT)
        tenant_id = await self._target_tenant(principal, payload.tenant_id)
        await QuotaGuard(self.db).check_create_quota(principal, tenant_id, ResourceKind.PROJECT)

        project = Project(
            tenant_id=tenant_id,
            name=payload.name,
            description=payload.description,
            status=payload.status,
            created_by=principal.user_id,
        )
        self.db.add(project)
        await self.db.commit()
        logger.info("Project created: id=%s tenant=%s by=%s", project.id, tenant_id, principal.user_id)

        await self.audit.record(tenant_id, principal.user_id, "CREATE_PROJECT", "project", project.id, origin)
        return (await self._to_responses([project]))[0]

    async def list(
        self,
        principal: Principal,
        *,
        search: str | None = None,
        status: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Page:
        """List visible projects, most recently updated first."""
        require(principal, Action.LIST, ResourceKind.PROJECT)
        statement = apply_scope(select(Project), Project, resolve_scope(principal))
        if search:
            statement = statement.where(Project.name.icontains(search, autoescape=True))
        if status:
            statement = statement.where(Project.status == status)

        result = await paginate(
            self.db,
            statement,
            order_by=[Project.updated_at.desc(), Project.id],
            page=page,
            limit=limit or settings.default_project_page_size,
        )
        result.items = await self._to_responses(result.items)
        return result

    async def get(self, principal: Principal, project_id: str) -> ProjectResponse:
        require(principal, Action.READ, ResourceKind.PROJECT)
        project = await self.db.get(Project, project_id)
        ensure_visible(principal, project, "Project", project_id)
        return (await self._to_responses([project]))[0]

    async def update(
        self,
        principal: Principal,
        project_id: str,
        payload: ProjectUpdate,
        origin: str | None = None,
    ) -> ProjectResponse:
        project = await self._fetch(project_id)
        authorize_tenant_match(principal, project.tenant_id)
        require(
            principal,
            Action.UPDATE,
            ResourceKind.PROJECT,
            owner_user_id=project.created_by,
            message="Only the creator or admin can update this project",
        )

        changes = payload.model_dump(exclude_unset=True)
        apply_changes(project, changes, required=("name", "status"))
        await self.db.commit()
        logger.info("Project updated: id=%s fields=%s", project.id, sorted(changes))

        await self.audit.record(project.tenant_id, principal.user_id, "UPDATE_PROJECT", "project", project.id, origin)
        return (await self._to_responses([project]))[0]

    async def delete(self, principal: Principal, project_id: str, origin: str | None = None) -> None:
        project = await self._fetch(project_id)
        authorize_tenant_match(principal, project.tenant_id)
        require(
            principal,
            Action.DELETE,
            ResourceKind.PROJECT,
            owner_user_id=project.created_by,
            message="Only the creator or admin can delete this project",
        )

        tenant_id = project.tenant_id
        await self.db.execute(delete(Task).where(Task.project_id == project.id))
        await self.db.delete(project)
        await self.db.commit()
        logger.info("Project deleted: id=%s tenant=%s", project_id, tenant_id)

        await self.audit.record(tenant_id, principal.user_id, "DELETE_PROJECT", "project", project_id, origin)

    # ── helpers ──────────────────────────────────────────────────────────────

    async def _fetch(self, project_id: str) -> Project:
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def _target_tenant(self, principal: Principal, requested_tenant_id: str | None) -> str:
        """Pick the tenant a new project lands in."""
        if not principal.is_super_admin:
            if requested_tenant_id and requested_tenant_id != principal.tenant_id:
                raise ValidationError("Projects can only be created in your own tenant", field="tenant_id")
            return principal.tenant_id

        if not requested_tenant_id:
            raise ValidationError("tenant_id is required when a super_admin creates a project", field="tenant_id")
        if await self.db.get(Tenant, requested_tenant_id) is None:
            raise ValidationError("Tenant does not exist", field="tenant_id")
        return requested_tenant_id

    async def _to_responses(self, projects: list[Project]) -> list[ProjectResponse]:
        """Attach creator and task counts to each project."""
        if not projects:
            return []
        project_ids = [p.id for p in projects]

        count_rows = await self.db.execute(
            select(
                Task.project_id,
                func.count(Task.id),
                func.sum(case((Task.status == TaskStatus.completed.value, 1), else_=0)),
            )
            .where(Task.project_id.in_(project_ids))
            .group_by(Task.project_id)
        )
        counts = {row[0]: (row[1], row[2] or 0) for row in count_rows.all()}

        creator_ids = {p.created_by for p in projects if p.created_by}
        creators = {}
        if creator_ids:
            user_rows = await self.db.execute(select(User).where(User.id.in_(creator_ids)))
            creators = {u.id: u for u in user_rows.scalars().all()}

        responses = []
        for project in projects:
            task_count, completed = counts.get(project.id, (0, 0))
            creator = creators.get(project.created_by)
            responses.append(
                ProjectResponse.model_validate(project).model_copy(
                    update={
                        "creator": UserRef.model_validate(creator) if creator else None,
                        "task_count": task_count,
                        "completed_task_count": completed,
                    }
                )
            )
        return responses
