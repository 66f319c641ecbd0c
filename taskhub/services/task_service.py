"""
Task Service

Tasks live inside a project and inherit its tenant. A task may only be
assigned to a user of that tenant. Plain users may change or delete a task
when they created it, are assigned to it, or own its project.
"""

from __future__ import annotations

import logging

from sqlalchemy import case, select

from taskhub.config import settings
from taskhub.core.permissions import Action, ResourceKind, require
from taskhub.core.principal import Principal
from taskhub.core.scope import apply_scope, authorize_tenant_match, ensure_visible, resolve_scope
from taskhub.exceptions import NotFoundError, ValidationError
from taskhub.models.project import Project
from taskhub.models.task import PRIORITY_RANK, Task, TaskStatus
from taskhub.models.user import User
from taskhub.schemas.common import AssigneeRef
from taskhub.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from taskhub.services.base import BaseService, apply_changes
from taskhub.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

# high, then medium, then low
PRIORITY_ORDER = case(PRIORITY_RANK, value=Task.priority, else_=0).desc()


class TaskService(BaseService):
    async def create(
        self,
        principal: Principal,
        project_id: str,
        payload: TaskCreate,
        origin: str | None = None,
    ) -> TaskResponse:
        require(principal, Action.CREATE, ResourceKind.TASK)
        project = await self.db.get(Project, project_id)
        ensure_visible(principal, project, "Project", project_id)

        if payload.assigned_to is not None:
            await self._validate_assignee(project.tenant_id, payload.assigned_to)

        task = Task(
            tenant_id=project.tenant_id,
            project_id=project.id,
            title=payload.title,
            description=payload.description,
            status=TaskStatus.todo.value,
            priority=payload.priority,
            assigned_to=payload.assigned_to,
            due_date=payload.due_date,
            created_by=principal.user_id,
        )
        self.db.add(task)
        await self.db.commit()
        logger.info("Task created: id=%s project=%s tenant=%s", task.id, project.id, task.tenant_id)

        await self.audit.record(task.tenant_id, principal.user_id, "CREATE_TASK", "task", task.id, origin)
        return (await self._to_responses([task]))[0]

    async def list(
        self,
        principal: Principal,
        project_id: str,
        *,
        status: str | None = None,
        assigned_to: str | None = None,
        priority: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Page:
        """
        List a project's tasks: highest priority first, then earliest due
        date, with undated tasks last.
        """
        require(principal, Action.LIST, ResourceKind.TASK)
        project = await self.db.get(Project, project_id)
        ensure_visible(principal, project, "Project", project_id)

        statement = apply_scope(select(Task), Task, resolve_scope(principal)).where(Task.project_id == project.id)
        if status:
            statement = statement.where(Task.status == status)
        if assigned_to:
            statement = statement.where(Task.assigned_to == assigned_to)
        if priority:
            statement = statement.where(Task.priority == priority)
        if search:
            statement = statement.where(Task.title.icontains(search, autoescape=True))

        result = await paginate(
            self.db,
            statement,
            order_by=[PRIORITY_ORDER, Task.due_date.is_(None), Task.due_date.asc(), Task.created_at, Task.id],
            page=page,
            limit=limit or settings.default_task_page_size,
        )
        result.items = await self._to_responses(result.items)
        return result

    async def get(self, principal: Principal, task_id: str) -> TaskResponse:
        require(principal, Action.READ, ResourceKind.TASK)
        task = await self.db.get(Task, task_id)
        ensure_visible(principal, task, "Task", task_id)
        return (await self._to_responses([task]))[0]

    async def update(
        self,
        principal: Principal,
        task_id: str,
        payload: TaskUpdate,
        origin: str | None = None,
    ) -> TaskResponse:
        task = await self._fetch_for_change(principal, task_id, Action.UPDATE)

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("assigned_to") is not None:
            await self._validate_assignee(task.tenant_id, changes["assigned_to"])
        apply_changes(task, changes, required=("title", "status", "priority"))
        await self.db.commit()
        logger.info("Task updated: id=%s fields=%s", task.id, sorted(changes))

        await self.audit.record(task.tenant_id, principal.user_id, "UPDATE_TASK", "task", task.id, origin)
        return (await self._to_responses([task]))[0]

    async def update_status(
        self,
        principal: Principal,
        task_id: str,
        payload: TaskStatusUpdate,
        origin: str | None = None,
    ) -> TaskResponse:
        """Quick status change with the same gates as a full update."""
        task = await self._fetch_for_change(principal, task_id, Action.UPDATE)
        task.status = payload.status
        await self.db.commit()
        logger.info("Task status changed: id=%s status=%s", task.id, task.status)

        await self.audit.record(task.tenant_id, principal.user_id, "UPDATE_TASK_STATUS", "task", task.id, origin)
        return (await self._to_responses([task]))[0]

    async def delete(self, principal: Principal, task_id: str, origin: str | None = None) -> None:
        task = await self._fetch_for_change(principal, task_id, Action.DELETE)
        tenant_id = task.tenant_id
        await self.db.delete(task)
        await self.db.commit()
        logger.info("Task deleted: id=%s tenant=%s", task_id, tenant_id)

        await self.audit.record(tenant_id, principal.user_id, "DELETE_TASK", "task", task_id, origin)

    # ── helpers ──────────────────────────────────────────────────────────────

    async def _fetch_for_change(self, principal: Principal, task_id: str, action: Action) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        authorize_tenant_match(principal, task.tenant_id)

        project = await self.db.get(Project, task.project_id)
        owners = {task.created_by, task.assigned_to, project.created_by if project else None}
        require(
            principal,
            action,
            ResourceKind.TASK,
            owner_user_id=owners,
            message=f"Only the task's creator, assignee, project owner or an admin can {action.value} this task",
        )
        return task

    async def _validate_assignee(self, tenant_id: str, user_id: str) -> None:
        assignee = await self.db.get(User, user_id)
        if assignee is None or assignee.tenant_id != tenant_id:
            raise ValidationError("Assigned user does not belong to this organization", field="assigned_to")

    async def _to_responses(self, tasks: list[Task]) -> list[TaskResponse]:
        assignee_ids = {t.assigned_to for t in tasks if t.assigned_to}
        assignees = {}
        if assignee_ids:
            rows = await self.db.execute(select(User).where(User.id.in_(assignee_ids)))
            assignees = {u.id: u for u in rows.scalars().all()}

        responses = []
        for task in tasks:
            assignee = assignees.get(task.assigned_to)
            responses.append(
                TaskResponse.model_validate(task).model_copy(
                    update={"assignee": AssigneeRef.model_validate(assignee) if assignee else None}
                )
            )
        return responses
