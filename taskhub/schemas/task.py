from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from taskhub.models.task import TaskPriority, TaskStatus
from taskhub.schemas.common import AssigneeRef


class TaskCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    assigned_to: str | None = None
    priority: TaskPriority = TaskPriority.medium
    due_date: date | None = None


class TaskUpdate(BaseModel):
    """Partial update. Sending `assigned_to: null` explicitly unassigns the task."""

    model_config = ConfigDict(use_enum_values=True)

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: str | None = None
    due_date: date | None = None


class TaskStatusUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: TaskStatus


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    project_id: str
    title: str
    description: str | None
    status: str
    priority: str
    assigned_to: str | None
    assignee: AssigneeRef | None = None
    due_date: date | None
    created_by: str | None
    created_at: datetime
    updated_at: datetime
