from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from taskhub.models.project import ProjectStatus
from taskhub.schemas.common import UserRef


class ProjectCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus = ProjectStatus.active
    # Only honoured for super_admin, who has no tenant of their own
    tenant_id: str | None = None


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    description: str | None
    status: str
    created_by: str | None
    creator: UserRef | None = None
    task_count: int = 0
    completed_task_count: int = 0
    created_at: datetime
    updated_at: datetime
