from .project_service import ProjectService
from .task_service import TaskService
from .tenant_service import TenantService
from .user_service import UserService

__all__ = ["ProjectService", "TaskService", "TenantService", "UserService"]
