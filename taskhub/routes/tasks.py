"""
Task Routes

POST   /api/projects/{project_id}/tasks
GET    /api/projects/{project_id}/tasks → ?status=&assigned_to=&priority=&search=&page=&limit=
GET    /api/tasks/{task_id}
PUT    /api/tasks/{task_id}
PATCH  /api/tasks/{task_id}/status
DELETE /api/tasks/{task_id}
"""

from fastapi import APIRouter, Depends, Query, status

from taskhub.auth import get_current_principal
from taskhub.core.principal import Principal
from taskhub.dependencies import get_origin_address, get_task_service
from taskhub.models.task import TaskPriority, TaskStatus
from taskhub.schemas.common import ApiResponse, PageData
from taskhub.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from taskhub.services.task_service import TaskService

project_task_router = APIRouter(tags=["Tasks"])
router = APIRouter(tags=["Tasks"])


@project_task_router.post(
    "/{project_id}/tasks",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_task_route(
    project_id: str,
    payload: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
    origin: str = Depends(get_origin_address),
):
    task = await service.create(principal, project_id, payload, origin)
    return ApiResponse(message="Task created successfully", data=task)


@project_task_router.get("/{project_id}/tasks", response_model=ApiResponse[PageData[TaskResponse]])
async def list_tasks_route(
    project_id: str,
    status_filter: TaskStatus | None = Query(None, alias="status"),
    assigned_to: str | None = None,
    priority: TaskPriority | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
):
    result = await service.list(
        principal,
        project_id,
        status=status_filter.value if status_filter else None,
        assigned_to=assigned_to,
        priority=priority.value if priority else None,
        search=search,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=PageData(items=result.items, pagination=result.pagination))


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse])
async def get_task_route(
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
):
    return ApiResponse(data=await service.get(principal, task_id))


@router.put("/{task_id}", response_model=ApiResponse[TaskResponse])
async def update_task_route(
    task_id: str,
    payload: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
    origin: str = Depends(get_origin_address),
):
    task = await service.update(principal, task_id, payload, origin)
    return ApiResponse(message="Task updated successfully", data=task)


@router.patch("/{task_id}/status", response_model=ApiResponse[TaskResponse])
async def update_task_status_route(
    task_id: str,
    payload: TaskStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
    origin: str = Depends(get_origin_address),
):
    return ApiResponse(data=await service.update_status(principal, task_id, payload, origin))


@router.delete("/{task_id}", response_model=ApiResponse[None])
async def delete_task_route(
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
    origin: str = Depends(get_origin_address),
):
    await service.delete(principal, task_id, origin)
    return ApiResponse(message="Task deleted successfully")
