"""
Project Routes

POST   /api/projects
GET    /api/projects            → ?search=&status=&page=&limit=
GET    /api/projects/{project_id}
PUT    /api/projects/{project_id}
DELETE /api/projects/{project_id} → also deletes the project's tasks
"""

from fastapi import APIRouter, Depends, Query, status

from taskhub.auth import get_current_principal
from taskhub.core.principal import Principal
from taskhub.dependencies import get_origin_address, get_project_service
from taskhub.models.project import ProjectStatus
from taskhub.schemas.common import ApiResponse, PageData
from taskhub.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from taskhub.services.project_service import ProjectService

router = APIRouter(tags=["Projects"])


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project_route(
    payload: ProjectCreate,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
    origin: str = Depends(get_origin_address),
):
    project = await service.create(principal, payload, origin)
    return ApiResponse(message="Project created successfully", data=project)


@router.get("", response_model=ApiResponse[PageData[ProjectResponse]])
async def list_projects_route(
    search: str | None = None,
    status_filter: ProjectStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    result = await service.list(
        principal,
        search=search,
        status=status_filter.value if status_filter else None,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=PageData(items=result.items, pagination=result.pagination))


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project_route(
    project_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return ApiResponse(data=await service.get(principal, project_id))


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project_route(
    project_id: str,
    payload: ProjectUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
    origin: str = Depends(get_origin_address),
):
    project = await service.update(principal, project_id, payload, origin)
    return ApiResponse(message="Project updated successfully", data=project)


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project_route(
    project_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
    origin: str = Depends(get_origin_address),
):
    await service.delete(principal, project_id, origin)
    return ApiResponse(message="Project deleted successfully")
