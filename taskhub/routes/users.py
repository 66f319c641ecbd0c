"""
User Routes

POST   /api/tenants/{tenant_id}/users → add a user to a tenant
GET    /api/tenants/{tenant_id}/users → list a tenant's users
GET    /api/users/{user_id}
PUT    /api/users/{user_id}
DELETE /api/users/{user_id}
"""

from fastapi import APIRouter, Depends, Query, status

from taskhub.auth import get_current_principal
from taskhub.constants.roles import RoleName
from taskhub.core.principal import Principal
from taskhub.dependencies import get_origin_address, get_user_service
from taskhub.schemas.common import ApiResponse, PageData
from taskhub.schemas.user import UserCreate, UserResponse, UserUpdate
from taskhub.services.user_service import UserService

tenant_user_router = APIRouter(tags=["Users"])
router = APIRouter(tags=["Users"])


@tenant_user_router.post(
    "/{tenant_id}/users",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_user_route(
    tenant_id: str,
    payload: UserCreate,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
    origin: str = Depends(get_origin_address),
):
    user = await service.create(principal, tenant_id, payload, origin)
    return ApiResponse(message="User created successfully", data=user)


@tenant_user_router.get("/{tenant_id}/users", response_model=ApiResponse[PageData[UserResponse]])
async def list_users_route(
    tenant_id: str,
    search: str | None = None,
    role: RoleName | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    result = await service.list(
        principal,
        tenant_id,
        search=search,
        role=role.value if role else None,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=PageData(items=result.items, pagination=result.pagination))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user_route(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    return ApiResponse(data=await service.get(principal, user_id))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user_route(
    user_id: str,
    payload: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
    origin: str = Depends(get_origin_address),
):
    user = await service.update(principal, user_id, payload, origin)
    return ApiResponse(message="User updated successfully", data=user)


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user_route(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
    origin: str = Depends(get_origin_address),
):
    await service.delete(principal, user_id, origin)
    return ApiResponse(message="User deleted successfully")
