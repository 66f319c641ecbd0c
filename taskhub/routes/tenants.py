"""
Tenant Routes

POST /api/tenants        → create tenant (super_admin)
GET  /api/tenants        → list tenants (super_admin)
GET  /api/tenants/{id}   → tenant details with usage stats
PUT  /api/tenants/{id}   → partial update
"""

from fastapi import APIRouter, Depends, Query, status

from taskhub.auth import get_current_principal
from taskhub.constants.plans import SubscriptionPlan
from taskhub.core.principal import Principal
from taskhub.dependencies import get_origin_address, get_tenant_service
from taskhub.models.tenant import TenantStatus
from taskhub.schemas.common import ApiResponse, PageData
from taskhub.schemas.tenant import TenantCreate, TenantDetail, TenantResponse, TenantUpdate
from taskhub.services.tenant_service import TenantService

router = APIRouter(tags=["Tenants"])


@router.post("", response_model=ApiResponse[TenantResponse], status_code=status.HTTP_201_CREATED)
async def create_tenant_route(
    payload: TenantCreate,
    principal: Principal = Depends(get_current_principal),
    service: TenantService = Depends(get_tenant_service),
    origin: str = Depends(get_origin_address),
):
    tenant = await service.create(principal, payload, origin)
    return ApiResponse(message="Tenant created successfully", data=tenant)


@router.get("", response_model=ApiResponse[PageData[TenantResponse]])
async def list_tenants_route(
    status_filter: TenantStatus | None = Query(None, alias="status"),
    subscription_plan: SubscriptionPlan | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    service: TenantService = Depends(get_tenant_service),
):
    result = await service.list(
        principal,
        status=status_filter.value if status_filter else None,
        subscription_plan=subscription_plan.value if subscription_plan else None,
        search=search,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=PageData(items=result.items, pagination=result.pagination))


@router.get("/{tenant_id}", response_model=ApiResponse[TenantDetail])
async def get_tenant_route(
    tenant_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TenantService = Depends(get_tenant_service),
):
    return ApiResponse(data=await service.get(principal, tenant_id))


@router.put("/{tenant_id}", response_model=ApiResponse[TenantResponse])
async def update_tenant_route(
    tenant_id: str,
    payload: TenantUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TenantService = Depends(get_tenant_service),
    origin: str = Depends(get_origin_address),
):
    tenant = await service.update(principal, tenant_id, payload, origin)
    return ApiResponse(message="Tenant updated successfully", data=tenant)
