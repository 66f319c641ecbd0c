"""
Auth Routes

POST /api/auth/register-tenant → create tenant + first tenant_admin
POST /api/auth/login           → issue a bearer token
GET  /api/auth/me              → current user with their tenant
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth import get_current_principal
from taskhub.core.audit import AuditRecorder
from taskhub.core.principal import Principal
from taskhub.database import get_db
from taskhub.dependencies import get_audit_recorder, get_origin_address
from taskhub.schemas.auth import LoginRequest, LoginResponse, MeResponse, RegistrationResponse
from taskhub.schemas.common import ApiResponse
from taskhub.schemas.tenant import TenantRegister
from taskhub.services.auth_service import authenticate, get_me, register_tenant

router = APIRouter(tags=["Auth"])


@router.post(
    "/register-tenant",
    response_model=ApiResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_tenant_route(
    payload: TenantRegister,
    db: AsyncSession = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
    origin: str = Depends(get_origin_address),
):
    data = await register_tenant(payload, db, audit, origin)
    return ApiResponse(message="Tenant registered successfully", data=data)


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login_route(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    data = await authenticate(payload, db)
    return ApiResponse(message="Login successful", data=data)


@router.get("/me", response_model=ApiResponse[MeResponse])
async def me_route(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await get_me(principal.user_id, db))
