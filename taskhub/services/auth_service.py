"""
Registration and login.

Registration is the only unauthenticated write: it creates a tenant and its
first tenant_admin in one transaction.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth import create_access_token, hash_password, verify_password
from taskhub.config import settings
from taskhub.constants.plans import DEFAULT_PLAN, PLAN_LIMITS
from taskhub.constants.roles import RoleName
from taskhub.core.audit import AuditRecorder
from taskhub.exceptions import AccessDeniedError, AuthenticationError, ConflictError, NotFoundError
from taskhub.models.base import generate_uuid
from taskhub.models.tenant import Tenant, TenantStatus
from taskhub.models.user import User
from taskhub.schemas.auth import LoginRequest, LoginResponse, MeResponse, RegistrationResponse, Token
from taskhub.schemas.tenant import TenantRegister, TenantResponse
from taskhub.schemas.user import UserResponse
from taskhub.services.tenant_service import get_tenant_by_subdomain

logger = logging.getLogger(__name__)


async def register_tenant(
    payload: TenantRegister,
    db: AsyncSession,
    audit: AuditRecorder,
    origin: str | None = None,
) -> RegistrationResponse:
    """Create a tenant on the default plan together with its first tenant_admin."""
    if await get_tenant_by_subdomain(payload.subdomain, db) is not None:
        raise ConflictError("Tenant", "subdomain", payload.subdomain)

    limits = PLAN_LIMITS[DEFAULT_PLAN]
    tenant = Tenant(
        id=generate_uuid(),
        name=payload.tenant_name,
        subdomain=payload.subdomain,
        status=TenantStatus.active.value,
        subscription_plan=DEFAULT_PLAN.value,
        max_users=limits.max_users,
        max_projects=limits.max_projects,
    )
    admin = User(
        tenant_id=tenant.id,
        email=payload.admin_email.lower(),
        password_hash=hash_password(payload.admin_password),
        full_name=payload.admin_full_name,
        role=RoleName.TENANT_ADMIN.value,
        is_active=True,
    )
    db.add(tenant)
    await db.flush()
    db.add(admin)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Tenant", "subdomain", payload.subdomain) from e
    logger.info("Tenant registered: id=%s subdomain=%s admin=%s", tenant.id, tenant.subdomain, admin.id)

    await audit.record(tenant.id, admin.id, "REGISTER_TENANT", "tenant", tenant.id, origin)
    return RegistrationResponse(
        tenant=TenantResponse.model_validate(tenant),
        admin=UserResponse.model_validate(admin),
    )


async def authenticate(payload: LoginRequest, db: AsyncSession) -> LoginResponse:
    """
    Verify credentials and issue a token.

    Tenant users log in with their tenant's subdomain; super_admin logs in
    without one.
    """
    email = payload.email.lower()
    if payload.tenant_subdomain:
        tenant = await get_tenant_by_subdomain(payload.tenant_subdomain, db)
        if tenant is None:
            raise NotFoundError("Tenant", payload.tenant_subdomain)
        if tenant.status == TenantStatus.suspended.value:
            raise AccessDeniedError("Tenant account is suspended")
        statement = select(User).where(User.tenant_id == tenant.id, User.email == email)
    else:
        statement = select(User).where(
            User.tenant_id.is_(None),
            User.role == RoleName.SUPER_ADMIN.value,
            User.email == email,
        )

    result = await db.execute(statement)
    user = result.scalars().first()
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed login for %s (tenant=%s)", email, payload.tenant_subdomain)
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthenticationError("Account is inactive")

    expires_in = settings.access_token_expire_minutes * 60
    return LoginResponse(
        user=UserResponse.model_validate(user),
        token=Token(access_token=create_access_token(user), expires_in=expires_in),
    )


async def get_me(user_id: str, db: AsyncSession) -> MeResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    tenant = await db.get(Tenant, user.tenant_id) if user.tenant_id else None
    return MeResponse(
        **UserResponse.model_validate(user).model_dump(),
        tenant=TenantResponse.model_validate(tenant) if tenant else None,
    )
