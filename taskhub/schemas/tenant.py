from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskhub.constants.plans import SubscriptionPlan
from taskhub.models.tenant import TenantStatus

SUBDOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"


class TenantRegister(BaseModel):
    """Public self-service registration: a tenant plus its first tenant_admin."""

    model_config = ConfigDict(use_enum_values=True)

    tenant_name: str = Field(..., min_length=1, max_length=200)
    subdomain: str = Field(..., min_length=1, max_length=63, pattern=SUBDOMAIN_PATTERN)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=8, max_length=128)
    admin_full_name: str = Field(..., min_length=1, max_length=200)


class TenantCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=200)
    subdomain: str = Field(..., min_length=1, max_length=63, pattern=SUBDOMAIN_PATTERN)
    status: TenantStatus = TenantStatus.active
    subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE
    max_users: int | None = Field(None, ge=0)
    max_projects: int | None = Field(None, ge=0)


class TenantUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(None, min_length=1, max_length=200)
    status: TenantStatus | None = None
    subscription_plan: SubscriptionPlan | None = None
    max_users: int | None = Field(None, ge=0)
    max_projects: int | None = Field(None, ge=0)


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    subdomain: str
    status: str
    subscription_plan: str
    max_users: int
    max_projects: int
    created_at: datetime
    updated_at: datetime


class TenantStats(BaseModel):
    total_users: int
    total_projects: int
    total_tasks: int


class TenantDetail(TenantResponse):
    stats: TenantStats
