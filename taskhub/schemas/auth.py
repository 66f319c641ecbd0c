from pydantic import BaseModel, EmailStr, Field

from taskhub.schemas.tenant import TenantResponse
from taskhub.schemas.user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    # Omitted only by super_admin, who belongs to no tenant
    tenant_subdomain: str | None = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(BaseModel):
    user: UserResponse
    token: Token


class RegistrationResponse(BaseModel):
    tenant: TenantResponse
    admin: UserResponse


class MeResponse(UserResponse):
    tenant: TenantResponse | None = None
