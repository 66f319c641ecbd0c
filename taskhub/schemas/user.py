from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskhub.constants.roles import DEFAULT_ROLE, RoleName


class UserCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    email: EmailStr = Field(..., description="A valid email address.")
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=200)
    role: RoleName = DEFAULT_ROLE


class UserUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    full_name: str | None = Field(None, min_length=1, max_length=200)
    password: str | None = Field(None, min_length=8, max_length=128)
    role: RoleName | None = None
    is_active: bool | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str | None
    email: str
    full_name: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
