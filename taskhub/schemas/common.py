from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from taskhub.utils.pagination import Pagination

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every response."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class PageData(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


class UserRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str


class AssigneeRef(UserRef):
    email: str
