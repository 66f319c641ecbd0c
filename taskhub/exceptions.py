"""
Custom Exception Classes for TaskHub

Every error raised by the authorization core and the resource services is a
TaskHubError. Each carries an HTTP-equivalent status code and a
machine-readable error code so callers can branch without parsing messages.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in every error response."""

    NOT_FOUND = "NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    FORBIDDEN = "FORBIDDEN"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    AUTH_FAILED = "AUTH_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TaskHubError(Exception):
    """Base exception class for all TaskHub errors"""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.default_code
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(TaskHubError):
    """Raised when the caller cannot be identified"""

    default_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class AccessDeniedError(TaskHubError):
    """Raised when a known resource belongs to a tenant the caller cannot reach"""

    default_code = ErrorCode.ACCESS_DENIED

    def __init__(self, message: str = "Access denied", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class ForbiddenError(TaskHubError):
    """Raised when the caller's role may not perform the action at all"""

    default_code = ErrorCode.FORBIDDEN

    def __init__(self, message: str = "You do not have permission to perform this action", action: str | None = None):
        details = {"action": action} if action else {}
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class QuotaExceededError(TaskHubError):
    """Raised when a tenant has reached the cap for a resource kind"""

    default_code = ErrorCode.QUOTA_EXCEEDED

    def __init__(self, resource_kind: str, limit: int):
        super().__init__(
            message=f"{resource_kind.capitalize()} limit reached ({limit}). Upgrade your plan to add more.",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"resource_kind": resource_kind, "limit": limit},
        )


# ============================================================================
# Resource Not Found
# ============================================================================


class NotFoundError(TaskHubError):
    """Raised when a resource is absent or outside the caller's visible scope"""

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        super().__init__(
            message=f"{resource_type} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


# ============================================================================
# Validation & Conflicts
# ============================================================================


class ValidationError(TaskHubError):
    """Raised for malformed input or references that cross tenant boundaries"""

    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class ConflictError(TaskHubError):
    """Raised when a unique constraint would be violated"""

    default_code = ErrorCode.CONFLICT

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
        )


# ============================================================================
# Infrastructure
# ============================================================================


class ServiceUnavailableError(TaskHubError):
    """Raised when the persistence layer cannot be reached; safe to retry"""

    default_code = ErrorCode.SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Service temporarily unavailable. Please try again later."):
        super().__init__(message=message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
