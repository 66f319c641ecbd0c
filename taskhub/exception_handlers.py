"""
Global Exception Handlers for TaskHub

Every error leaves the API in the same envelope as successful responses:

{
    "success": false,
    "message": "Project not found",
    "error_code": "NOT_FOUND",
    "details": {"resource_type": "Project", "resource_id": "..."}
}

Nothing is retried here. Persistence connectivity failures become a 503,
the only response a client may reasonably retry.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub.exceptions import ErrorCode, ServiceUnavailableError, TaskHubError

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    error_code: str | ErrorCode,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the standard error envelope."""
    content: dict[str, Any] = {
        "success": False,
        "message": message,
        "error_code": error_code.value if isinstance(error_code, ErrorCode) else error_code,
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def get_http_error_code(status_code: int) -> ErrorCode:
    """Map HTTP status codes to error codes for HTTPException."""
    error_code_map = {
        400: ErrorCode.VALIDATION_FAILED,
        401: ErrorCode.AUTH_FAILED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        405: ErrorCode.VALIDATION_FAILED,
        409: ErrorCode.CONFLICT,
        422: ErrorCode.VALIDATION_FAILED,
        503: ErrorCode.SERVICE_UNAVAILABLE,
    }
    return error_code_map.get(status_code, ErrorCode.INTERNAL_ERROR)


async def taskhub_exception_handler(request: Request, exc: TaskHubError) -> JSONResponse:
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        f"{type(exc).__name__}: {exc.message}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )
    return create_error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"HTTPException: {exc.detail}", extra={"status_code": exc.status_code, "path": request.url.path})
    response = create_error_response(exc.status_code, str(exc.detail), get_http_error_code(exc.status_code))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})

    logger.warning(f"Validation error on {request.url.path}", extra={"path": request.url.path})
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        ErrorCode.VALIDATION_FAILED,
        {"validation_errors": errors},
    )


UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for duplicate-key errors; foreign-key and not-null violations are not conflicts."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "unique" in str(orig).lower()


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that slipped past the service pre-checks."""
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}", extra={"path": request.url.path})
    if is_unique_violation(exc):
        return create_error_response(status.HTTP_409_CONFLICT, "Resource already exists", ErrorCode.CONFLICT)
    return create_error_response(
        status.HTTP_400_BAD_REQUEST,
        "Request references a missing resource or breaks a data constraint",
        ErrorCode.VALIDATION_FAILED,
    )


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Database unavailable: {exc}", extra={"path": request.url.path})
    unavailable = ServiceUnavailableError()
    return create_error_response(unavailable.status_code, unavailable.message, unavailable.error_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception: {str(exc)}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method},
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        ErrorCode.INTERNAL_ERROR,
    )


def register_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(TaskHubError, taskhub_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(InterfaceError, database_unavailable_handler)
    app.add_exception_handler(ConnectionError, database_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.info("Exception handlers registered successfully")
