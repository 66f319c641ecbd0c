"""
Request-scoped logging for TaskHub.

Every log line emitted while a request is in flight carries the request id
and, once the bearer token has been resolved, the acting user and tenant.
One access line is written per request.
"""

import json
import logging
import logging.config
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

ACCESS_LOGGER = "taskhub.access"

# request_id, user_id, tenant_id of the request being served
_log_context: ContextVar[dict] = ContextVar("taskhub_log_context", default={})

# Attributes every LogRecord has; anything else was passed through `extra=`
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_QUIET_PATHS = ("/health",)


def bind_log_context(**values) -> None:
    """Merge *values* into the context stamped on this request's log records."""
    _log_context.set({**_log_context.get(), **values})


class LogContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()
        record.request_id = context.get("request_id", "")
        for key in ("user_id", "tenant_id"):
            if key in context and not hasattr(record, key):
                setattr(record, key, context[key])
        return True


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; `extra=` fields are emitted as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS})
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_client_ip(request: Request) -> str:
    """Client address, honouring the first hop of X-Forwarded-For."""
    forwarded = request.headers.get("X-Forwarded-For") or request.headers.get("X-Real-IP")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Assigns the request id, echoes it in X-Request-ID and writes the access line."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.logger = logging.getLogger(ACCESS_LOGGER)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = _log_context.set({"request_id": request_id})
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            if not request.url.path.endswith(_QUIET_PATHS):
                self._access(request, status_code, (time.perf_counter() - started) * 1000)
            _log_context.reset(token)

    def _access(self, request: Request, status_code: int, duration_ms: float) -> None:
        level = logging.ERROR if status_code >= 500 else logging.WARNING if status_code >= 400 else logging.INFO
        fields = {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
            "client_ip": get_client_ip(request),
        }
        # The route runs in a copied context, so its bound principal is read back from state
        principal = getattr(request.state, "principal", None)
        if principal is not None:
            fields.update(user_id=principal.user_id, tenant_id=principal.tenant_id)
        self.logger.log(level, "%s %s -> %d", request.method, request.url.path, status_code, extra=fields)


def configure_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """Install the root handler for the process."""
    level = log_level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"context": {"()": LogContextFilter}},
            "formatters": {
                "json": {"()": JsonLogFormatter},
                "plain": {"format": "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_format else "plain",
                    "filters": ["context"],
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "taskhub": {"level": level},
                "uvicorn.access": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
