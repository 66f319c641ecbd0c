from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.audit import AuditRecorder
from taskhub.exceptions import ValidationError


class BaseService:
    """Holds the request's session and the audit recorder."""

    def __init__(self, db: AsyncSession, audit: AuditRecorder) -> None:
        self.db = db
        self.audit = audit


def apply_changes(target: Any, changes: dict[str, Any], required: Iterable[str] = ()) -> None:
    """
    Copy *changes* onto *target*.

    Only keys present in `changes` are touched; fields listed in *required*
    may not be cleared with an explicit null.
    """
    required = set(required)
    for field, value in changes.items():
        if value is None and field in required:
            raise ValidationError(f"{field} cannot be null", field=field)
        setattr(target, field, value)
