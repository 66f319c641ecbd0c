"""
Audit Recorder.

Appends one AuditLog row per successful create/update/delete, using its own
session so the entry never shares a transaction with the primary operation.
Recording is best effort: a failure is logged and dropped, never retried and
never reported to the caller, whose operation has already committed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskhub.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditRecorder:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def record(
        self,
        tenant_id: str | None,
        actor_id: str | None,
        action: str,
        resource_kind: str,
        resource_id: str | None,
        origin_address: str | None = None,
    ) -> None:
        try:
            async with self.session_factory() as session:
                session.add(
                    AuditLog(
                        tenant_id=tenant_id,
                        actor_user_id=actor_id,
                        action=action,
                        resource_kind=resource_kind,
                        resource_id=resource_id,
                        origin_address=origin_address,
                    )
                )
                await session.commit()
        except Exception:
            logger.exception(
                "Failed to record audit entry: action=%s kind=%s id=%s tenant=%s",
                action,
                resource_kind,
                resource_id,
                tenant_id,
            )
