"""
FastAPI dependency providers.

Services are built per request from the injected session and the process's
Database handle; nothing here reads module-level state.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.audit import AuditRecorder
from taskhub.database import Database, get_database, get_db
from taskhub.middleware.logging import get_client_ip
from taskhub.services import ProjectService, TaskService, TenantService, UserService


def get_audit_recorder(database: Database = Depends(get_database)) -> AuditRecorder:
    return AuditRecorder(database.session_factory)


def get_origin_address(request: Request) -> str:
    return get_client_ip(request)


def get_tenant_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> TenantService:
    return TenantService(db, audit)


def get_user_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> UserService:
    return UserService(db, audit)


def get_project_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> ProjectService:
    return ProjectService(db, audit)


def get_task_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> TaskService:
    return TaskService(db, audit)
