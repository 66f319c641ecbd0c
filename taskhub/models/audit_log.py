from sqlalchemy import Column, DateTime, Index, Integer, String

from taskhub.database import Base
from taskhub.models.base import utcnow


class AuditLog(Base):
    """Append-only record of a state-changing action. Never updated or deleted."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Plain columns, no FKs: entries must outlive the rows they describe
    tenant_id = Column(String(36), nullable=True)
    actor_user_id = Column(String(36), nullable=True)
    action = Column(String(64), nullable=False)
    resource_kind = Column(String(32), nullable=False)
    resource_id = Column(String(36), nullable=True)
    origin_address = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_audit_tenant_created", "tenant_id", "created_at"),
        Index("idx_audit_actor_action", "actor_user_id", "action"),
    )
