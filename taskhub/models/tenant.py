"""
Tenant model.

Each Tenant is an isolated organisation account and the unit of data
partitioning. Users, projects and tasks carry a tenant_id FK.
Tenants are never hard-deleted; `status` carries their lifecycle.
"""

import enum

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.orm import relationship

from taskhub.constants.plans import DEFAULT_PLAN, PLAN_LIMITS
from taskhub.database import Base
from taskhub.models.base import generate_uuid, utcnow


class TenantStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    trial = "trial"


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    subdomain = Column(String(63), nullable=False, unique=True)  # login disambiguation key, immutable
    status = Column(String(20), nullable=False, default=TenantStatus.active.value)
    subscription_plan = Column(String(20), nullable=False, default=DEFAULT_PLAN.value)
    max_users = Column(Integer, nullable=False, default=PLAN_LIMITS[DEFAULT_PLAN].max_users)
    max_projects = Column(Integer, nullable=False, default=PLAN_LIMITS[DEFAULT_PLAN].max_projects)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    users = relationship("User", back_populates="tenant", lazy="noload")
    projects = relationship("Project", back_populates="tenant", lazy="noload")

    __table_args__ = (
        Index("idx_tenant_status", "status"),
        Index("idx_tenant_created_at", "created_at"),
    )
