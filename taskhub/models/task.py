import enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from taskhub.database import Base
from taskhub.models.base import generate_uuid, utcnow


class TaskStatus(str, enum.Enum):
    todo = "todo"
    in_progress = "in_progress"
    completed = "completed"


class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


# Sort rank, higher sorts first in listings
PRIORITY_RANK = {
    TaskPriority.high.value: 3,
    TaskPriority.medium.value: 2,
    TaskPriority.low.value: 1,
}


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.todo.value)
    priority = Column(String(20), nullable=False, default=TaskPriority.medium.value)
    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    due_date = Column(Date, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="tasks", lazy="noload")
    assignee = relationship("User", foreign_keys=[assigned_to], lazy="noload")

    __table_args__ = (
        Index("idx_task_project", "project_id"),
        Index("idx_task_tenant_assignee", "tenant_id", "assigned_to"),
    )
