"""
Logistics sub-task model.

A logistics item is a readiness flag on a LOGISTICS task: it is either not
ready yet, ready, or has an issue that needs attention.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import enum_type


class LogisticsStatus(enum.Enum):
    """Logistics readiness status."""
    NOT_READY = "NOT_READY"
    READY = "READY"
    ISSUE = "ISSUE"


class LogisticsTask(Base, GuidMixin):
    """
    Logistics readiness record attached one-to-one to a Task.

    Attributes:
        guid: GUID string property (lgx_xxx)
        task_id: Parent task (unique)
        owner_id: Responsible user
        status: Readiness status (chosen by the client on creation)
    """

    __tablename__ = "logistics_tasks"

    GUID_PREFIX = "lgx"

    id = Column(Integer, primary_key=True, autoincrement=True)

    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(enum_type(LogisticsStatus), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    task = relationship("Task", back_populates="logistics_task")
    owner = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<LogisticsTask("
            f"id={self.id}, "
            f"status={self.status.value if self.status else None}"
            f")>"
        )
