"""
Task model for work items belonging to an event.

A task is the generic unit of work. Each task may carry one specialized
sub-record matching its category (graphics, logistics, outreach,
sponsorship) with kind-specific fields and status.

Design Rationale:
- status_changed_at is stamped on every status transition so the blocked
  scan can measure how long a task has been BLOCKED without relying on
  updated_at, which any edit would bump
- Sub-records cascade with the task; task_id is unique on each sub-record
  table so a task never has two records of the same kind
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import enum_type


class TaskCategory(enum.Enum):
    """Fixed set of task categories."""
    EVENT_SETUP = "EVENT_SETUP"
    SPONSORSHIP = "SPONSORSHIP"
    TECH = "TECH"
    LOGISTICS = "LOGISTICS"
    GRAPHICS = "GRAPHICS"
    OUTREACH = "OUTREACH"


class TaskStatus(enum.Enum):
    """Generic task workflow status."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    DONE = "DONE"


class Task(Base, GuidMixin):
    """
    Work item belonging to an event.

    Attributes:
        id: Primary key (internal, never exposed)
        guid: GUID string property (tsk_xxx, inherited from GuidMixin)
        event_id: Owning event
        category: Task category
        title: Short description
        deadline: Due date and time (UTC)
        status: Workflow status (default PENDING)
        blocker_note: Why the task is blocked
        owner_id: User responsible for the task
        status_changed_at: Last status transition timestamp

    Relationships:
        event: Owning event (many-to-one)
        owner: Responsible user (many-to-one)
        graphics_task / logistics_task / outreach_task / sponsorship_task:
            Specialized sub-record (one-to-one, cascade)
    """

    __tablename__ = "tasks"

    GUID_PREFIX = "tsk"

    id = Column(Integer, primary_key=True, autoincrement=True)

    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Core fields
    category = Column(enum_type(TaskCategory), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    deadline = Column(DateTime, nullable=False, index=True)

    # Workflow
    status = Column(
        enum_type(TaskStatus),
        default=TaskStatus.PENDING,
        nullable=False,
        index=True,
    )
    blocker_note = Column(Text, nullable=True)
    status_changed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owner_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    # Relationships
    event = relationship("Event", back_populates="tasks")
    owner = relationship("User", back_populates="owned_tasks", foreign_keys=[owner_id])

    graphics_task = relationship(
        "GraphicsTask",
        back_populates="task",
        uselist=False,
        cascade="all, delete-orphan",
    )
    logistics_task = relationship(
        "LogisticsTask",
        back_populates="task",
        uselist=False,
        cascade="all, delete-orphan",
    )
    outreach_task = relationship(
        "OutreachTask",
        back_populates="task",
        uselist=False,
        cascade="all, delete-orphan",
    )
    sponsorship_task = relationship(
        "SponsorshipTask",
        back_populates="task",
        uselist=False,
        cascade="all, delete-orphan",
    )
    notifications = relationship(
        "Notification",
        back_populates="task",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    __table_args__ = (
        Index("idx_tasks_status_deadline", "status", "deadline"),
    )

    def __repr__(self) -> str:
        return (
            f"<Task("
            f"id={self.id}, "
            f"title='{self.title}', "
            f"category={self.category.value if self.category else None}, "
            f"status={self.status.value if self.status else None}"
            f")>"
        )

    def __str__(self) -> str:
        return self.title
