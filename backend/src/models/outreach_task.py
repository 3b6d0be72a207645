"""
Outreach sub-task model.

An outreach item is a post or message published on a channel (Instagram,
WhatsApp, email, LinkedIn, partner) for an OUTREACH task.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import enum_type


class OutreachStatus(enum.Enum):
    """Outreach post status."""
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


class OutreachTask(Base, GuidMixin):
    """
    Outreach post attached one-to-one to a Task.

    Attributes:
        guid: GUID string property (otr_xxx)
        task_id: Parent task (unique)
        owner_id: Responsible user
        channel: Publication channel
        content_link: Link to the content to publish
        scheduled_time: When the post goes out (UTC)
        status: Post status (starts at PENDING)
        outcome_note: Free-text result of the outreach
    """

    __tablename__ = "outreach_tasks"

    GUID_PREFIX = "otr"

    id = Column(Integer, primary_key=True, autoincrement=True)

    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    channel = Column(String(50), nullable=False)
    content_link = Column(Text, nullable=True)
    scheduled_time = Column(DateTime, nullable=True)
    status = Column(
        enum_type(OutreachStatus),
        default=OutreachStatus.PENDING,
        nullable=False,
    )
    outcome_note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    task = relationship("Task", back_populates="outreach_task")
    owner = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<OutreachTask("
            f"id={self.id}, "
            f"channel='{self.channel}', "
            f"status={self.status.value if self.status else None}"
            f")>"
        )
