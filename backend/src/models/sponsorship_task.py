"""
Sponsorship sub-task model.

Tracks where a sponsor conversation stands for a SPONSORSHIP task, the
next action to take, when to follow up, and the history of stage changes.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import JSONBType, enum_type


class SponsorStage(enum.Enum):
    """Sponsor pipeline stage."""
    INITIAL_CONTACT = "INITIAL_CONTACT"
    PROPOSAL_SENT = "PROPOSAL_SENT"
    NEGOTIATION = "NEGOTIATION"
    CONFIRMED = "CONFIRMED"
    STALLED = "STALLED"


class SponsorshipTask(Base, GuidMixin):
    """
    Sponsor pipeline record attached one-to-one to a Task.

    Attributes:
        guid: GUID string property (spn_xxx)
        task_id: Parent task (unique)
        owner_id: Responsible user
        current_stage: Current pipeline stage
        next_action: What happens next
        follow_up_deadline: When to follow up (UTC)
        status_history: List of {"stage", "changed_at"} entries, oldest first
    """

    __tablename__ = "sponsorship_tasks"

    GUID_PREFIX = "spn"

    id = Column(Integer, primary_key=True, autoincrement=True)

    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    current_stage = Column(enum_type(SponsorStage), nullable=False)
    next_action = Column(Text, nullable=True)
    follow_up_deadline = Column(DateTime, nullable=True)
    status_history = Column(JSONBType, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    task = relationship("Task", back_populates="sponsorship_task")
    owner = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<SponsorshipTask("
            f"id={self.id}, "
            f"stage={self.current_stage.value if self.current_stage else None}"
            f")>"
        )
