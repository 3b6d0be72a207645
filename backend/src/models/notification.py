"""
Notification model for in-app notification history.

Notifications are created by the notification checker (overdue, blocked,
approaching deadline) or sent by a person, and are the source of truth for
the notification bell in the UI.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import enum_type


class NotificationCategory(enum.Enum):
    """What the notification is about."""
    TASK_OVERDUE = "TASK_OVERDUE"
    TASK_BLOCKED = "TASK_BLOCKED"
    DEADLINE_APPROACHING = "DEADLINE_APPROACHING"
    GENERAL = "GENERAL"


class NotificationOrigin(enum.Enum):
    """Who produced the notification."""
    SYSTEM = "SYSTEM"
    HUMAN = "HUMAN"


class Notification(Base, GuidMixin):
    """
    Notification addressed to a user.

    Attributes:
        guid: GUID string property (ntf_xxx)
        user_id: Recipient user
        task_id: Task the notification refers to (optional)
        event_id: Event the notification refers to (optional)
        category: Notification category
        origin: SYSTEM (checker) or HUMAN (sent by a person)
        message: Notification text (max 500 chars)
        read_at: Timestamp when the recipient read it (null = unread)
        created_at: Creation timestamp

    Lifecycle:
        Created by the checker or by a sender. read_at is set or cleared by
        the recipient only.
    """

    __tablename__ = "notifications"
    GUID_PREFIX = "ntf"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=True,
    )

    category = Column(enum_type(NotificationCategory), nullable=False)
    origin = Column(
        enum_type(NotificationOrigin, length=10),
        default=NotificationOrigin.SYSTEM,
        nullable=False,
    )
    message = Column(String(500), nullable=False)

    # Read tracking
    read_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="notifications")
    task = relationship("Task", back_populates="notifications")
    event = relationship("Event")

    # Lookup index for checker de-duplication
    __table_args__ = (
        Index(
            "ix_notifications_dedup",
            "user_id",
            "task_id",
            "category",
            "created_at",
        ),
    )

    @property
    def is_read(self) -> bool:
        return self.read_at is not None
