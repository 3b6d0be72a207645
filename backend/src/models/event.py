"""
Event model for planned events.

Events are created by organizers and own the tasks needed to run them.
An event may be a template that is pushed to city-scoped instances.

Design Rationale:
- Events are never hard-deleted; tasks cascade only through the ORM
- date is stored as naive UTC datetime
- Template events (is_template) keep a link to each city instance via
  parent_event_id so repeated pushes can skip cities already served
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import enum_type


class EventStatus(enum.Enum):
    """Event lifecycle status."""
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Event(Base, GuidMixin):
    """
    Planned event.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (evt_xxx, inherited from GuidMixin)
        name: Event name
        date: Event date and time (UTC)
        status: Lifecycle status (default PLANNING)
        is_template: True when the event is pushed to city instances
        city: City name for city-scoped instances
        parent_event_id: Template this instance was created from
        created_by_user_id: Organizer who created the event

    Relationships:
        tasks: Tasks owned by the event (one-to-many, cascade)
        parent_event: Template event (many-to-one)
        instances: City instances of a template (one-to-many)
        created_by: Creating organizer (many-to-one)
    """

    __tablename__ = "events"

    GUID_PREFIX = "evt"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core fields
    name = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    status = Column(
        enum_type(EventStatus),
        default=EventStatus.PLANNING,
        nullable=False,
        index=True,
    )

    # Distribution
    is_template = Column(Boolean, default=False, nullable=False)
    city = Column(String(100), nullable=True)
    parent_event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Attribution
    created_by_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
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
    tasks = relationship(
        "Task",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )
    parent_event = relationship(
        "Event",
        remote_side=[id],
        foreign_keys=[parent_event_id],
        back_populates="instances",
    )
    instances = relationship(
        "Event",
        foreign_keys=[parent_event_id],
        back_populates="parent_event",
        lazy="dynamic",
    )
    created_by = relationship("User", foreign_keys=[created_by_user_id])

    __table_args__ = (
        Index("idx_events_parent_city", "parent_event_id", "city"),
    )

    def __repr__(self) -> str:
        return (
            f"<Event("
            f"id={self.id}, "
            f"name='{self.name}', "
            f"date={self.date}, "
            f"status={self.status.value if self.status else None}"
            f")>"
        )

    def __str__(self) -> str:
        return self.name
