"""
User model for people working on events.

Users are provisioned by the external identity provider. This backend only
reads them to resolve request identities, owners of tasks, and notification
recipients.

Design Rationale:
- Email is globally unique
- role drives every authorization decision (see services/authorization.py)
- is_active is the functional toggle; deactivated users cannot authenticate
- preferences_json holds the persisted subset of the user's app state
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import enum_type


class UserRole(enum.Enum):
    """
    Platform role.

    - ORGANIZER: creates and manages events, may reassign and delete tasks
    - CORE_MEMBER: works on the tasks they own
    """
    ORGANIZER = "ORGANIZER"
    CORE_MEMBER = "CORE_MEMBER"


class User(Base, GuidMixin):
    """
    User model representing an authenticated person.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (usr_xxx, inherited from GuidMixin)
        email: Login email (unique)
        name: Display name
        role: Platform role (ORGANIZER, CORE_MEMBER)
        is_active: Whether the user may authenticate
        preferences_json: Persisted app-state preferences as JSON
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        owned_tasks: Tasks this user owns (one-to-many)
        notifications: Notifications addressed to this user (one-to-many)
    """

    __tablename__ = "users"

    GUID_PREFIX = "usr"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)

    # Authorization
    role = Column(
        enum_type(UserRole),
        default=UserRole.CORE_MEMBER,
        nullable=False,
        index=True,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Preferences (JSON-encoded)
    preferences_json = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    # Relationships
    owned_tasks = relationship(
        "Task",
        back_populates="owner",
        foreign_keys="Task.owner_id",
        lazy="dynamic",
    )
    notifications = relationship(
        "Notification",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def is_organizer(self) -> bool:
        """True if the user holds the ORGANIZER role."""
        return self.role == UserRole.ORGANIZER

    @property
    def display_name(self) -> Optional[str]:
        """Name if set, otherwise the email address."""
        return self.name or self.email

    def __repr__(self) -> str:
        return (
            f"<User("
            f"id={self.id}, "
            f"email='{self.email}', "
            f"role={self.role.value if self.role else None}"
            f")>"
        )

    def __str__(self) -> str:
        return self.display_name
