"""
Application-state preferences.

The client keeps an AppState object: sidebar, theme, calendar view, the
event being worked on, and the calendar's visible date. Only the first
three survive across sessions; they are stored per user under the "app"
key of User.preferences_json. current_event_guid and calendar_date are
transient and never written.
"""

import json
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from backend.src.middleware.identity import Identity
from backend.src.models import User
from backend.src.services.authorization import Action, authorize
from backend.src.services.exceptions import ValidationError
from backend.src.services.user_service import UserService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


PREFERENCES_KEY = "app"

THEME_CHOICES = ("light", "dark", "system")
CALENDAR_VIEW_CHOICES = ("week", "month")


@dataclass
class AppState:
    """
    Client application state.

    Persisted: theme_preference, calendar_view, sidebar_collapsed.
    Transient: current_event_guid, calendar_date.
    """

    theme_preference: str = "system"
    calendar_view: str = "month"
    sidebar_collapsed: bool = False
    current_event_guid: Optional[str] = None
    calendar_date: Optional[str] = None

    PERSISTED_FIELDS = ("theme_preference", "calendar_view", "sidebar_collapsed")

    def persisted(self) -> Dict[str, Any]:
        """Return only the fields that are stored."""
        data = asdict(self)
        return {key: data[key] for key in self.PERSISTED_FIELDS}

    @classmethod
    def from_persisted(cls, data: Optional[Dict[str, Any]]) -> "AppState":
        """Build state from stored data, ignoring unknown or transient keys."""
        state = cls()
        for key in cls.PERSISTED_FIELDS:
            if data and key in data:
                setattr(state, key, data[key])
        return state

    def validate(self) -> None:
        """
        Raises:
            ValidationError: If a persisted field has an invalid value
        """
        if self.theme_preference not in THEME_CHOICES:
            raise ValidationError(
                f"Invalid theme_preference: {self.theme_preference}",
                field="theme_preference",
            )
        if self.calendar_view not in CALENDAR_VIEW_CHOICES:
            raise ValidationError(
                f"Invalid calendar_view: {self.calendar_view}",
                field="calendar_view",
            )
        if not isinstance(self.sidebar_collapsed, bool):
            raise ValidationError(
                "sidebar_collapsed must be a boolean", field="sidebar_collapsed"
            )


class PreferencesService:
    """
    Reads and merges the persisted subset of AppState.

    Usage:
        >>> service = PreferencesService(db_session)
        >>> service.update(identity, {"theme_preference": "dark"})
        {'theme_preference': 'dark', 'calendar_view': 'month', 'sidebar_collapsed': False}
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserService(db)

    def _load(self, user: User) -> Dict[str, Any]:
        if not user.preferences_json:
            return {}
        try:
            data = json.loads(user.preferences_json)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Ignoring unreadable preferences for {user.guid}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_state(self, user: User) -> AppState:
        """Return the user's AppState with defaults for missing fields."""
        return AppState.from_persisted(self._load(user).get(PREFERENCES_KEY))

    def get(self, identity: Optional[Identity]) -> Dict[str, Any]:
        """Return the identity's persisted preferences."""
        authorize(identity, Action.PROFILE_MANAGE)
        user = self.users.get_by_id(identity.user_id)
        return self.get_state(user).persisted()

    def update(self, identity: Optional[Identity], changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge a partial update into the identity's preferences.

        Unknown and transient keys are ignored; None leaves a field unchanged.

        Returns:
            Updated persisted preferences

        Raises:
            ValidationError: If a value is not allowed
        """
        authorize(identity, Action.PROFILE_MANAGE)
        user = self.users.get_by_id(identity.user_id)

        state = self.get_state(user)
        for key, value in changes.items():
            if key in AppState.PERSISTED_FIELDS and value is not None:
                setattr(state, key, getattr(value, "value", value))
        state.validate()

        stored = self._load(user)
        stored[PREFERENCES_KEY] = state.persisted()
        user.preferences_json = json.dumps(stored)
        self.db.commit()

        logger.info(
            "Updated app preferences",
            extra={"user_guid": user.guid, "fields": sorted(changes)},
        )
        return state.persisted()
