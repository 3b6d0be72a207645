"""
Pydantic schemas for users, identity, and preferences.

Provides data validation and serialization for:
- User summaries embedded in task and sub-task responses
- The current identity (GET /api/users/me)
- Persisted app-state preferences (GET/PATCH /api/users/me/preferences)
"""

import enum
from typing import Optional

from pydantic import BaseModel, Field

from backend.src.models import UserRole


class ThemePreference(str, enum.Enum):
    """UI theme preference."""
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class CalendarView(str, enum.Enum):
    """Default calendar view."""
    WEEK = "week"
    MONTH = "month"


class UserSummary(BaseModel):
    """Summary of a user for inclusion in other responses."""

    guid: str = Field(..., description="User GUID (usr_xxx)")
    name: Optional[str] = None
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class IdentityResponse(BaseModel):
    """The authenticated identity of the current request."""

    guid: str = Field(..., description="User GUID (usr_xxx)")
    email: str
    name: Optional[str] = None
    role: UserRole
    is_organizer: bool
    auth_method: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "guid": "usr_01hgw2bbg0000000000000001",
                "email": "lead@example.com",
                "name": "Event Lead",
                "role": "ORGANIZER",
                "is_organizer": True,
                "auth_method": "token",
            }
        }
    }


class PreferencesResponse(BaseModel):
    """Persisted subset of the user's app state."""

    theme_preference: ThemePreference = ThemePreference.SYSTEM
    calendar_view: CalendarView = CalendarView.MONTH
    sidebar_collapsed: bool = False


class PreferencesUpdate(BaseModel):
    """
    Partial preferences update.

    Only fields present in the request body are merged.
    """

    theme_preference: Optional[ThemePreference] = None
    calendar_view: Optional[CalendarView] = None
    sidebar_collapsed: Optional[bool] = None
