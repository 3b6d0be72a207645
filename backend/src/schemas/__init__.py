"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.user import (
    ThemePreference,
    CalendarView,
    UserSummary,
    IdentityResponse,
    PreferencesResponse,
    PreferencesUpdate,
)
from backend.src.schemas.event import (
    EventCreate,
    EventDistributeRequest,
    EventResponse,
)
from backend.src.schemas.subtask import (
    TaskSummary,
    StageHistoryEntry,
    GraphicsTaskCreate,
    GraphicsTaskUpdate,
    GraphicsTaskResponse,
    LogisticsTaskCreate,
    LogisticsTaskUpdate,
    LogisticsTaskResponse,
    OutreachTaskCreate,
    OutreachTaskUpdate,
    OutreachTaskResponse,
    SponsorshipTaskCreate,
    SponsorshipTaskUpdate,
    SponsorshipTaskResponse,
)
from backend.src.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskDetailResponse,
)
from backend.src.schemas.notifications import (
    NotificationSend,
    NotificationMarkRead,
    NotificationResponse,
    NotificationListResponse,
    UnreadCountResponse,
    CheckResultResponse,
)

__all__ = [
    # Users
    "ThemePreference",
    "CalendarView",
    "UserSummary",
    "IdentityResponse",
    "PreferencesResponse",
    "PreferencesUpdate",
    # Events
    "EventCreate",
    "EventDistributeRequest",
    "EventResponse",
    # Sub-tasks
    "TaskSummary",
    "StageHistoryEntry",
    "GraphicsTaskCreate",
    "GraphicsTaskUpdate",
    "GraphicsTaskResponse",
    "LogisticsTaskCreate",
    "LogisticsTaskUpdate",
    "LogisticsTaskResponse",
    "OutreachTaskCreate",
    "OutreachTaskUpdate",
    "OutreachTaskResponse",
    "SponsorshipTaskCreate",
    "SponsorshipTaskUpdate",
    "SponsorshipTaskResponse",
    # Tasks
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskDetailResponse",
    # Notifications
    "NotificationSend",
    "NotificationMarkRead",
    "NotificationResponse",
    "NotificationListResponse",
    "UnreadCountResponse",
    "CheckResultResponse",
]
