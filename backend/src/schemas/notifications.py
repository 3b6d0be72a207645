"""
Pydantic schemas for notification API request/response validation.

Provides data validation and serialization for:
- Notification history (list, unread count)
- Sending a notification to a user
- Marking a notification read or unread
- Notification checker run results
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_serializer

from backend.src.models import NotificationCategory, NotificationOrigin


# ============================================================================
# Request Schemas
# ============================================================================


class NotificationSend(BaseModel):
    """
    Schema for sending a notification.

    Required:
        message: Notification text

    Optional:
        recipient_guid: Recipient (default: the sender); sending to someone
            else is restricted to organizers
        task_guid: Task the notification refers to
    """

    message: str = Field(..., min_length=1, max_length=500)
    recipient_guid: Optional[str] = Field(default=None, description="User GUID (usr_xxx)")
    task_guid: Optional[str] = Field(default=None, description="Task GUID (tsk_xxx)")


class NotificationMarkRead(BaseModel):
    """Schema for marking a notification read or unread."""

    guid: str = Field(..., description="Notification GUID (ntf_xxx)")
    read: bool = Field(default=True)


# ============================================================================
# Response Schemas
# ============================================================================


class NotificationResponse(BaseModel):
    """Response schema for a single notification."""

    guid: str = Field(..., description="Notification GUID (ntf_xxx)")
    category: NotificationCategory
    origin: NotificationOrigin
    message: str
    task_guid: Optional[str] = None
    event_guid: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime

    @field_serializer("read_at", "created_at")
    @classmethod
    def serialize_datetime_utc(cls, v: Optional[datetime]) -> Optional[str]:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    """Response schema for the notification list."""

    items: List[NotificationResponse]
    unread_count: int = Field(..., ge=0)


class UnreadCountResponse(BaseModel):
    """Response schema for unread notification count."""

    unread_count: int = Field(..., ge=0, description="Number of unread notifications")


class CheckResultResponse(BaseModel):
    """Counts of notifications emitted by one checker run."""

    overdue: int = Field(..., ge=0)
    blocked: int = Field(..., ge=0)
    approaching: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
