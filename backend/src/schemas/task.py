"""
Pydantic schemas for task API request/response validation.

Provides data validation and serialization for:
- Task creation requests
- Partial task updates (only fields present in the body are applied)
- Task API responses (list and detail with sub-records)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from backend.src.models import TaskCategory, TaskStatus
from backend.src.schemas.subtask import (
    GraphicsTaskResponse,
    LogisticsTaskResponse,
    OutreachTaskResponse,
    SponsorshipTaskResponse,
)
from backend.src.schemas.user import UserSummary
from backend.src.utils.formatting import format_utc, to_naive_utc


# ============================================================================
# Request Schemas
# ============================================================================


class TaskCreate(BaseModel):
    """
    Schema for creating a task.

    Required:
        event_guid: Owning event GUID
        category: Task category
        title: Short description
        deadline: Due date and time

    Optional:
        owner_guid: Responsible user (default: the requester)
    """

    event_guid: str = Field(..., description="Event GUID (evt_xxx)")
    category: TaskCategory
    title: str = Field(..., min_length=1, max_length=255)
    deadline: datetime
    owner_guid: Optional[str] = Field(default=None, description="User GUID (usr_xxx)")

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class TaskUpdate(BaseModel):
    """
    Schema for a partial task update.

    Fields omitted from the request body are left unchanged. A task that is
    BLOCKED after the update must have a non-blank blocker_note (from the
    request or already stored).
    Changing owner_guid is restricted to organizers.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    deadline: Optional[datetime] = None
    status: Optional[TaskStatus] = None
    blocker_note: Optional[str] = None
    owner_guid: Optional[str] = Field(default=None, description="New owner GUID")

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


# ============================================================================
# Response Schemas
# ============================================================================


class TaskResponse(BaseModel):
    """Schema for task API responses (list view)."""

    guid: str = Field(..., description="Task GUID (tsk_xxx)")
    event_guid: str
    category: TaskCategory
    title: str
    deadline: datetime
    status: TaskStatus
    blocker_note: Optional[str] = None
    owner: UserSummary
    subtask_guid: Optional[str] = Field(
        default=None, description="GUID of the specialized sub-record, if any"
    )
    status_changed_at: datetime
    created_at: datetime
    updated_at: datetime

    @field_serializer("deadline", "status_changed_at", "created_at", "updated_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return format_utc(v)

    model_config = {"from_attributes": True}


class TaskDetailResponse(TaskResponse):
    """
    Task detail with its specialized sub-record.

    At most one of the sub-record fields is populated, matching the category.
    """

    event_name: str
    graphics_task: Optional[GraphicsTaskResponse] = None
    logistics_task: Optional[LogisticsTaskResponse] = None
    outreach_task: Optional[OutreachTaskResponse] = None
    sponsorship_task: Optional[SponsorshipTaskResponse] = None
