"""
Pydantic schemas for task sub-resources.

Each task may carry one specialized sub-record matching its category:
- graphics: asset type, formats, design status, final output link
- logistics: readiness status
- outreach: channel, content link, schedule, status, outcome note
- sponsorship: stage, next action, follow-up deadline, stage history

Design:
- Create schemas leave category-required fields optional so the sub-task
  services report missing fields with a single ValidationError
- Update schemas carry the sub-record GUID in the body; fields omitted from
  the body are left unchanged, explicit nulls clear nullable fields
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from backend.src.models import (
    GraphicsStatus,
    LogisticsStatus,
    OutreachStatus,
    SponsorStage,
    TaskCategory,
    TaskStatus,
)
from backend.src.schemas.user import UserSummary
from backend.src.utils.formatting import format_utc, to_naive_utc


# ============================================================================
# Shared
# ============================================================================


class TaskSummary(BaseModel):
    """Summary of the parent task for inclusion in sub-record responses."""

    guid: str = Field(..., description="Task GUID (tsk_xxx)")
    event_guid: str
    title: str
    category: TaskCategory
    status: TaskStatus
    deadline: datetime

    @field_serializer("deadline")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        return format_utc(v)


class StageHistoryEntry(BaseModel):
    """One sponsorship stage transition."""

    stage: SponsorStage
    changed_at: datetime

    @field_validator("changed_at")
    @classmethod
    def normalize_changed_at(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_serializer("changed_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        return format_utc(v)


class SubTaskResponseBase(BaseModel):
    """Fields shared by every sub-record response."""

    guid: str
    task_guid: str
    owner_guid: str
    task: TaskSummary
    owner: UserSummary
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    @classmethod
    def serialize_timestamps_utc(cls, v: datetime) -> str:
        return format_utc(v)


# ============================================================================
# Graphics
# ============================================================================


class GraphicsTaskCreate(BaseModel):
    """
    Create a graphics sub-record.

    Required (checked by the service): asset_type, non-empty formats.
    Status always starts at REQUESTED.
    """

    task_guid: str = Field(..., description="Task GUID (tsk_xxx)")
    asset_type: Optional[str] = Field(
        default=None, max_length=50, description="Asset kind, e.g. poster, story, banner"
    )
    formats: Optional[List[str]] = None
    owner_guid: Optional[str] = Field(default=None, description="Owner (default: requester)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "task_guid": "tsk_01hgw2bbg0000000000000001",
                "asset_type": "banner",
                "formats": ["png", "svg"],
            }
        }
    }


class GraphicsTaskUpdate(BaseModel):
    """Partial graphics update: status and final_output_link."""

    guid: Optional[str] = Field(default=None, description="Graphics GUID (gfx_xxx)")
    status: Optional[GraphicsStatus] = None
    final_output_link: Optional[str] = None


class GraphicsTaskResponse(SubTaskResponseBase):
    """Graphics sub-record response."""

    asset_type: str
    formats: List[str]
    status: GraphicsStatus
    final_output_link: Optional[str] = None


# ============================================================================
# Logistics
# ============================================================================


class LogisticsTaskCreate(BaseModel):
    """
    Create a logistics sub-record.

    Required (checked by the service): status. The client picks the
    initial status.
    """

    task_guid: str = Field(..., description="Task GUID (tsk_xxx)")
    status: Optional[LogisticsStatus] = None
    owner_guid: Optional[str] = None


class LogisticsTaskUpdate(BaseModel):
    """Partial logistics update: status."""

    guid: Optional[str] = Field(default=None, description="Logistics GUID (lgx_xxx)")
    status: Optional[LogisticsStatus] = None


class LogisticsTaskResponse(SubTaskResponseBase):
    """Logistics sub-record response."""

    status: LogisticsStatus


# ============================================================================
# Outreach
# ============================================================================


class OutreachTaskCreate(BaseModel):
    """
    Create an outreach sub-record.

    Required (checked by the service): channel. Status always starts at
    PENDING.
    """

    task_guid: str = Field(..., description="Task GUID (tsk_xxx)")
    channel: Optional[str] = Field(
        default=None, max_length=50, description="Channel, e.g. instagram, email, partner"
    )
    content_link: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    owner_guid: Optional[str] = None

    @field_validator("scheduled_time")
    @classmethod
    def normalize_scheduled_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class OutreachTaskUpdate(BaseModel):
    """Partial outreach update: status and outcome_note."""

    guid: Optional[str] = Field(default=None, description="Outreach GUID (otr_xxx)")
    status: Optional[OutreachStatus] = None
    outcome_note: Optional[str] = None


class OutreachTaskResponse(SubTaskResponseBase):
    """Outreach sub-record response."""

    channel: str
    content_link: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    status: OutreachStatus
    outcome_note: Optional[str] = None

    @field_serializer("scheduled_time")
    @classmethod
    def serialize_scheduled_time(cls, v: Optional[datetime]) -> Optional[str]:
        return format_utc(v)


# ============================================================================
# Sponsorship
# ============================================================================


class SponsorshipTaskCreate(BaseModel):
    """
    Create a sponsorship sub-record.

    Required (checked by the service): current_stage. The stage history
    starts with the initial stage.
    """

    task_guid: str = Field(..., description="Task GUID (tsk_xxx)")
    current_stage: Optional[SponsorStage] = None
    next_action: Optional[str] = None
    follow_up_deadline: Optional[datetime] = None
    owner_guid: Optional[str] = None

    @field_validator("follow_up_deadline")
    @classmethod
    def normalize_follow_up(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class SponsorshipTaskUpdate(BaseModel):
    """
    Partial sponsorship update.

    A stage change without an explicit status_history appends a history
    entry for the new stage.
    """

    guid: Optional[str] = Field(default=None, description="Sponsorship GUID (spn_xxx)")
    current_stage: Optional[SponsorStage] = None
    next_action: Optional[str] = None
    follow_up_deadline: Optional[datetime] = None
    status_history: Optional[List[StageHistoryEntry]] = None

    @field_validator("follow_up_deadline")
    @classmethod
    def normalize_follow_up(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class SponsorshipTaskResponse(SubTaskResponseBase):
    """Sponsorship sub-record response."""

    current_stage: SponsorStage
    next_action: Optional[str] = None
    follow_up_deadline: Optional[datetime] = None
    status_history: List[StageHistoryEntry] = Field(default_factory=list)

    @field_serializer("follow_up_deadline")
    @classmethod
    def serialize_follow_up(cls, v: Optional[datetime]) -> Optional[str]:
        return format_utc(v)
