"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Event creation requests
- Template distribution to cities
- Event API responses with task counts

Design:
- GUIDs are exposed via guid property, never internal IDs
- Incoming datetimes are normalized to naive UTC
- Outgoing datetimes carry an explicit "Z" suffix
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from backend.src.models import EventStatus
from backend.src.utils.formatting import format_utc, to_naive_utc


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating a new event.

    Required:
        name: Event name (blank names are rejected by the service)
        date: Date and time of the event

    Optional:
        status: Event status (default: PLANNING)
    """

    name: Optional[str] = Field(default=None, max_length=255)
    date: Optional[datetime] = Field(default=None, description="Event date and time")
    status: Optional[EventStatus] = Field(default=None)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Launch Night",
                "date": "2026-11-14T18:00:00Z",
            }
        }
    }


class EventDistributeRequest(BaseModel):
    """Schema for pushing a template event to cities."""

    cities: List[str] = Field(default_factory=list, description="City names")


# ============================================================================
# Response Schemas
# ============================================================================


class EventResponse(BaseModel):
    """
    Schema for event API responses.

    task_count is the number of tasks referencing the event.
    """

    guid: str = Field(..., description="Event GUID (evt_xxx)")
    name: str
    date: datetime
    status: EventStatus
    task_count: int = Field(default=0)

    # Distribution
    is_template: bool = False
    city: Optional[str] = None
    parent_event_guid: Optional[str] = Field(default=None, description="Template event GUID")

    created_by_guid: Optional[str] = Field(default=None)

    created_at: datetime
    updated_at: datetime

    @field_serializer("date", "created_at", "updated_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return format_utc(v)

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "guid": "evt_01hgw2bbg0000000000000001",
                "name": "Launch Night",
                "date": "2026-11-14T18:00:00Z",
                "status": "PLANNING",
                "task_count": 4,
                "is_template": False,
                "city": None,
                "parent_event_guid": None,
                "created_by_guid": "usr_01hgw2bbg0000000000000001",
                "created_at": "2026-10-01T09:00:00Z",
                "updated_at": "2026-10-01T09:00:00Z",
            }
        },
    }
