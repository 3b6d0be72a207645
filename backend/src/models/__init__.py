"""
SQLAlchemy models for the event task workflow backend.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Import all models here so they are registered with Base.metadata
# This is required for Alembic autogenerate to detect models
from backend.src.models.user import User, UserRole
from backend.src.models.event import Event, EventStatus
from backend.src.models.task import Task, TaskCategory, TaskStatus
from backend.src.models.graphics_task import GraphicsTask, GraphicsStatus
from backend.src.models.logistics_task import LogisticsTask, LogisticsStatus
from backend.src.models.outreach_task import OutreachTask, OutreachStatus
from backend.src.models.sponsorship_task import SponsorshipTask, SponsorStage
from backend.src.models.notification import (
    Notification,
    NotificationCategory,
    NotificationOrigin,
)

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Event",
    "EventStatus",
    "Task",
    "TaskCategory",
    "TaskStatus",
    "GraphicsTask",
    "GraphicsStatus",
    "LogisticsTask",
    "LogisticsStatus",
    "OutreachTask",
    "OutreachStatus",
    "SponsorshipTask",
    "SponsorStage",
    "Notification",
    "NotificationCategory",
    "NotificationOrigin",
]
