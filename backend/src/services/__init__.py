"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    ConflictError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
)
from backend.src.services.event_service import EventService
from backend.src.services.task_service import TaskService
from backend.src.services.subtask_service import (
    GraphicsTaskService,
    LogisticsTaskService,
    OutreachTaskService,
    SponsorshipTaskService,
)
from backend.src.services.notification_service import NotificationService
from backend.src.services.notification_checker import NotificationChecker
from backend.src.services.preferences_service import PreferencesService

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "EventService",
    "TaskService",
    "GraphicsTaskService",
    "LogisticsTaskService",
    "OutreachTaskService",
    "SponsorshipTaskService",
    "NotificationService",
    "NotificationChecker",
    "PreferencesService",
]
