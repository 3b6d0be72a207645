"""
Notifications API endpoints.

Provides endpoints for:
- Listing the caller's notification history
- Getting the unread count
- Sending a notification (to self, or to others as an organizer)
- Marking a notification read or unread
- Running the notification checker (scheduler trigger)
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.api.errors import service_error_to_http
from backend.src.config.settings import get_settings
from backend.src.db.database import get_db
from backend.src.middleware.identity import Identity, get_identity
from backend.src.schemas.notifications import (
    CheckResultResponse,
    NotificationListResponse,
    NotificationMarkRead,
    NotificationResponse,
    NotificationSend,
    UnreadCountResponse,
)
from backend.src.services.exceptions import ServiceError
from backend.src.services.notification_checker import NotificationChecker
from backend.src.services.notification_service import MAX_LIST_LIMIT, NotificationService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Create NotificationService instance with database session."""
    return NotificationService(db=db)


def get_notification_checker(db: Session = Depends(get_db)) -> NotificationChecker:
    """Create NotificationChecker instance with database session."""
    return NotificationChecker(db=db)


def verify_cron_secret(
    x_cron_secret: Optional[str] = Header(default=None, alias="X-Cron-Secret"),
) -> None:
    """
    Guard for the checker trigger.

    Open when CRON_SECRET is not configured; otherwise the X-Cron-Secret
    header must match.
    """
    expected = get_settings().cron_secret
    if not expected:
        return
    if not x_cron_secret or not hmac.compare_digest(x_cron_secret, expected):
        logger.warning("Rejected notification check trigger: bad cron secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid cron secret",
        )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
    description="List the caller's notifications, newest first",
)
async def list_notifications(
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notification_service),
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    limit: int = Query(
        default=MAX_LIST_LIMIT,
        ge=1,
        le=MAX_LIST_LIMIT,
        description="Maximum number of items",
    ),
) -> NotificationListResponse:
    """
    List notifications for the current user.

    Returns:
        Items plus the total unread count
    """
    try:
        notifications = service.list(identity, unread_only=unread_only, limit=limit)
        return NotificationListResponse(
            items=[
                NotificationResponse(**service.build_notification_response(n))
                for n in notifications
            ],
            unread_count=service.unread_count(identity),
        )

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error listing notifications: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list notifications",
        )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
async def get_unread_count(
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notification_service),
) -> UnreadCountResponse:
    """Return the number of unread notifications for the badge."""
    try:
        return UnreadCountResponse(unread_count=service.unread_count(identity))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error getting unread count: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get unread count",
        )


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a notification",
)
async def send_notification(
    data: NotificationSend,
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """
    Send a GENERAL notification.

    Request Body:
        message: Text (1-500 characters)
        recipient_guid: Recipient (default: the sender; others need ORGANIZER)
        task_guid: Related task

    Raises:
        400: Unknown recipient or task
        403: Core member sending to someone else
    """
    try:
        notification = service.send(
            identity,
            message=data.message,
            recipient_guid=data.recipient_guid,
            task_guid=data.task_guid,
        )
        return NotificationResponse(**service.build_notification_response(notification))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error sending notification: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send notification",
        )


@router.put(
    "",
    response_model=NotificationResponse,
    summary="Mark a notification read or unread",
)
async def mark_notification(
    data: NotificationMarkRead,
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """
    Set or clear read_at on one of the caller's notifications.

    Raises:
        403: Notification belongs to someone else
        404: Notification not found
    """
    try:
        notification = service.mark_as_read(identity, data.guid, read=data.read)
        return NotificationResponse(**service.build_notification_response(notification))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error marking notification {data.guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notification",
        )


@router.post(
    "/check",
    response_model=CheckResultResponse,
    summary="Run the notification checker",
    description="Scheduler trigger: overdue, blocked and approaching-deadline scans",
    dependencies=[Depends(verify_cron_secret)],
)
async def run_notification_check(
    checker: NotificationChecker = Depends(get_notification_checker),
) -> CheckResultResponse:
    """
    Run the three scans once.

    Thresholds come from BLOCKED_THRESHOLD_HOURS and DEADLINE_LOOKAHEAD_HOURS.

    Returns:
        Notifications created per scan and in total
    """
    settings = get_settings()
    try:
        counts = checker.run_all(
            blocked_threshold_hours=settings.blocked_threshold_hours,
            lookahead_hours=settings.deadline_lookahead_hours,
        )
        return CheckResultResponse(**counts)

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error running notification check: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to run notification check",
        )
