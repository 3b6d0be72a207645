"""
Notification service for in-app notification history.

Handles:
- Creating notification records (checker scans and people)
- Listing a user's notifications, newest first
- Unread count for the notification bell
- Marking a notification read or unread (recipient only)
- Sending a notification to a user

Design:
- Notifications are always addressed to one user
- Sending to someone other than yourself is an organizer action
- List results are capped at MAX_LIST_LIMIT
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.src.middleware.identity import Identity
from backend.src.models import Notification, NotificationCategory, NotificationOrigin
from backend.src.services.authorization import (
    Action,
    authorize,
    ensure_recipient,
)
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.services.guid import GuidService
from backend.src.services.task_service import TaskService
from backend.src.services.user_service import UserService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


MAX_LIST_LIMIT = 50
MAX_MESSAGE_LENGTH = 500


class NotificationService:
    """
    Service for managing notifications.

    Usage:
        >>> service = NotificationService(db_session)
        >>> items = service.list(identity, unread_only=True)
        >>> service.mark_as_read(identity, items[0].guid)
    """

    def __init__(self, db: Session):
        """
        Initialize notification service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.users = UserService(db)

    def create_notification(
        self,
        user_id: int,
        category: NotificationCategory,
        message: str,
        task_id: Optional[int] = None,
        event_id: Optional[int] = None,
        origin: NotificationOrigin = NotificationOrigin.SYSTEM,
        created_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> Notification:
        """
        Create a notification record in the database.

        Args:
            user_id: Recipient user's internal ID
            category: Notification category
            message: Notification text (truncated to 500 chars)
            task_id: Related task ID
            event_id: Related event ID
            origin: SYSTEM or HUMAN
            created_at: Creation time (default: now)
            commit: Commit immediately; batch callers commit once themselves

        Returns:
            Created Notification instance
        """
        notification = Notification(
            user_id=user_id,
            task_id=task_id,
            event_id=event_id,
            category=category,
            origin=origin,
            message=message[:MAX_MESSAGE_LENGTH],
            created_at=created_at or datetime.utcnow(),
        )
        self.db.add(notification)
        if commit:
            self.db.commit()
            self.db.refresh(notification)
            logger.info(
                "Created notification",
                extra={
                    "guid": notification.guid,
                    "category": category.value,
                    "user_id": user_id,
                },
            )
        return notification

    def get_by_guid(self, guid: str) -> Notification:
        """
        Get a notification by GUID.

        Raises:
            NotFoundError: If not found
        """
        if not GuidService.validate_guid(guid, "ntf"):
            raise NotFoundError("Notification", guid)

        try:
            uuid_value = GuidService.parse_guid(guid, "ntf")
        except ValueError:
            raise NotFoundError("Notification", guid)

        notification = (
            self.db.query(Notification)
            .filter(Notification.uuid == uuid_value)
            .first()
        )
        if not notification:
            raise NotFoundError("Notification", guid)

        return notification

    def list(
        self,
        identity: Optional[Identity],
        unread_only: bool = False,
        limit: int = MAX_LIST_LIMIT,
    ) -> List[Notification]:
        """
        List the identity's notifications, newest first.

        Args:
            identity: Request identity
            unread_only: Only return unread notifications
            limit: Maximum number of items (capped at 50)

        Returns:
            List of Notification instances
        """
        authorize(identity, Action.NOTIFICATION_READ)

        limit = max(1, min(limit, MAX_LIST_LIMIT))

        query = self.db.query(Notification).filter(
            Notification.user_id == identity.user_id
        )
        if unread_only:
            query = query.filter(Notification.read_at.is_(None))

        return (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    def unread_count(self, identity: Optional[Identity]) -> int:
        """Count the identity's unread notifications."""
        authorize(identity, Action.NOTIFICATION_READ)

        return (
            self.db.query(func.count(Notification.id))
            .filter(
                Notification.user_id == identity.user_id,
                Notification.read_at.is_(None),
            )
            .scalar()
        ) or 0

    def mark_as_read(
        self,
        identity: Optional[Identity],
        guid: str,
        read: bool = True,
    ) -> Notification:
        """
        Mark a notification read (or unread again).

        Args:
            identity: Request identity
            guid: Notification GUID
            read: True to mark read, False to mark unread

        Returns:
            Updated Notification instance

        Raises:
            NotFoundError: If not found
            ForbiddenError: If the notification is addressed to someone else
        """
        authorize(identity, Action.NOTIFICATION_READ)
        notification = self.get_by_guid(guid)
        ensure_recipient(identity, notification)

        if read and notification.read_at is None:
            notification.read_at = datetime.utcnow()
        elif not read:
            notification.read_at = None

        self.db.commit()
        self.db.refresh(notification)
        return notification

    def send(
        self,
        identity: Optional[Identity],
        message: str,
        recipient_guid: Optional[str] = None,
        task_guid: Optional[str] = None,
    ) -> Notification:
        """
        Send a notification from a person.

        Args:
            identity: Sender identity
            message: Notification text
            recipient_guid: Recipient (default: the sender)
            task_guid: Related task

        Returns:
            Created Notification instance

        Raises:
            ForbiddenError: If a non-organizer sends to someone else
            ValidationError: Empty or too long message, unknown recipient or task
        """
        authorize(identity, Action.NOTIFICATION_READ)

        if not message or not message.strip():
            raise ValidationError("Missing required field: message", field="message")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters",
                field="message",
            )

        recipient_guid = recipient_guid or identity.user_guid
        if recipient_guid != identity.user_guid:
            authorize(identity, Action.NOTIFICATION_SEND_OTHERS)
        recipient = self.users.get_reference(recipient_guid, field="recipient_guid")

        task = None
        if task_guid:
            try:
                task = TaskService(self.db).get_by_guid(task_guid)
            except NotFoundError:
                raise ValidationError(f"Task not found: {task_guid}", field="task_guid")

        notification = self.create_notification(
            user_id=recipient.id,
            category=NotificationCategory.GENERAL,
            message=message.strip(),
            task_id=task.id if task else None,
            event_id=task.event_id if task else None,
            origin=NotificationOrigin.HUMAN,
        )

        logger.info(
            f"Notification {notification.guid} sent by {identity.user_guid} to {recipient.guid}",
            extra={"sender_guid": identity.user_guid, "recipient_guid": recipient.guid},
        )
        return notification

    def build_notification_response(self, notification: Notification) -> dict:
        """
        Build response dict for a notification.

        Returns:
            Dictionary matching NotificationResponse
        """
        return {
            "guid": notification.guid,
            "category": notification.category,
            "origin": notification.origin,
            "message": notification.message,
            "task_guid": notification.task.guid if notification.task else None,
            "event_guid": notification.event.guid if notification.event else None,
            "read_at": notification.read_at,
            "created_at": notification.created_at,
        }
