"""
Notification checker.

Scans tasks and emits SYSTEM notifications to task owners:
- check_overdue: deadline passed and not DONE
- check_blocked: BLOCKED for at least the threshold
- check_approaching_deadlines: deadline within the lookahead window, not DONE

Each scan reads the matching tasks, drops those already notified for the
same (recipient, task, category) inside the de-duplication window, and
inserts the rest in one commit. An immediate second run emits nothing.

The checker has no identity; it is triggered by a scheduler through
POST /api/notifications/check.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from backend.src.models import Notification, NotificationCategory, Task, TaskStatus
from backend.src.services.exceptions import ValidationError
from backend.src.services.notification_service import NotificationService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


DEFAULT_BLOCKED_THRESHOLD_HOURS = 24
DEFAULT_LOOKAHEAD_HOURS = 24

# De-duplication windows per category
DEDUP_WINDOWS: Dict[NotificationCategory, timedelta] = {
    NotificationCategory.TASK_OVERDUE: timedelta(hours=24),
    NotificationCategory.TASK_BLOCKED: timedelta(hours=24),
    NotificationCategory.DEADLINE_APPROACHING: timedelta(hours=12),
}


class NotificationChecker:
    """
    Runs the notification scans.

    Usage:
        >>> checker = NotificationChecker(db_session)
        >>> counts = checker.run_all()
        >>> counts["total"]
        3
    """

    def __init__(self, db: Session):
        """
        Initialize notification checker.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.notifications = NotificationService(db)

    def check_overdue(self, now: Optional[datetime] = None) -> int:
        """
        Notify owners of tasks whose deadline has passed and are not DONE.

        Args:
            now: Scan time (naive UTC, default: current time)

        Returns:
            Number of notifications created
        """
        now = now or datetime.utcnow()
        tasks = (
            self.db.query(Task)
            .filter(Task.deadline < now, Task.status != TaskStatus.DONE)
            .order_by(Task.deadline.asc(), Task.id.asc())
            .all()
        )
        return self._emit(
            tasks,
            NotificationCategory.TASK_OVERDUE,
            now,
            lambda task: f'Task "{task.title}" is overdue',
        )

    def check_blocked(
        self,
        threshold_hours: int = DEFAULT_BLOCKED_THRESHOLD_HOURS,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Notify owners of tasks BLOCKED for at least threshold_hours.

        Time blocked is measured from status_changed_at.

        Args:
            threshold_hours: Minimum hours in BLOCKED (must be > 0)
            now: Scan time (naive UTC, default: current time)

        Returns:
            Number of notifications created

        Raises:
            ValidationError: If threshold_hours is not positive
        """
        if threshold_hours is None or threshold_hours <= 0:
            raise ValidationError(
                "Blocked threshold must be greater than zero", field="threshold_hours"
            )

        now = now or datetime.utcnow()
        cutoff = now - timedelta(hours=threshold_hours)
        tasks = (
            self.db.query(Task)
            .filter(Task.status == TaskStatus.BLOCKED, Task.status_changed_at <= cutoff)
            .order_by(Task.status_changed_at.asc(), Task.id.asc())
            .all()
        )
        return self._emit(
            tasks,
            NotificationCategory.TASK_BLOCKED,
            now,
            lambda task: (
                f'Task "{task.title}" has been blocked for at least '
                f"{threshold_hours} hours"
            ),
        )

    def check_approaching_deadlines(
        self,
        now: Optional[datetime] = None,
        lookahead_hours: int = DEFAULT_LOOKAHEAD_HOURS,
    ) -> int:
        """
        Notify owners of tasks due within the lookahead window and not DONE.

        Args:
            now: Scan time (naive UTC, default: current time)
            lookahead_hours: Window size in hours (must be > 0)

        Returns:
            Number of notifications created

        Raises:
            ValidationError: If lookahead_hours is not positive
        """
        if lookahead_hours is None or lookahead_hours <= 0:
            raise ValidationError(
                "Lookahead must be greater than zero", field="lookahead_hours"
            )

        now = now or datetime.utcnow()
        horizon = now + timedelta(hours=lookahead_hours)
        tasks = (
            self.db.query(Task)
            .filter(
                Task.deadline >= now,
                Task.deadline <= horizon,
                Task.status != TaskStatus.DONE,
            )
            .order_by(Task.deadline.asc(), Task.id.asc())
            .all()
        )
        return self._emit(
            tasks,
            NotificationCategory.DEADLINE_APPROACHING,
            now,
            lambda task: (
                f'Task "{task.title}" deadline is approaching '
                f"(due {task.deadline:%Y-%m-%d %H:%M} UTC)"
            ),
        )

    def run_all(
        self,
        blocked_threshold_hours: int = DEFAULT_BLOCKED_THRESHOLD_HOURS,
        lookahead_hours: int = DEFAULT_LOOKAHEAD_HOURS,
        now: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """
        Run the three scans sequentially.

        Returns:
            Counts per scan plus the total
        """
        now = now or datetime.utcnow()
        counts = {
            "overdue": self.check_overdue(now=now),
            "blocked": self.check_blocked(threshold_hours=blocked_threshold_hours, now=now),
            "approaching": self.check_approaching_deadlines(
                now=now, lookahead_hours=lookahead_hours
            ),
        }
        counts["total"] = sum(counts.values())

        logger.info("Notification check completed", extra={"counts": counts})
        return counts

    def _already_notified(
        self,
        tasks: List[Task],
        category: NotificationCategory,
        now: datetime,
    ) -> Set[tuple]:
        """(user_id, task_id) pairs notified for category inside its window."""
        if not tasks:
            return set()

        since = now - DEDUP_WINDOWS[category]
        rows = (
            self.db.query(Notification.user_id, Notification.task_id)
            .filter(
                Notification.category == category,
                Notification.task_id.in_([task.id for task in tasks]),
                Notification.created_at >= since,
            )
            .all()
        )
        return {(user_id, task_id) for user_id, task_id in rows}

    def _emit(self, tasks: List[Task], category: NotificationCategory, now: datetime, render) -> int:
        already = self._already_notified(tasks, category, now)

        created = 0
        for task in tasks:
            if (task.owner_id, task.id) in already:
                continue
            self.notifications.create_notification(
                user_id=task.owner_id,
                category=category,
                message=render(task),
                task_id=task.id,
                event_id=task.event_id,
                created_at=now,
                commit=False,
            )
            created += 1

        if created:
            self.db.commit()

        logger.info(
            f"{category.value} scan: {len(tasks)} matching, {created} notified",
            extra={"category": category.value, "matching": len(tasks), "notified": created},
        )
        return created
