"""
Task service for managing work items on events.

Provides business logic for listing, retrieving, creating, updating, and
deleting tasks.

Design:
- Core members see and update only the tasks they own
- Updates are partial: only fields present in the request are applied
- A task cannot become BLOCKED without a blocker note
- Reassigning and deleting are organizer actions
- status_changed_at is stamped on every status transition
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from backend.src.middleware.identity import Identity
from backend.src.models import Task, TaskCategory, TaskStatus
from backend.src.services.authorization import (
    Action,
    authorize,
    ensure_task_access,
    resolve_owner,
)
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.services.guid import GuidService
from backend.src.services.user_service import UserService, build_user_summary
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


# Fields a task update may carry
UPDATABLE_FIELDS = ("title", "deadline", "status", "blocker_note", "owner_guid")


class TaskService:
    """
    Service for managing tasks.

    Usage:
        >>> service = TaskService(db_session)
        >>> task = service.create(
        ...     identity,
        ...     event_guid="evt_...",
        ...     category=TaskCategory.GRAPHICS,
        ...     title="Launch banner",
        ...     deadline=datetime(2026, 11, 1),
        ... )
        >>> service.update(identity, task.guid, {"status": TaskStatus.IN_PROGRESS})
    """

    def __init__(self, db: Session):
        """
        Initialize task service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.users = UserService(db)

    def get_by_guid(self, guid: str) -> Task:
        """
        Get a task by GUID with its owner, event, and sub-records loaded.

        Raises:
            NotFoundError: If task not found
        """
        if not GuidService.validate_guid(guid, "tsk"):
            raise NotFoundError("Task", guid)

        try:
            uuid_value = GuidService.parse_guid(guid, "tsk")
        except ValueError:
            raise NotFoundError("Task", guid)

        task = (
            self.db.query(Task)
            .options(
                joinedload(Task.owner),
                joinedload(Task.event),
                joinedload(Task.graphics_task),
                joinedload(Task.logistics_task),
                joinedload(Task.outreach_task),
                joinedload(Task.sponsorship_task),
            )
            .filter(Task.uuid == uuid_value)
            .first()
        )
        if not task:
            raise NotFoundError("Task", guid)

        return task

    def get(self, identity: Optional[Identity], guid: str) -> Task:
        """
        Get a task on behalf of an identity.

        Raises:
            UnauthorizedError: If there is no identity
            NotFoundError: If task not found
            ForbiddenError: If a core member does not own the task
        """
        authorize(identity, Action.TASK_READ)
        task = self.get_by_guid(guid)
        ensure_task_access(identity, task)
        return task

    def list(
        self,
        identity: Optional[Identity],
        event_guid: Optional[str] = None,
        owner_guid: Optional[str] = None,
        category: Optional[TaskCategory] = None,
        status: Optional[TaskStatus] = None,
    ) -> List[Task]:
        """
        List tasks ordered by deadline ascending.

        Core members only ever see their own tasks, whatever the filters.

        Args:
            identity: Request identity
            event_guid: Filter by event
            owner_guid: Filter by owner
            category: Filter by category
            status: Filter by status

        Returns:
            List of Task instances

        Raises:
            NotFoundError: If event_guid or owner_guid does not resolve
        """
        authorize(identity, Action.TASK_LIST)

        query = self.db.query(Task).options(
            joinedload(Task.owner),
            joinedload(Task.event),
        )

        if event_guid:
            event = EventService(self.db).get_by_guid(event_guid)
            query = query.filter(Task.event_id == event.id)

        if owner_guid:
            owner = self.users.get_by_guid(owner_guid)
            query = query.filter(Task.owner_id == owner.id)

        if category:
            query = query.filter(Task.category == category)

        if status:
            query = query.filter(Task.status == status)

        if not identity.is_organizer:
            query = query.filter(Task.owner_id == identity.user_id)

        return query.order_by(Task.deadline.asc(), Task.id.asc()).all()

    def create(
        self,
        identity: Optional[Identity],
        event_guid: str,
        category: TaskCategory,
        title: str,
        deadline: datetime,
        owner_guid: Optional[str] = None,
    ) -> Task:
        """
        Create a task in PENDING status.

        Args:
            identity: Request identity
            event_guid: Owning event GUID
            category: Task category
            title: Short description
            deadline: Due date and time (naive UTC)
            owner_guid: Responsible user (default: the requester)

        Returns:
            Created Task instance

        Raises:
            ValidationError: If a required field is missing or the owner is unknown
            NotFoundError: If the event does not exist
        """
        authorize(identity, Action.TASK_CREATE)

        missing = [
            name for name, value in (
                ("category", category),
                ("title", title.strip() if title else title),
                ("deadline", deadline),
            ) if not value
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field=missing[0],
            )

        event = EventService(self.db).get_by_guid(event_guid)
        owner = self.users.get_reference(resolve_owner(identity, owner_guid))

        now = datetime.utcnow()
        task = Task(
            event_id=event.id,
            category=category,
            title=title.strip(),
            deadline=deadline,
            status=TaskStatus.PENDING,
            owner_id=owner.id,
            status_changed_at=now,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

        logger.info(
            f"Created task: {task.guid} - {task.title}",
            extra={
                "task_guid": task.guid,
                "event_guid": event.guid,
                "owner_guid": owner.guid,
            },
        )
        return task

    def update(
        self,
        identity: Optional[Identity],
        guid: str,
        changes: Dict[str, Any],
    ) -> Task:
        """
        Apply a partial update to a task.

        Only keys present in ``changes`` are applied; absent keys leave the
        stored value untouched.

        Args:
            identity: Request identity
            guid: Task GUID
            changes: Fields to apply (subset of UPDATABLE_FIELDS)

        Returns:
            Updated Task instance

        Raises:
            NotFoundError: If task not found
            ForbiddenError: If a core member does not own the task, or a
                non-organizer changes the owner
            ValidationError: If BLOCKED is set without a blocker note, or a
                required field is cleared
        """
        authorize(identity, Action.TASK_UPDATE)
        task = self.get_by_guid(guid)
        ensure_task_access(identity, task)

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )

        for required in ("title", "deadline", "status"):
            if required in changes and not changes[required]:
                raise ValidationError(f"{required} cannot be empty", field=required)

        new_owner = None
        if "owner_guid" in changes:
            if not changes["owner_guid"]:
                raise ValidationError("owner_guid cannot be empty", field="owner_guid")
            new_owner = self.users.get_reference(changes["owner_guid"])
            if new_owner.id != task.owner_id:
                authorize(identity, Action.TASK_REASSIGN)

        # Checked against the resulting task, so clearing the note of a
        # task that stays BLOCKED is rejected too
        new_status = changes.get("status")
        final_status = new_status if new_status is not None else task.status
        if final_status == TaskStatus.BLOCKED:
            note = changes["blocker_note"] if "blocker_note" in changes else task.blocker_note
            if not note or not note.strip():
                raise ValidationError(
                    "Blocker note is required when blocking a task",
                    field="blocker_note",
                )

        # All checks passed; apply
        if "title" in changes:
            task.title = changes["title"].strip()
        if "deadline" in changes:
            task.deadline = changes["deadline"]
        if "blocker_note" in changes:
            task.blocker_note = changes["blocker_note"]
        if new_owner is not None:
            task.owner_id = new_owner.id
        if new_status is not None and new_status != task.status:
            logger.info(
                f"Task {task.guid} status {task.status.value} -> {new_status.value}",
                extra={"task_guid": task.guid, "user_guid": identity.user_guid},
            )
            task.status = new_status
            task.status_changed_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Updated task: {task.guid}", extra={"fields": sorted(changes)})
        return task

    def delete(self, identity: Optional[Identity], guid: str) -> None:
        """
        Delete a task and its sub-records.

        Raises:
            ForbiddenError: If the identity is not an organizer
            NotFoundError: If task not found
        """
        authorize(identity, Action.TASK_DELETE)
        task = self.get_by_guid(guid)

        self.db.delete(task)
        self.db.commit()

        logger.info(
            f"Deleted task: {guid}",
            extra={"task_guid": guid, "user_guid": identity.user_guid},
        )

    @staticmethod
    def subtask_of(task: Task):
        """Return the specialized sub-record of a task, if any."""
        return (
            task.graphics_task
            or task.logistics_task
            or task.outreach_task
            or task.sponsorship_task
        )

    def build_task_response(self, task: Task) -> dict:
        """
        Build response dict for a task (list view).

        Returns:
            Dictionary matching TaskResponse
        """
        subtask = self.subtask_of(task)
        return {
            "guid": task.guid,
            "event_guid": task.event.guid,
            "category": task.category,
            "title": task.title,
            "deadline": task.deadline,
            "status": task.status,
            "blocker_note": task.blocker_note,
            "owner": build_user_summary(task.owner),
            "subtask_guid": subtask.guid if subtask else None,
            "status_changed_at": task.status_changed_at,
            "created_at": task.created_at,
            "updated_at": task.updated_at,
        }

    def build_task_detail_response(self, task: Task) -> dict:
        """
        Build response dict for a task with its sub-record.

        Returns:
            Dictionary matching TaskDetailResponse
        """
        # Import here to avoid circular imports
        from backend.src.services.subtask_service import build_subtask_response

        response = self.build_task_response(task)
        response["event_name"] = task.event.name
        for attr in ("graphics_task", "logistics_task", "outreach_task", "sponsorship_task"):
            record = getattr(task, attr)
            response[attr] = build_subtask_response(record) if record is not None else None
        return response
