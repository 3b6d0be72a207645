"""
Sub-task services for specialized task records.

Each task may carry one sub-record matching its category. All four kinds
share one contract:

create(identity, task_guid, owner_guid=None, **fields)
    - category-required fields must be present (ValidationError otherwise)
    - the parent task must exist (NotFoundError) and match the kind's
      category (ValidationError)
    - a task holds at most one sub-record of a kind (ConflictError)
    - owner defaults to the requester
    - initial status is forced where the kind defines one

update(identity, guid, changes)
    - the sub-record GUID is required (ValidationError)
    - only keys present in ``changes`` are applied
    - explicit None clears nullable fields; None on a required field is a
      ValidationError
    - sub-record status never propagates to the parent task

Every check runs before the first write, so a rejected call leaves nothing
behind.
"""

import enum
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backend.src.middleware.identity import Identity
from backend.src.models import (
    GraphicsStatus,
    GraphicsTask,
    LogisticsStatus,
    LogisticsTask,
    OutreachStatus,
    OutreachTask,
    SponsorStage,
    SponsorshipTask,
    Task,
    TaskCategory,
)
from backend.src.services.authorization import (
    Action,
    authorize,
    ensure_task_access,
    resolve_owner,
)
from backend.src.services.exceptions import ConflictError, NotFoundError, ValidationError
from backend.src.services.guid import GuidService
from backend.src.services.task_service import TaskService
from backend.src.services.user_service import UserService, build_user_summary
from backend.src.utils.formatting import format_utc, to_naive_utc
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


def _plain(value: Any) -> Any:
    """Unwrap string enums coming from request schemas."""
    if isinstance(value, str) and isinstance(value, enum.Enum):
        return value.value
    return value


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple)) and not value:
        return True
    return False


class SubTaskService:
    """
    Base service for task sub-records.

    Subclasses declare:
        model: SQLAlchemy model class
        prefix: GUID prefix
        kind: Human-readable name used in messages and logs
        category: Task category the sub-record belongs to
        relationship_name: Attribute on Task holding the sub-record
        create_required: Fields that must be present on create
        create_optional: Fields accepted on create
        updatable: Fields accepted on update
        non_nullable: Updatable fields that cannot be cleared
        enum_fields: Fields coerced to model enums
    """

    model: ClassVar[Type]
    prefix: ClassVar[str]
    kind: ClassVar[str]
    category: ClassVar[TaskCategory]
    relationship_name: ClassVar[str]
    create_required: ClassVar[Tuple[str, ...]] = ()
    create_optional: ClassVar[Tuple[str, ...]] = ()
    updatable: ClassVar[Tuple[str, ...]] = ()
    non_nullable: ClassVar[FrozenSet[str]] = frozenset()
    enum_fields: ClassVar[Dict[str, Type[enum.Enum]]] = {}

    def __init__(self, db: Session):
        """
        Initialize sub-task service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.tasks = TaskService(db)
        self.users = UserService(db)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_guid(self, guid: str):
        """
        Get a sub-record by GUID with its task and owner loaded.

        Raises:
            NotFoundError: If not found
        """
        if not GuidService.validate_guid(guid, self.prefix):
            raise NotFoundError(self.kind, guid)

        try:
            uuid_value = GuidService.parse_guid(guid, self.prefix)
        except ValueError:
            raise NotFoundError(self.kind, guid)

        record = (
            self.db.query(self.model)
            .options(
                joinedload(self.model.task).joinedload(Task.event),
                joinedload(self.model.owner),
            )
            .filter(self.model.uuid == uuid_value)
            .first()
        )
        if not record:
            raise NotFoundError(self.kind, guid)
        return record

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        identity: Optional[Identity],
        task_guid: Optional[str],
        owner_guid: Optional[str] = None,
        **fields: Any,
    ):
        """
        Create a sub-record for a task.

        Args:
            identity: Request identity
            task_guid: Parent task GUID
            owner_guid: Owner (default: the requester)
            **fields: Kind-specific fields

        Returns:
            Created sub-record with task and owner loaded

        Raises:
            ValidationError: Missing required field, category mismatch, or
                unknown owner
            NotFoundError: If the task does not exist
            ConflictError: If the task already has a sub-record of this kind
        """
        authorize(identity, Action.SUBTASK_CREATE)

        unknown = set(fields) - set(self.create_required) - set(self.create_optional)
        if unknown:
            raise ValidationError(
                f"Unknown fields for {self.kind}: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )

        missing = [] if task_guid else ["task_guid"]
        missing += [name for name in self.create_required if _is_blank(fields.get(name))]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field=missing[0],
            )

        values = self.coerce_enums({name: _plain(value) for name, value in fields.items()})
        values = self.prepare_create(values)

        task = self.tasks.get_by_guid(task_guid)
        ensure_task_access(identity, task)

        if task.category != self.category:
            raise ValidationError(
                f"Task {task.guid} is {task.category.value}, "
                f"not {self.category.value}",
                field="task_guid",
            )

        if getattr(task, self.relationship_name) is not None:
            raise ConflictError(f"Task {task.guid} already has a {self.kind}")

        owner = self.users.get_reference(resolve_owner(identity, owner_guid))

        record = self.model(task_id=task.id, owner_id=owner.id, **values)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Concurrent create for the same task
            self.db.rollback()
            raise ConflictError(f"Task {task.guid} already has a {self.kind}")
        self.db.refresh(record)

        logger.info(
            f"Created {self.kind}: {record.guid} for task {task.guid}",
            extra={
                "subtask_guid": record.guid,
                "task_guid": task.guid,
                "owner_guid": owner.guid,
            },
        )
        return self.get_by_guid(record.guid)

    def coerce_enums(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert raw values of enum fields to model enums.

        Raises:
            ValidationError: If a value is not a member of the enum
        """
        for name, enum_cls in self.enum_fields.items():
            value = values.get(name)
            if value is None or isinstance(value, enum_cls):
                continue
            try:
                values[name] = enum_cls(value)
            except ValueError:
                allowed = ", ".join(member.value for member in enum_cls)
                raise ValidationError(
                    f"Invalid {name}: {value}. Allowed: {allowed}", field=name
                )
        return values

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize create values and apply forced initial state."""
        return values

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(
        self,
        identity: Optional[Identity],
        guid: Optional[str],
        changes: Dict[str, Any],
    ):
        """
        Apply a partial update to a sub-record.

        Args:
            identity: Request identity
            guid: Sub-record GUID
            changes: Fields explicitly present in the request

        Returns:
            Updated sub-record with task and owner loaded

        Raises:
            ValidationError: Missing GUID, non-updatable field, or a required
                field set to None
            NotFoundError: If the sub-record does not exist
        """
        authorize(identity, Action.SUBTASK_UPDATE)

        if not guid:
            raise ValidationError("Missing required field: guid", field="guid")

        unknown = set(changes) - set(self.updatable)
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated on {self.kind}: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )

        for name in self.non_nullable:
            if name in changes and changes[name] is None:
                raise ValidationError(f"{name} cannot be null", field=name)

        record = self.get_by_guid(guid)
        ensure_task_access(identity, record.task)

        values = self.coerce_enums({name: _plain(value) for name, value in changes.items()})
        values = self.prepare_update(record, values)

        for name, value in values.items():
            setattr(record, name, value)

        self.db.commit()

        logger.info(
            f"Updated {self.kind}: {record.guid}",
            extra={"subtask_guid": record.guid, "fields": sorted(values)},
        )
        return self.get_by_guid(record.guid)

    def prepare_update(self, record, values: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize update values; may add derived fields."""
        return values

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    @staticmethod
    def build_task_summary(task: Task) -> dict:
        return {
            "guid": task.guid,
            "event_guid": task.event.guid,
            "title": task.title,
            "category": task.category,
            "status": task.status,
            "deadline": task.deadline,
        }

    @classmethod
    def build_response(cls, record) -> dict:
        """
        Build response dict for a sub-record.

        Returns:
            Dictionary matching the kind's response schema
        """
        response = {
            "guid": record.guid,
            "task_guid": record.task.guid,
            "owner_guid": record.owner.guid,
            "task": cls.build_task_summary(record.task),
            "owner": build_user_summary(record.owner),
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
        response.update(cls.response_fields(record))
        return response

    @staticmethod
    def response_fields(record) -> dict:
        return {}


class GraphicsTaskService(SubTaskService):
    """Graphics deliverables: asset type, formats, design status."""

    model = GraphicsTask
    prefix = "gfx"
    kind = "GraphicsTask"
    category = TaskCategory.GRAPHICS
    relationship_name = "graphics_task"
    create_required = ("asset_type", "formats")
    updatable = ("status", "final_output_link")
    non_nullable = frozenset({"status"})
    enum_fields = {"status": GraphicsStatus}

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        formats: List[str] = []
        for fmt in values.get("formats") or []:
            cleaned = (fmt or "").strip()
            if cleaned and cleaned not in formats:
                formats.append(cleaned)
        if not formats:
            raise ValidationError("At least one format is required", field="formats")

        values["asset_type"] = values["asset_type"].strip()
        values["formats"] = formats
        values["status"] = GraphicsStatus.REQUESTED
        return values

    @staticmethod
    def response_fields(record) -> dict:
        return {
            "asset_type": record.asset_type,
            "formats": list(record.formats or []),
            "status": record.status,
            "final_output_link": record.final_output_link,
        }


class LogisticsTaskService(SubTaskService):
    """Logistics readiness; the client chooses the initial status."""

    model = LogisticsTask
    prefix = "lgx"
    kind = "LogisticsTask"
    category = TaskCategory.LOGISTICS
    relationship_name = "logistics_task"
    create_required = ("status",)
    updatable = ("status",)
    non_nullable = frozenset({"status"})
    enum_fields = {"status": LogisticsStatus}

    @staticmethod
    def response_fields(record) -> dict:
        return {"status": record.status}


class OutreachTaskService(SubTaskService):
    """Outreach posts and messages per channel."""

    model = OutreachTask
    prefix = "otr"
    kind = "OutreachTask"
    category = TaskCategory.OUTREACH
    relationship_name = "outreach_task"
    create_required = ("channel",)
    create_optional = ("content_link", "scheduled_time")
    updatable = ("status", "outcome_note")
    non_nullable = frozenset({"status"})
    enum_fields = {"status": OutreachStatus}

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        values["channel"] = values["channel"].strip()
        values["scheduled_time"] = to_naive_utc(values.get("scheduled_time"))
        values["status"] = OutreachStatus.PENDING
        return values

    @staticmethod
    def response_fields(record) -> dict:
        return {
            "channel": record.channel,
            "content_link": record.content_link,
            "scheduled_time": record.scheduled_time,
            "status": record.status,
            "outcome_note": record.outcome_note,
        }


def _history_entry(stage: Any, changed_at: Any) -> dict:
    stage_value = stage.value if isinstance(stage, SponsorStage) else SponsorStage(stage).value
    if isinstance(changed_at, datetime):
        changed_at = format_utc(changed_at)
    return {"stage": stage_value, "changed_at": changed_at}


class SponsorshipTaskService(SubTaskService):
    """Sponsor pipeline stage with a history of stage changes."""

    model = SponsorshipTask
    prefix = "spn"
    kind = "SponsorshipTask"
    category = TaskCategory.SPONSORSHIP
    relationship_name = "sponsorship_task"
    create_required = ("current_stage",)
    create_optional = ("next_action", "follow_up_deadline")
    updatable = ("current_stage", "next_action", "follow_up_deadline", "status_history")
    non_nullable = frozenset({"current_stage", "status_history"})
    enum_fields = {"current_stage": SponsorStage}

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        stage = SponsorStage(values["current_stage"])
        values["current_stage"] = stage
        values["follow_up_deadline"] = to_naive_utc(values.get("follow_up_deadline"))
        values["status_history"] = [_history_entry(stage, datetime.utcnow())]
        return values

    def prepare_update(self, record, values: Dict[str, Any]) -> Dict[str, Any]:
        if "current_stage" in values:
            values["current_stage"] = SponsorStage(values["current_stage"])

        if "follow_up_deadline" in values:
            values["follow_up_deadline"] = to_naive_utc(values["follow_up_deadline"])

        if "status_history" in values:
            entries = []
            for entry in values["status_history"]:
                if not isinstance(entry, dict):
                    entry = entry.model_dump()
                try:
                    entries.append(_history_entry(entry["stage"], entry["changed_at"]))
                except (KeyError, ValueError):
                    raise ValidationError(
                        "status_history entries need a valid stage and changed_at",
                        field="status_history",
                    )
            values["status_history"] = entries
        elif (
            "current_stage" in values
            and values["current_stage"] != record.current_stage
        ):
            # New list so the JSON column registers the change
            values["status_history"] = list(record.status_history or []) + [
                _history_entry(values["current_stage"], datetime.utcnow())
            ]

        return values

    @staticmethod
    def response_fields(record) -> dict:
        return {
            "current_stage": record.current_stage,
            "next_action": record.next_action,
            "follow_up_deadline": record.follow_up_deadline,
            "status_history": list(record.status_history or []),
        }


SERVICES_BY_MODEL = {
    GraphicsTask: GraphicsTaskService,
    LogisticsTask: LogisticsTaskService,
    OutreachTask: OutreachTaskService,
    SponsorshipTask: SponsorshipTaskService,
}


def build_subtask_response(record) -> dict:
    """Build the response dict for any sub-record kind."""
    return SERVICES_BY_MODEL[type(record)].build_response(record)
