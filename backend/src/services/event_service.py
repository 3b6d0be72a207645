"""
Event service for managing events.

Provides business logic for listing, retrieving, and creating events, and
for distributing a template event to city instances.

Design:
- Creation and distribution are organizer actions (see authorization guard)
- Listing is ordered by event date ascending with an exact task count
- Events are never hard-deleted
- A template keeps at most one instance per city
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.src.middleware.identity import Identity
from backend.src.models import Event, EventStatus, Task
from backend.src.services.authorization import Action, authorize
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.services.guid import GuidService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class EventService:
    """
    Service for managing events.

    Usage:
        >>> service = EventService(db_session)
        >>> event = service.create(identity, name="Launch Night", date=datetime(2026, 11, 14))
        >>> rows = service.list(identity)
    """

    def __init__(self, db: Session):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_by_guid(self, guid: str) -> Event:
        """
        Get an event by GUID.

        Args:
            guid: Event GUID (evt_xxx format)

        Returns:
            Event instance

        Raises:
            NotFoundError: If event not found
        """
        if not GuidService.validate_guid(guid, "evt"):
            raise NotFoundError("Event", guid)

        try:
            uuid_value = GuidService.parse_guid(guid, "evt")
        except ValueError:
            raise NotFoundError("Event", guid)

        event = self.db.query(Event).filter(Event.uuid == uuid_value).first()
        if not event:
            raise NotFoundError("Event", guid)

        return event

    def get(self, identity: Optional[Identity], guid: str) -> Event:
        """Get an event by GUID on behalf of an identity."""
        authorize(identity, Action.EVENT_READ)
        return self.get_by_guid(guid)

    def list(self, identity: Optional[Identity]) -> List[Tuple[Event, int]]:
        """
        List all events ordered by date ascending.

        Args:
            identity: Request identity

        Returns:
            List of (event, task_count) tuples

        Raises:
            UnauthorizedError: If there is no identity
        """
        authorize(identity, Action.EVENT_LIST)

        task_count = func.count(Task.id).label("task_count")
        rows = (
            self.db.query(Event, task_count)
            .outerjoin(Task, Task.event_id == Event.id)
            .group_by(Event.id)
            .order_by(Event.date.asc(), Event.id.asc())
            .all()
        )
        return [(event, count) for event, count in rows]

    def count_tasks(self, event: Event) -> int:
        """Return the number of tasks referencing an event."""
        return (
            self.db.query(func.count(Task.id))
            .filter(Task.event_id == event.id)
            .scalar()
        ) or 0

    def create(
        self,
        identity: Optional[Identity],
        name: Optional[str],
        date: Optional[datetime],
        status: Optional[EventStatus] = None,
    ) -> Event:
        """
        Create a new event.

        Args:
            identity: Request identity (must be an organizer)
            name: Event name
            date: Event date and time (naive UTC)
            status: Initial status (default: PLANNING)

        Returns:
            Created Event instance

        Raises:
            UnauthorizedError: If there is no identity
            ForbiddenError: If the identity is not an organizer
            ValidationError: If name or date is missing
        """
        authorize(identity, Action.EVENT_CREATE)

        missing = []
        if not name or not name.strip():
            missing.append("name")
        if date is None:
            missing.append("date")
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field=missing[0],
            )

        event = Event(
            name=name.strip(),
            date=date,
            status=status or EventStatus.PLANNING,
            created_by_user_id=identity.user_id,
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        logger.info(
            f"Created event: {event.guid} - {event.name}",
            extra={"event_guid": event.guid, "user_guid": identity.user_guid},
        )
        return event

    def push_to_cities(
        self,
        identity: Optional[Identity],
        template_guid: str,
        cities: List[str],
    ) -> List[Event]:
        """
        Distribute a template event to cities.

        Marks the event as a template and creates one PLANNING instance per
        city with the same name and date. Cities that already have an
        instance are skipped; blank and duplicate names are ignored.

        Args:
            identity: Request identity (must be an organizer)
            template_guid: Template event GUID
            cities: City names

        Returns:
            Newly created instances (empty when every city already had one)

        Raises:
            ForbiddenError: If the identity is not an organizer
            NotFoundError: If the template does not exist
            ValidationError: If no city is given or the event is itself an instance
        """
        authorize(identity, Action.EVENT_DISTRIBUTE)

        # Normalize: strip, drop blanks, de-duplicate case-insensitively
        normalized: List[str] = []
        seen = set()
        for city in cities or []:
            cleaned = (city or "").strip()
            if cleaned and cleaned.lower() not in seen:
                seen.add(cleaned.lower())
                normalized.append(cleaned)

        if not normalized:
            raise ValidationError("At least one city is required", field="cities")

        template = self.get_by_guid(template_guid)
        if template.parent_event_id is not None:
            raise ValidationError(
                "A city instance cannot be distributed", field="template_guid"
            )

        existing = {
            (instance.city or "").lower()
            for instance in self.db.query(Event)
            .filter(Event.parent_event_id == template.id)
            .all()
        }

        template.is_template = True
        created = []
        for city in normalized:
            if city.lower() in existing:
                logger.debug(f"Skipping {city}: instance already exists for {template.guid}")
                continue
            instance = Event(
                name=template.name,
                date=template.date,
                status=EventStatus.PLANNING,
                city=city,
                parent_event_id=template.id,
                created_by_user_id=identity.user_id,
            )
            self.db.add(instance)
            created.append(instance)

        self.db.commit()
        for instance in created:
            self.db.refresh(instance)

        logger.info(
            f"Distributed event {template.guid} to {len(created)} cities",
            extra={
                "event_guid": template.guid,
                "cities": [instance.city for instance in created],
            },
        )
        return created

    def list_instances(self, identity: Optional[Identity], template_guid: str) -> List[Event]:
        """
        List city instances of a template, ordered by city.

        Raises:
            NotFoundError: If the template does not exist
        """
        authorize(identity, Action.EVENT_READ)
        template = self.get_by_guid(template_guid)
        return (
            self.db.query(Event)
            .filter(Event.parent_event_id == template.id)
            .order_by(Event.city.asc())
            .all()
        )

    def build_event_response(self, event: Event, task_count: Optional[int] = None) -> dict:
        """
        Build response dict for an event.

        Args:
            event: Event instance
            task_count: Precomputed task count (queried when omitted)

        Returns:
            Dictionary matching EventResponse
        """
        if task_count is None:
            task_count = self.count_tasks(event)

        return {
            "guid": event.guid,
            "name": event.name,
            "date": event.date,
            "status": event.status,
            "task_count": task_count,
            "is_template": event.is_template,
            "city": event.city,
            "parent_event_guid": event.parent_event.guid if event.parent_event else None,
            "created_by_guid": event.created_by.guid if event.created_by else None,
            "created_at": event.created_at,
            "updated_at": event.updated_at,
        }
