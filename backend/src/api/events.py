"""
Events API endpoints.

Provides endpoints for:
- Listing events with task counts (ordered by date)
- Getting event details
- Creating events (organizers)
- Distributing a template event to cities (organizers)
- Listing a template's city instances

Design:
- Uses dependency injection for services
- Role checks live in the authorization guard, not in the routes
- All endpoints use GUID format (evt_xxx) for identifiers
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.src.api.errors import service_error_to_http
from backend.src.db.database import get_db
from backend.src.middleware.identity import Identity, get_identity
from backend.src.schemas.event import EventCreate, EventDistributeRequest, EventResponse
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import ServiceError
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Create EventService instance with database session."""
    return EventService(db=db)


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=List[EventResponse],
    summary="List events",
    description="List all events ordered by date with their task counts",
)
async def list_events(
    identity: Identity = Depends(get_identity),
    event_service: EventService = Depends(get_event_service),
) -> List[EventResponse]:
    """
    List events ordered by date ascending.

    Returns:
        Events with task_count

    Example:
        GET /api/events

        Response:
        [
          {"guid": "evt_...", "name": "Launch Night", "task_count": 4, ...}
        ]
    """
    try:
        rows = event_service.list(identity)
        return [
            EventResponse(**event_service.build_event_response(event, task_count))
            for event, task_count in rows
        ]

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error listing events: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list events",
        )


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new event",
    description="Create a new event (organizers only)",
)
async def create_event(
    event_data: EventCreate,
    identity: Identity = Depends(get_identity),
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Create a new event.

    Request Body:
        name: Event name (required)
        date: Event date and time (required)
        status: Initial status (default PLANNING)

    Returns:
        Created event (201 Created)

    Raises:
        400: Missing name or date
        403: Caller is not an organizer
    """
    try:
        event = event_service.create(
            identity,
            name=event_data.name,
            date=event_data.date,
            status=event_data.status,
        )
        return EventResponse(**event_service.build_event_response(event, task_count=0))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error creating event: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create event",
        )


@router.get(
    "/{guid}",
    response_model=EventResponse,
    summary="Get event by GUID",
)
async def get_event(
    guid: str,
    identity: Identity = Depends(get_identity),
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Get event details by GUID.

    Raises:
        404: Event not found
    """
    try:
        event = event_service.get(identity, guid)
        return EventResponse(**event_service.build_event_response(event))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error getting event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve event",
        )


@router.post(
    "/{guid}/distribute",
    response_model=List[EventResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Distribute a template event to cities",
)
async def distribute_event(
    guid: str,
    request_data: EventDistributeRequest,
    identity: Identity = Depends(get_identity),
    event_service: EventService = Depends(get_event_service),
) -> List[EventResponse]:
    """
    Push a template event to cities.

    Creates one PLANNING instance per city that does not have one yet.

    Request Body:
        cities: City names (at least one)

    Returns:
        Newly created instances

    Raises:
        400: No cities given, or the event is itself an instance
        403: Caller is not an organizer
        404: Event not found
    """
    try:
        instances = event_service.push_to_cities(identity, guid, request_data.cities)
        return [
            EventResponse(**event_service.build_event_response(instance, task_count=0))
            for instance in instances
        ]

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error distributing event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to distribute event",
        )


@router.get(
    "/{guid}/instances",
    response_model=List[EventResponse],
    summary="List city instances of a template event",
)
async def list_event_instances(
    guid: str,
    identity: Identity = Depends(get_identity),
    event_service: EventService = Depends(get_event_service),
) -> List[EventResponse]:
    """List the city instances created from a template event."""
    try:
        instances = event_service.list_instances(identity, guid)
        return [
            EventResponse(**event_service.build_event_response(instance))
            for instance in instances
        ]

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error listing instances of {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list event instances",
        )
