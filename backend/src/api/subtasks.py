"""
Specialized sub-record API endpoints.

One router per kind, each with:
- POST ""  create the sub-record for a task of the matching category
- PUT  ""  partial update, the sub-record GUID travels in the body

Routers:
    /graphics-tasks     GraphicsTask    (gfx_xxx)
    /logistics-tasks    LogisticsTask   (lgx_xxx)
    /outreach-tasks     OutreachTask    (otr_xxx)
    /sponsorship-tasks  SponsorshipTask (spn_xxx)
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.src.api.errors import service_error_to_http
from backend.src.db.database import get_db
from backend.src.middleware.identity import Identity, get_identity
from backend.src.schemas.subtask import (
    GraphicsTaskCreate,
    GraphicsTaskResponse,
    GraphicsTaskUpdate,
    LogisticsTaskCreate,
    LogisticsTaskResponse,
    LogisticsTaskUpdate,
    OutreachTaskCreate,
    OutreachTaskResponse,
    OutreachTaskUpdate,
    SponsorshipTaskCreate,
    SponsorshipTaskResponse,
    SponsorshipTaskUpdate,
)
from backend.src.services.exceptions import ServiceError
from backend.src.services.subtask_service import (
    GraphicsTaskService,
    LogisticsTaskService,
    OutreachTaskService,
    SponsorshipTaskService,
)
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

graphics_router = APIRouter(prefix="/graphics-tasks", tags=["Graphics Tasks"])
logistics_router = APIRouter(prefix="/logistics-tasks", tags=["Logistics Tasks"])
outreach_router = APIRouter(prefix="/outreach-tasks", tags=["Outreach Tasks"])
sponsorship_router = APIRouter(prefix="/sponsorship-tasks", tags=["Sponsorship Tasks"])


# ============================================================================
# Dependencies
# ============================================================================


def get_graphics_service(db: Session = Depends(get_db)) -> GraphicsTaskService:
    return GraphicsTaskService(db=db)


def get_logistics_service(db: Session = Depends(get_db)) -> LogisticsTaskService:
    return LogisticsTaskService(db=db)


def get_outreach_service(db: Session = Depends(get_db)) -> OutreachTaskService:
    return OutreachTaskService(db=db)


def get_sponsorship_service(db: Session = Depends(get_db)) -> SponsorshipTaskService:
    return SponsorshipTaskService(db=db)


def _create_fields(data) -> dict:
    """Kind-specific create fields, without the parent and owner references."""
    return data.model_dump(exclude={"task_guid", "owner_guid"})


def _update_fields(data) -> dict:
    """Fields explicitly present in an update body, without the GUID."""
    changes = data.model_dump(exclude_unset=True)
    changes.pop("guid", None)
    return changes


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(e)}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


# ============================================================================
# Graphics
# ============================================================================


@graphics_router.post(
    "",
    response_model=GraphicsTaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a graphics sub-record",
)
async def create_graphics_task(
    data: GraphicsTaskCreate,
    identity: Identity = Depends(get_identity),
    service: GraphicsTaskService = Depends(get_graphics_service),
) -> GraphicsTaskResponse:
    """
    Create the graphics sub-record of a GRAPHICS task.

    Request Body:
        task_guid: Parent task (required)
        asset_type: free-form asset kind such as poster or banner (required)
        formats: Non-empty list of output formats (required)
        owner_guid: Owner (default: the requester)

    Status always starts at REQUESTED.

    Raises:
        400: Missing field or category mismatch
        404: Task not found
        409: Task already has a graphics sub-record
    """
    try:
        record = service.create(
            identity, data.task_guid, owner_guid=data.owner_guid, **_create_fields(data)
        )
        return GraphicsTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("create graphics task", e)


@graphics_router.put(
    "",
    response_model=GraphicsTaskResponse,
    summary="Update a graphics sub-record",
)
async def update_graphics_task(
    data: GraphicsTaskUpdate,
    identity: Identity = Depends(get_identity),
    service: GraphicsTaskService = Depends(get_graphics_service),
) -> GraphicsTaskResponse:
    """Update status and final_output_link; omitted fields are unchanged."""
    try:
        record = service.update(identity, data.guid, _update_fields(data))
        return GraphicsTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("update graphics task", e)


# ============================================================================
# Logistics
# ============================================================================


@logistics_router.post(
    "",
    response_model=LogisticsTaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a logistics sub-record",
)
async def create_logistics_task(
    data: LogisticsTaskCreate,
    identity: Identity = Depends(get_identity),
    service: LogisticsTaskService = Depends(get_logistics_service),
) -> LogisticsTaskResponse:
    """
    Create the logistics sub-record of a LOGISTICS task.

    Request Body:
        task_guid: Parent task (required)
        status: NOT_READY, READY or ISSUE (required)
        owner_guid: Owner (default: the requester)
    """
    try:
        record = service.create(
            identity, data.task_guid, owner_guid=data.owner_guid, **_create_fields(data)
        )
        return LogisticsTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("create logistics task", e)


@logistics_router.put(
    "",
    response_model=LogisticsTaskResponse,
    summary="Update a logistics sub-record",
)
async def update_logistics_task(
    data: LogisticsTaskUpdate,
    identity: Identity = Depends(get_identity),
    service: LogisticsTaskService = Depends(get_logistics_service),
) -> LogisticsTaskResponse:
    try:
        record = service.update(identity, data.guid, _update_fields(data))
        return LogisticsTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("update logistics task", e)


# ============================================================================
# Outreach
# ============================================================================


@outreach_router.post(
    "",
    response_model=OutreachTaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an outreach sub-record",
)
async def create_outreach_task(
    data: OutreachTaskCreate,
    identity: Identity = Depends(get_identity),
    service: OutreachTaskService = Depends(get_outreach_service),
) -> OutreachTaskResponse:
    """
    Create the outreach sub-record of an OUTREACH task.

    Request Body:
        task_guid: Parent task (required)
        channel: free-form channel such as instagram or email (required)
        content_link: Link to the content
        scheduled_time: Planned publication time
        owner_guid: Owner (default: the requester)

    Status always starts at PENDING.
    """
    try:
        record = service.create(
            identity, data.task_guid, owner_guid=data.owner_guid, **_create_fields(data)
        )
        return OutreachTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("create outreach task", e)


@outreach_router.put(
    "",
    response_model=OutreachTaskResponse,
    summary="Update an outreach sub-record",
)
async def update_outreach_task(
    data: OutreachTaskUpdate,
    identity: Identity = Depends(get_identity),
    service: OutreachTaskService = Depends(get_outreach_service),
) -> OutreachTaskResponse:
    """Update status and outcome_note; omitted fields are unchanged."""
    try:
        record = service.update(identity, data.guid, _update_fields(data))
        return OutreachTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("update outreach task", e)


# ============================================================================
# Sponsorship
# ============================================================================


@sponsorship_router.post(
    "",
    response_model=SponsorshipTaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sponsorship sub-record",
)
async def create_sponsorship_task(
    data: SponsorshipTaskCreate,
    identity: Identity = Depends(get_identity),
    service: SponsorshipTaskService = Depends(get_sponsorship_service),
) -> SponsorshipTaskResponse:
    """
    Create the sponsorship sub-record of a SPONSORSHIP task.

    Request Body:
        task_guid: Parent task (required)
        current_stage: Pipeline stage (required)
        next_action: Next step with the sponsor
        follow_up_deadline: When to follow up
        owner_guid: Owner (default: the requester)

    The stage history starts with the initial stage.
    """
    try:
        record = service.create(
            identity, data.task_guid, owner_guid=data.owner_guid, **_create_fields(data)
        )
        return SponsorshipTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("create sponsorship task", e)


@sponsorship_router.put(
    "",
    response_model=SponsorshipTaskResponse,
    summary="Update a sponsorship sub-record",
)
async def update_sponsorship_task(
    data: SponsorshipTaskUpdate,
    identity: Identity = Depends(get_identity),
    service: SponsorshipTaskService = Depends(get_sponsorship_service),
) -> SponsorshipTaskResponse:
    """
    Update stage, next action, follow-up deadline or history.

    A stage change without an explicit status_history appends a history entry.
    """
    try:
        record = service.update(identity, data.guid, _update_fields(data))
        return SponsorshipTaskResponse(**service.build_response(record))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        raise _internal_error("update sponsorship task", e)
