"""
Tasks API endpoints.

Provides endpoints for:
- Listing tasks with filters (event, owner, category, status)
- Getting task details with the specialized sub-record
- Creating tasks
- Partially updating tasks (status, blocker note, reassignment)
- Deleting tasks (organizers)

Core members only see and change the tasks they own.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from backend.src.api.errors import service_error_to_http
from backend.src.db.database import get_db
from backend.src.middleware.identity import Identity, get_identity
from backend.src.models import TaskCategory, TaskStatus
from backend.src.schemas.task import (
    TaskCreate,
    TaskDetailResponse,
    TaskResponse,
    TaskUpdate,
)
from backend.src.services.exceptions import ServiceError
from backend.src.services.task_service import TaskService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    """Create TaskService instance with database session."""
    return TaskService(db=db)


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=List[TaskResponse],
    summary="List tasks",
    description="List tasks ordered by deadline, optionally filtered",
)
async def list_tasks(
    identity: Identity = Depends(get_identity),
    task_service: TaskService = Depends(get_task_service),
    event_guid: Optional[str] = Query(
        default=None,
        description="Filter by event GUID (evt_xxx)",
    ),
    owner_guid: Optional[str] = Query(
        default=None,
        description="Filter by owner GUID (usr_xxx)",
    ),
    category: Optional[TaskCategory] = Query(
        default=None,
        description="Filter by category",
    ),
    task_status: Optional[TaskStatus] = Query(
        default=None,
        alias="status",
        description="Filter by status",
    ),
) -> List[TaskResponse]:
    """
    List tasks.

    Query Parameters:
        event_guid: Only tasks of this event
        owner_guid: Only tasks owned by this user
        category: Only tasks of this category
        status: Only tasks in this status

    Raises:
        404: Event or owner not found
    """
    try:
        tasks = task_service.list(
            identity,
            event_guid=event_guid,
            owner_guid=owner_guid,
            category=category,
            status=task_status,
        )
        return [TaskResponse(**task_service.build_task_response(t)) for t in tasks]

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error listing tasks: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tasks",
        )


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    task_data: TaskCreate,
    identity: Identity = Depends(get_identity),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Create a task in PENDING status.

    Request Body:
        event_guid: Owning event (required)
        category: GRAPHICS, LOGISTICS, OUTREACH or SPONSORSHIP (required)
        title: Short description (required)
        deadline: Due date and time (required)
        owner_guid: Responsible user (default: the requester)

    Raises:
        400: Missing field or unknown owner
        404: Event not found
    """
    try:
        task = task_service.create(
            identity,
            event_guid=task_data.event_guid,
            category=task_data.category,
            title=task_data.title,
            deadline=task_data.deadline,
            owner_guid=task_data.owner_guid,
        )
        return TaskResponse(**task_service.build_task_response(task))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error creating task: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create task",
        )


@router.get(
    "/{guid}",
    response_model=TaskDetailResponse,
    summary="Get task by GUID",
)
async def get_task(
    guid: str,
    identity: Identity = Depends(get_identity),
    task_service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """
    Get task details, including the specialized sub-record if one exists.

    Raises:
        403: Core member requesting a task they do not own
        404: Task not found
    """
    try:
        task = task_service.get(identity, guid)
        return TaskDetailResponse(**task_service.build_task_detail_response(task))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error getting task {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve task",
        )


@router.put(
    "/{guid}",
    response_model=TaskResponse,
    summary="Update a task",
    description="Partial update; fields omitted from the body are unchanged",
)
async def update_task(
    guid: str,
    task_data: TaskUpdate,
    identity: Identity = Depends(get_identity),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Update a task.

    Raises:
        400: BLOCKED without a blocker note, or a required field set to null
        403: Reassignment by a core member, or a task they do not own
        404: Task not found
    """
    try:
        task = task_service.update(
            identity,
            guid,
            task_data.model_dump(exclude_unset=True),
        )
        return TaskResponse(**task_service.build_task_response(task))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error updating task {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update task",
        )


@router.delete(
    "/{guid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
    description="Delete a task and its sub-record (organizers only)",
)
async def delete_task(
    guid: str,
    identity: Identity = Depends(get_identity),
    task_service: TaskService = Depends(get_task_service),
) -> Response:
    """
    Delete a task.

    Raises:
        403: Caller is not an organizer
        404: Task not found
    """
    try:
        task_service.delete(identity, guid)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error deleting task {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete task",
        )
