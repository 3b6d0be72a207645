"""
Current-user API endpoints.

Provides endpoints for:
- The authenticated identity (GET /me)
- Persisted app-state preferences (GET/PATCH /me/preferences)
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.src.api.errors import service_error_to_http
from backend.src.db.database import get_db
from backend.src.middleware.identity import Identity, get_identity
from backend.src.schemas.user import (
    IdentityResponse,
    PreferencesResponse,
    PreferencesUpdate,
)
from backend.src.services.exceptions import ServiceError
from backend.src.services.preferences_service import PreferencesService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def get_preferences_service(db: Session = Depends(get_db)) -> PreferencesService:
    """Create PreferencesService instance with database session."""
    return PreferencesService(db=db)


@router.get(
    "/me",
    response_model=IdentityResponse,
    summary="Get the current identity",
)
async def get_me(identity: Identity = Depends(get_identity)) -> IdentityResponse:
    """Return who the request is authenticated as, and how."""
    return IdentityResponse(
        guid=identity.user_guid,
        email=identity.email,
        name=identity.name,
        role=identity.role,
        is_organizer=identity.is_organizer,
        auth_method=identity.auth_method,
    )


@router.get(
    "/me/preferences",
    response_model=PreferencesResponse,
    summary="Get app preferences",
)
async def get_preferences(
    identity: Identity = Depends(get_identity),
    service: PreferencesService = Depends(get_preferences_service),
) -> PreferencesResponse:
    """Return the persisted preferences, with defaults for unset fields."""
    try:
        return PreferencesResponse(**service.get(identity))

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error getting preferences: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get preferences",
        )


@router.patch(
    "/me/preferences",
    response_model=PreferencesResponse,
    summary="Update app preferences",
    description="Merge the fields present in the body into stored preferences",
)
async def update_preferences(
    data: PreferencesUpdate,
    identity: Identity = Depends(get_identity),
    service: PreferencesService = Depends(get_preferences_service),
) -> PreferencesResponse:
    """
    Partially update preferences.

    Example:
        PATCH /api/users/me/preferences
        {"theme_preference": "dark"}
    """
    try:
        return PreferencesResponse(
            **service.update(identity, data.model_dump(exclude_unset=True))
        )

    except ServiceError as e:
        raise service_error_to_http(e)

    except Exception as e:
        logger.error(f"Error updating preferences: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update preferences",
        )
