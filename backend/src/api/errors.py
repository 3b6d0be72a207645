"""
Translation of service errors into HTTP errors.

Mapping:
    ValidationError   -> 400
    UnauthorizedError -> 401
    ForbiddenError    -> 403
    NotFoundError     -> 404
    ConflictError     -> 409
"""

from fastapi import HTTPException, status

from backend.src.services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    ValidationError,
)


STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def service_error_to_http(error: ServiceError) -> HTTPException:
    """
    Build the HTTPException for a service error.

    Unknown ServiceError subclasses become 500.
    """
    message = getattr(error, "message", None) or str(error)
    for error_cls, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            headers = (
                {"WWW-Authenticate": "Bearer"}
                if status_code == status.HTTP_401_UNAUTHORIZED
                else None
            )
            return HTTPException(status_code=status_code, detail=message, headers=headers)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
