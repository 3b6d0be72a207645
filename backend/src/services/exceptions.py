"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.

Mapping used by the API layer:
    ValidationError   -> 400
    UnauthorizedError -> 401
    ForbiddenError    -> 403
    NotFoundError     -> 404
    ConflictError     -> 409
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        self.message = f"{resource} {identifier} not found"
        super().__init__(self.message)


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing state."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """Raised when no identity accompanies a request that needs one."""

    def __init__(self, message: str = "Authentication required"):
        self.message = message
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised when the identity's role or membership does not allow an action."""

    def __init__(self, message: str = "Forbidden", action: Optional[str] = None):
        self.message = message
        self.action = action
        super().__init__(message)
