"""
Request identity resolution.

Provides:
- Identity: Dataclass describing the authenticated person for a request
- get_identity: FastAPI dependency that requires an identity
- get_optional_identity: FastAPI dependency that returns None when anonymous

The identity is derived from:
1. A Bearer JWT in the Authorization header (programmatic access, tests)
2. The signed session cookie carrying user_guid (browser access)

Role decisions are never made here; see services/authorization.py.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request, HTTPException, status, Depends
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.models import UserRole
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")


@dataclass
class Identity:
    """
    Authenticated identity for the current request.

    Attributes:
        user_id: Internal user ID for database queries (FK filtering)
        user_guid: User's external GUID (usr_xxx) for API responses
        email: User's email address
        role: Platform role
        name: Display name
        auth_method: "token" or "session"

    Usage:
        @router.get("/tasks")
        async def list_tasks(identity: Identity = Depends(get_identity)):
            return service.list(identity)
    """

    user_id: int
    user_guid: str
    email: str
    role: UserRole
    name: Optional[str] = None
    auth_method: str = "token"

    def __post_init__(self):
        """Validate required fields."""
        if not self.user_id or not self.user_guid:
            raise ValueError("user_id and user_guid are required")

    @property
    def is_organizer(self) -> bool:
        return self.role == UserRole.ORGANIZER

    @classmethod
    def from_user(cls, user, auth_method: str = "token") -> "Identity":
        return cls(
            user_id=user.id,
            user_guid=user.guid,
            email=user.email,
            role=user.role,
            name=user.name,
            auth_method=auth_method,
        )


def _unauthorized(detail: str = "Authentication required") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_identity(request: Request, db: Session) -> Optional[Identity]:
    """
    Resolve the identity attached to a request, if any.

    Args:
        request: Incoming request
        db: Database session

    Returns:
        Identity, or None when the request carries no credentials

    Raises:
        HTTPException 401: If credentials are present but invalid
    """
    # Import here to avoid circular imports
    from backend.src.config.settings import get_settings
    from backend.src.services.token_service import TokenService

    settings = get_settings()

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        if not settings.jwt_secret_key:
            logger.warning("Bearer token presented but JWT_SECRET_KEY is not configured")
            raise _unauthorized("Invalid or expired token")

        service = TokenService(
            db,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expiry_hours=settings.jwt_token_expiry_hours,
        )
        identity = service.validate_token(auth_header[7:])
        if identity is None:
            raise _unauthorized("Invalid or expired token")
        return identity

    session = request.scope.get("session") or {}
    user_guid = session.get("user_guid")
    if user_guid:
        service_user = _load_session_user(db, user_guid)
        if service_user is None:
            logger.warning(f"Session references unknown or inactive user {user_guid}")
            raise _unauthorized("Session is no longer valid")
        return Identity.from_user(service_user, auth_method="session")

    return None


def _load_session_user(db: Session, user_guid: str):
    from backend.src.models import User
    from backend.src.services.guid import GuidService

    if not GuidService.validate_guid(user_guid, "usr"):
        return None
    try:
        uuid_value = GuidService.parse_guid(user_guid, "usr")
    except ValueError:
        return None
    user = db.query(User).filter(User.uuid == uuid_value).first()
    if user is None or not user.is_active:
        return None
    return user


async def get_identity(
    request: Request,
    db: Session = Depends(get_db)
) -> Identity:
    """
    FastAPI dependency requiring an authenticated identity.

    Raises:
        HTTPException 401: If not authenticated
    """
    identity = resolve_identity(request, db)
    if identity is None:
        raise _unauthorized()
    request.state.identity = identity
    return identity


async def get_optional_identity(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[Identity]:
    """
    FastAPI dependency for optional authentication.

    Returns Identity if authenticated, None otherwise.
    """
    try:
        return resolve_identity(request, db)
    except HTTPException:
        return None
