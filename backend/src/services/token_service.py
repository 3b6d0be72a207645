"""
Token service for identity tokens.

Handles:
- JWT generation for a user (used by the identity provider bridge and tests)
- Token validation and identity creation

Design:
- Tokens are HS256 JWTs signed with JWT_SECRET_KEY
- The subject claim is the user GUID (usr_xxx)
- The role is always re-read from the users table; the role claim in the
  token is informational only
- Deactivated or unknown users never authenticate
"""

from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from sqlalchemy.orm import Session

from backend.src.models import User
from backend.src.middleware.identity import Identity
from backend.src.services.exceptions import ValidationError
from backend.src.services.guid import GuidService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


TOKEN_ALGORITHM = "HS256"
TOKEN_TYPE = "access"
DEFAULT_TOKEN_EXPIRY_HOURS = 24


class TokenService:
    """
    Service for issuing and validating identity tokens.

    Usage:
        >>> service = TokenService(db_session, jwt_secret)
        >>> token = service.issue_token(user)
        >>> identity = service.validate_token(token)
        >>> if identity:
        ...     print(f"Authenticated as {identity.email}")
    """

    def __init__(
        self,
        db: Session,
        jwt_secret: str,
        algorithm: str = TOKEN_ALGORITHM,
        expiry_hours: int = DEFAULT_TOKEN_EXPIRY_HOURS,
    ):
        """
        Initialize token service.

        Args:
            db: SQLAlchemy database session
            jwt_secret: Secret key for JWT signing
            algorithm: JWT signing algorithm
            expiry_hours: Lifetime of issued tokens
        """
        if not jwt_secret:
            raise ValidationError("JWT secret is not configured", field="jwt_secret")
        self.db = db
        self.jwt_secret = jwt_secret
        self.algorithm = algorithm
        self.expiry_hours = expiry_hours

    def issue_token(self, user: User, expires_in_hours: Optional[int] = None) -> str:
        """
        Issue a signed token for a user.

        Args:
            user: User the token identifies
            expires_in_hours: Override for the configured lifetime

        Returns:
            Encoded JWT string

        Raises:
            ValidationError: If the user is inactive
        """
        if not user.is_active:
            raise ValidationError("Cannot issue a token for an inactive user", field="user")

        now = datetime.utcnow()
        expires_at = now + timedelta(hours=expires_in_hours or self.expiry_hours)
        payload = {
            "sub": user.guid,
            "email": user.email,
            "role": user.role.value,
            "type": TOKEN_TYPE,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.jwt_secret, algorithm=self.algorithm)

        logger.info(f"Issued identity token for {user.guid}")
        return token

    def validate_token(self, token: str) -> Optional[Identity]:
        """
        Validate a JWT and return the identity it carries.

        Args:
            token: JWT string (from the Authorization header)

        Returns:
            Identity if valid, None if invalid, expired, or the user is
            unknown or inactive
        """
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Token validation failed: {e}")
            return None

        if payload.get("type") != TOKEN_TYPE:
            logger.warning("Token validation failed: not an access token")
            return None

        user = self.get_user_by_guid(payload.get("sub"))
        if user is None:
            logger.warning("Token validation failed: unknown subject")
            return None

        if not user.is_active:
            logger.warning(f"Token validation failed: user {user.guid} is inactive")
            return None

        return Identity.from_user(user, auth_method="token")

    def get_user_by_guid(self, guid: Optional[str]) -> Optional[User]:
        """Look up a user by GUID, returning None for malformed GUIDs."""
        if not GuidService.validate_guid(guid, "usr"):
            return None
        try:
            uuid_value = GuidService.parse_guid(guid, "usr")
        except ValueError:
            return None
        return self.db.query(User).filter(User.uuid == uuid_value).first()
