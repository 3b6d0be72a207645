"""
User lookups shared by the task, sub-task, and notification services.

Users normally come from the identity provider. provision() exists for the
bootstrap script (scripts/provision_user.py) that creates the first accounts.
"""

from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.src.models import User, UserRole
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.services.guid import GuidService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class UserService:
    """
    User lookups and bootstrap provisioning.

    Usage:
        >>> service = UserService(db_session)
        >>> owner = service.get_reference("usr_01hgw...", field="owner_guid")
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_guid(self, guid: str) -> User:
        """
        Get a user by GUID.

        Raises:
            NotFoundError: If the GUID is malformed or no user matches
        """
        if not GuidService.validate_guid(guid, "usr"):
            raise NotFoundError("User", guid)

        try:
            uuid_value = GuidService.parse_guid(guid, "usr")
        except ValueError:
            raise NotFoundError("User", guid)

        user = self.db.query(User).filter(User.uuid == uuid_value).first()
        if not user:
            raise NotFoundError("User", guid)
        return user

    def get_by_id(self, user_id: int) -> User:
        """
        Get a user by internal ID.

        Raises:
            NotFoundError: If user not found
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def get_reference(self, guid: Optional[str], field: str = "owner_guid") -> User:
        """
        Resolve a user referenced from a request body.

        A bad reference is a client input error, not a missing resource.

        Raises:
            ValidationError: If the GUID is malformed, unknown, or inactive
        """
        try:
            user = self.get_by_guid(guid)
        except NotFoundError:
            raise ValidationError(f"User not found: {guid}", field=field)

        if not user.is_active:
            raise ValidationError(f"User is inactive: {guid}", field=field)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive), or None."""
        return (
            self.db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def provision(
        self,
        email: str,
        role: UserRole = UserRole.CORE_MEMBER,
        name: Optional[str] = None,
    ) -> Tuple[User, bool]:
        """
        Create a user, or bring an existing one up to date.

        Existing users get the given role, the name when one is passed, and
        are reactivated.

        Returns:
            Tuple of (user, was_created)

        Raises:
            ValidationError: If the email is malformed
        """
        email = (email or "").strip().lower()
        local, _, domain = email.rpartition("@")
        if not local or "." not in domain:
            raise ValidationError(f"Invalid email: {email}", field="email")

        user = self.get_by_email(email)
        created = user is None
        if created:
            user = User(email=email, name=name, role=role, is_active=True)
            self.db.add(user)
        else:
            user.role = role
            user.is_active = True
            if name:
                user.name = name

        self.db.commit()
        self.db.refresh(user)

        logger.info(
            f"{'Created' if created else 'Updated'} user {user.guid} ({user.role.value})",
            extra={"user_guid": user.guid},
        )
        return user, created


def build_user_summary(user) -> dict:
    """Build response dict matching UserSummary."""
    return {
        "guid": user.guid,
        "name": user.name,
        "email": user.email,
        "role": user.role,
    }
