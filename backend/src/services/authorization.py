"""
Authorization guard.

Every role-gated mutation asks this module before writing. The permission
table is the single place that maps actions to roles; routers and services
never compare roles themselves.

Outcomes:
- No identity            -> UnauthorizedError (401)
- Role lacks privilege   -> ForbiddenError (403)
- Sufficient             -> returns normally

Membership rules on top of roles:
- CORE_MEMBER identities may read and update only tasks they own
- Notifications may be marked read only by their recipient
"""

import enum
from typing import Dict, FrozenSet, Optional

from backend.src.middleware.identity import Identity
from backend.src.models import UserRole
from backend.src.services.exceptions import ForbiddenError, UnauthorizedError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class Action(str, enum.Enum):
    """Operations subject to authorization."""
    EVENT_LIST = "event:list"
    EVENT_READ = "event:read"
    EVENT_CREATE = "event:create"
    EVENT_DISTRIBUTE = "event:distribute"
    TASK_LIST = "task:list"
    TASK_READ = "task:read"
    TASK_CREATE = "task:create"
    TASK_UPDATE = "task:update"
    TASK_REASSIGN = "task:reassign"
    TASK_DELETE = "task:delete"
    SUBTASK_CREATE = "subtask:create"
    SUBTASK_UPDATE = "subtask:update"
    NOTIFICATION_READ = "notification:read"
    NOTIFICATION_SEND_OTHERS = "notification:send_others"
    ORGANIZER_VIEW = "organizer:view"
    PROFILE_MANAGE = "profile:manage"


ANY_ROLE: FrozenSet[UserRole] = frozenset(UserRole)
ORGANIZER_ONLY: FrozenSet[UserRole] = frozenset({UserRole.ORGANIZER})

PERMISSIONS: Dict[Action, FrozenSet[UserRole]] = {
    Action.EVENT_LIST: ANY_ROLE,
    Action.EVENT_READ: ANY_ROLE,
    Action.EVENT_CREATE: ORGANIZER_ONLY,
    Action.EVENT_DISTRIBUTE: ORGANIZER_ONLY,
    Action.TASK_LIST: ANY_ROLE,
    Action.TASK_READ: ANY_ROLE,
    Action.TASK_CREATE: ANY_ROLE,
    Action.TASK_UPDATE: ANY_ROLE,
    Action.TASK_REASSIGN: ORGANIZER_ONLY,
    Action.TASK_DELETE: ORGANIZER_ONLY,
    Action.SUBTASK_CREATE: ANY_ROLE,
    Action.SUBTASK_UPDATE: ANY_ROLE,
    Action.NOTIFICATION_READ: ANY_ROLE,
    Action.NOTIFICATION_SEND_OTHERS: ORGANIZER_ONLY,
    Action.ORGANIZER_VIEW: ORGANIZER_ONLY,
    Action.PROFILE_MANAGE: ANY_ROLE,
}


def is_allowed(identity: Optional[Identity], action: Action) -> bool:
    """Return True when the identity's role grants the action."""
    if identity is None:
        return False
    return identity.role in PERMISSIONS.get(action, frozenset())


def authorize(identity: Optional[Identity], action: Action) -> Identity:
    """
    Check that an identity may perform an action.

    Args:
        identity: Request identity, or None when anonymous
        action: Action being attempted

    Returns:
        The identity, for chaining

    Raises:
        UnauthorizedError: If there is no identity
        ForbiddenError: If the identity's role lacks the privilege
    """
    if identity is None:
        raise UnauthorizedError()

    if not is_allowed(identity, action):
        logger.warning(
            f"Denied {action.value} for {identity.user_guid} ({identity.role.value})",
            extra={"user_guid": identity.user_guid, "action": action.value},
        )
        raise ForbiddenError(
            f"Role {identity.role.value} may not perform {action.value}",
            action=action.value,
        )

    return identity


def resolve_owner(identity: Identity, owner_guid: Optional[str]) -> str:
    """
    Return the owner GUID for a new record.

    An explicit owner wins; otherwise the requester owns the record.
    """
    return owner_guid or identity.user_guid


def ensure_task_access(identity: Identity, task) -> None:
    """
    Enforce the membership rule for a single task.

    Organizers may access any task. Core members may access only the tasks
    they own.

    Raises:
        ForbiddenError: If the identity is a core member who does not own the task
    """
    if identity.is_organizer:
        return
    if task.owner_id != identity.user_id:
        logger.warning(
            f"Denied access to task {task.guid} for {identity.user_guid}",
            extra={"user_guid": identity.user_guid, "task_guid": task.guid},
        )
        raise ForbiddenError("You can only access tasks you own")


def ensure_recipient(identity: Identity, notification) -> None:
    """
    Enforce that only the recipient acts on a notification.

    Raises:
        ForbiddenError: If the notification is addressed to someone else
    """
    if notification.user_id != identity.user_id:
        raise ForbiddenError("You can only update your own notifications")
