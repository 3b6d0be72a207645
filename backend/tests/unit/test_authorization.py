"""
Unit tests for the authorization guard.

Tests the permission table, role outcomes, and membership rules.
"""

import pytest

from backend.src.models import NotificationCategory, TaskCategory
from backend.src.services.authorization import (
    PERMISSIONS,
    Action,
    authorize,
    ensure_recipient,
    ensure_task_access,
    is_allowed,
    resolve_owner,
)
from backend.src.services.exceptions import ForbiddenError, UnauthorizedError
from backend.src.services.notification_service import NotificationService


class TestAuthorize:
    """Tests for role-based checks."""

    def test_every_action_has_a_rule(self):
        """Test the permission table covers every action."""
        assert set(PERMISSIONS) == set(Action)

    def test_anonymous_is_unauthorized(self):
        with pytest.raises(UnauthorizedError):
            authorize(None, Action.EVENT_LIST)

    def test_organizer_may_create_event(self, organizer, identity_for):
        identity = identity_for(organizer)
        assert authorize(identity, Action.EVENT_CREATE) is identity

    def test_core_member_may_not_create_event(self, member, identity_for):
        with pytest.raises(ForbiddenError) as exc_info:
            authorize(identity_for(member), Action.EVENT_CREATE)

        assert exc_info.value.action == Action.EVENT_CREATE.value

    @pytest.mark.parametrize("action", [
        Action.EVENT_DISTRIBUTE,
        Action.TASK_REASSIGN,
        Action.TASK_DELETE,
        Action.NOTIFICATION_SEND_OTHERS,
        Action.ORGANIZER_VIEW,
    ])
    def test_organizer_only_actions(self, action, organizer, member, identity_for):
        assert is_allowed(identity_for(organizer), action) is True
        assert is_allowed(identity_for(member), action) is False

    @pytest.mark.parametrize("action", [
        Action.EVENT_LIST,
        Action.TASK_CREATE,
        Action.TASK_UPDATE,
        Action.SUBTASK_CREATE,
        Action.SUBTASK_UPDATE,
        Action.NOTIFICATION_READ,
        Action.PROFILE_MANAGE,
    ])
    def test_any_role_actions(self, action, member, identity_for):
        assert is_allowed(identity_for(member), action) is True

    def test_is_allowed_without_identity(self):
        assert is_allowed(None, Action.EVENT_LIST) is False


class TestMembershipRules:
    """Tests for task ownership and notification recipient rules."""

    def test_resolve_owner_defaults_to_requester(self, member, identity_for):
        identity = identity_for(member)
        assert resolve_owner(identity, None) == member.guid
        assert resolve_owner(identity, "usr_other") == "usr_other"

    def test_owner_has_task_access(self, member, organizer, identity_for, sample_event, sample_task):
        task = sample_task(sample_event(), member)

        ensure_task_access(identity_for(member), task)
        ensure_task_access(identity_for(organizer), task)

    def test_non_owner_has_no_task_access(
        self, member, other_member, identity_for, sample_event, sample_task
    ):
        task = sample_task(sample_event(), member, category=TaskCategory.LOGISTICS)

        with pytest.raises(ForbiddenError):
            ensure_task_access(identity_for(other_member), task)

    def test_only_recipient_acts_on_notification(
        self, test_db_session, member, other_member, identity_for
    ):
        notification = NotificationService(test_db_session).create_notification(
            user_id=member.id,
            category=NotificationCategory.GENERAL,
            message="Hello",
        )

        ensure_recipient(identity_for(member), notification)
        with pytest.raises(ForbiddenError):
            ensure_recipient(identity_for(other_member), notification)
