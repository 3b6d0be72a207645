"""
Unit tests for TaskService.

Tests task creation, filtered listing, partial updates with the blocker
rule, reassignment restrictions, and deletion.
"""

import pytest
from datetime import datetime, timedelta

from backend.src.models import Task, TaskCategory, TaskStatus
from backend.src.services.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from backend.src.services.task_service import TaskService


@pytest.fixture
def task_service(test_db_session):
    """Create a TaskService instance for testing."""
    return TaskService(test_db_session)


class TestTaskServiceCreate:
    """Tests for task creation."""

    def test_create_defaults_owner_to_requester(
        self, task_service, sample_event, member, identity_for
    ):
        event = sample_event()
        deadline = datetime(2026, 11, 20, 12)

        task = task_service.create(
            identity_for(member),
            event_guid=event.guid,
            category=TaskCategory.GRAPHICS,
            title=" Poster ",
            deadline=deadline,
        )

        assert task.guid.startswith("tsk_")
        assert task.title == "Poster"
        assert task.status == TaskStatus.PENDING
        assert task.owner_id == member.id
        assert task.event_id == event.id
        assert task.deadline == deadline
        assert task.status_changed_at is not None

    def test_create_with_explicit_owner(
        self, task_service, sample_event, organizer, member, identity_for
    ):
        task = task_service.create(
            identity_for(organizer),
            event_guid=sample_event().guid,
            category=TaskCategory.LOGISTICS,
            title="Venue",
            deadline=datetime(2026, 11, 20),
            owner_guid=member.guid,
        )
        assert task.owner_id == member.id

    def test_create_unknown_event(self, task_service, member, identity_for):
        with pytest.raises(NotFoundError):
            task_service.create(
                identity_for(member),
                event_guid="evt_01hgw2bbg00000000000000000",
                category=TaskCategory.GRAPHICS,
                title="Poster",
                deadline=datetime(2026, 11, 20),
            )

    def test_create_unknown_owner(self, task_service, sample_event, member, identity_for):
        with pytest.raises(ValidationError) as exc_info:
            task_service.create(
                identity_for(member),
                event_guid=sample_event().guid,
                category=TaskCategory.GRAPHICS,
                title="Poster",
                deadline=datetime(2026, 11, 20),
                owner_guid="usr_01hgw2bbg00000000000000000",
            )
        assert exc_info.value.field == "owner_guid"

    def test_create_missing_title(
        self, task_service, test_db_session, sample_event, member, identity_for
    ):
        with pytest.raises(ValidationError):
            task_service.create(
                identity_for(member),
                event_guid=sample_event().guid,
                category=TaskCategory.GRAPHICS,
                title="   ",
                deadline=datetime(2026, 11, 20),
            )
        assert test_db_session.query(Task).count() == 0


class TestTaskServiceList:
    """Tests for listing tasks."""

    def test_list_ordered_by_deadline(
        self, task_service, sample_event, sample_task, organizer, member, identity_for
    ):
        event = sample_event()
        now = datetime.utcnow()
        late = sample_task(event, member, title="Late", deadline=now + timedelta(days=9))
        early = sample_task(event, member, title="Early", deadline=now + timedelta(days=1))

        tasks = task_service.list(identity_for(organizer))

        assert [t.guid for t in tasks] == [early.guid, late.guid]

    def test_core_member_sees_only_own_tasks(
        self, task_service, sample_event, sample_task, member, other_member, identity_for
    ):
        event = sample_event()
        mine = sample_task(event, member, title="Mine")
        sample_task(event, other_member, title="Theirs")

        tasks = task_service.list(identity_for(member))

        assert [t.guid for t in tasks] == [mine.guid]

    def test_filters(
        self, task_service, sample_event, sample_task, organizer, member, identity_for
    ):
        first = sample_event(name="First")
        second = sample_event(name="Second")
        graphics = sample_task(first, member, category=TaskCategory.GRAPHICS)
        sample_task(first, member, category=TaskCategory.OUTREACH, status=TaskStatus.DONE)
        sample_task(second, organizer, category=TaskCategory.GRAPHICS)

        identity = identity_for(organizer)

        assert len(task_service.list(identity, event_guid=first.guid)) == 2
        assert len(task_service.list(identity, owner_guid=organizer.guid)) == 1
        assert len(task_service.list(identity, status=TaskStatus.DONE)) == 1
        by_both = task_service.list(
            identity, event_guid=first.guid, category=TaskCategory.GRAPHICS
        )
        assert [t.guid for t in by_both] == [graphics.guid]


class TestTaskServiceUpdate:
    """Tests for partial updates."""

    def test_update_leaves_omitted_fields(
        self, task_service, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(sample_event(), member, title="Poster")
        deadline = task.deadline

        updated = task_service.update(
            identity_for(member), task.guid, {"status": TaskStatus.IN_PROGRESS}
        )

        assert updated.status == TaskStatus.IN_PROGRESS
        assert updated.title == "Poster"
        assert updated.deadline == deadline

    def test_status_change_stamps_time(
        self, task_service, sample_event, sample_task, member, identity_for
    ):
        before = datetime.utcnow() - timedelta(days=3)
        task = sample_task(sample_event(), member, status_changed_at=before)

        updated = task_service.update(
            identity_for(member), task.guid, {"status": TaskStatus.DONE}
        )

        assert updated.status_changed_at > before

    def test_blocked_requires_note(
        self, task_service, test_db_session, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(sample_event(), member)

        with pytest.raises(ValidationError) as exc_info:
            task_service.update(identity_for(member), task.guid, {"status": TaskStatus.BLOCKED})

        assert exc_info.value.field == "blocker_note"
        test_db_session.refresh(task)
        assert task.status == TaskStatus.PENDING

    def test_blocked_with_note(
        self, task_service, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(sample_event(), member)

        updated = task_service.update(
            identity_for(member),
            task.guid,
            {"status": TaskStatus.BLOCKED, "blocker_note": "Waiting on venue"},
        )

        assert updated.status == TaskStatus.BLOCKED
        assert updated.blocker_note == "Waiting on venue"

    def test_blocked_with_stored_note(
        self, task_service, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(sample_event(), member, blocker_note="Vendor is late")

        updated = task_service.update(
            identity_for(member), task.guid, {"status": TaskStatus.BLOCKED}
        )

        assert updated.status == TaskStatus.BLOCKED

    @pytest.mark.parametrize("note", [None, "", "   "])
    def test_cannot_clear_note_of_blocked_task(
        self, task_service, test_db_session, sample_event, sample_task, member, identity_for,
        note,
    ):
        task = sample_task(
            sample_event(), member, status=TaskStatus.BLOCKED, blocker_note="Vendor is late"
        )

        with pytest.raises(ValidationError) as exc_info:
            task_service.update(identity_for(member), task.guid, {"blocker_note": note})

        assert exc_info.value.field == "blocker_note"
        test_db_session.refresh(task)
        assert task.status == TaskStatus.BLOCKED
        assert task.blocker_note == "Vendor is late"

    def test_clear_note_while_unblocking(
        self, task_service, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(
            sample_event(), member, status=TaskStatus.BLOCKED, blocker_note="Vendor is late"
        )

        updated = task_service.update(
            identity_for(member),
            task.guid,
            {"status": TaskStatus.IN_PROGRESS, "blocker_note": None},
        )

        assert updated.status == TaskStatus.IN_PROGRESS
        assert updated.blocker_note is None

    def test_core_member_cannot_reassign(
        self, task_service, sample_event, sample_task, member, other_member, identity_for
    ):
        task = sample_task(sample_event(), member)

        with pytest.raises(ForbiddenError):
            task_service.update(
                identity_for(member), task.guid, {"owner_guid": other_member.guid}
            )

    def test_organizer_reassigns(
        self, task_service, sample_event, sample_task, organizer, member, other_member,
        identity_for
    ):
        task = sample_task(sample_event(), member)

        updated = task_service.update(
            identity_for(organizer), task.guid, {"owner_guid": other_member.guid}
        )

        assert updated.owner_id == other_member.id

    def test_core_member_cannot_update_others_task(
        self, task_service, sample_event, sample_task, member, other_member, identity_for
    ):
        task = sample_task(sample_event(), other_member)

        with pytest.raises(ForbiddenError):
            task_service.update(identity_for(member), task.guid, {"title": "Mine now"})

    def test_required_field_cannot_be_cleared(
        self, task_service, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(sample_event(), member)

        with pytest.raises(ValidationError):
            task_service.update(identity_for(member), task.guid, {"title": None})


class TestTaskServiceDelete:
    """Tests for task deletion."""

    def test_organizer_deletes(
        self, task_service, test_db_session, sample_event, sample_task, organizer, member,
        identity_for
    ):
        task = sample_task(sample_event(), member)

        task_service.delete(identity_for(organizer), task.guid)

        assert test_db_session.query(Task).count() == 0

    def test_core_member_cannot_delete(
        self, task_service, test_db_session, sample_event, sample_task, member, identity_for
    ):
        task = sample_task(sample_event(), member)

        with pytest.raises(ForbiddenError):
            task_service.delete(identity_for(member), task.guid)

        assert test_db_session.query(Task).count() == 1
