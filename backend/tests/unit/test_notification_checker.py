"""
Unit tests for NotificationChecker.

Tests the overdue, blocked, and approaching-deadline scans and their
de-duplication windows.
"""

import logging

import pytest
from datetime import datetime, timedelta

from backend.src.models import Notification, NotificationCategory, TaskStatus
from backend.src.services.exceptions import ValidationError
from backend.src.services.notification_checker import NotificationChecker
from backend.src.utils.logging_config import get_logger


NOW = datetime(2026, 11, 10, 12, 0)


@pytest.fixture
def checker(test_db_session):
    """Create a NotificationChecker instance for testing."""
    return NotificationChecker(test_db_session)


def _notifications(session, category):
    return (
        session.query(Notification)
        .filter(Notification.category == category)
        .order_by(Notification.id.asc())
        .all()
    )


class TestCheckOverdue:
    """Tests for the overdue scan."""

    def test_one_notification_per_overdue_task(
        self, checker, test_db_session, sample_event, sample_task, member, other_member
    ):
        event = sample_event()
        late = sample_task(event, member, title="Poster", deadline=NOW - timedelta(hours=1))
        sample_task(event, other_member, title="Venue", deadline=NOW - timedelta(days=2))
        sample_task(event, member, title="Done", deadline=NOW - timedelta(days=1),
                    status=TaskStatus.DONE)
        sample_task(event, member, title="Future", deadline=NOW + timedelta(days=1))

        created = checker.check_overdue(now=NOW)

        assert created == 2
        notifications = _notifications(test_db_session, NotificationCategory.TASK_OVERDUE)
        assert {n.task_id for n in notifications} == {
            t.id for t in event.tasks if t.title in ("Poster", "Venue")
        }
        by_task = {n.task_id: n for n in notifications}
        assert by_task[late.id].user_id == member.id
        assert by_task[late.id].message == 'Task "Poster" is overdue'
        assert by_task[late.id].event_id == event.id

    def test_second_run_emits_nothing(
        self, checker, test_db_session, sample_event, sample_task, member
    ):
        sample_task(sample_event(), member, deadline=NOW - timedelta(hours=1))

        assert checker.check_overdue(now=NOW) == 1
        assert checker.check_overdue(now=NOW + timedelta(minutes=5)) == 0
        assert len(_notifications(test_db_session, NotificationCategory.TASK_OVERDUE)) == 1

    def test_renotifies_after_window(
        self, checker, sample_event, sample_task, member
    ):
        sample_task(sample_event(), member, deadline=NOW - timedelta(hours=1))

        assert checker.check_overdue(now=NOW) == 1
        assert checker.check_overdue(now=NOW + timedelta(hours=25)) == 1

    def test_no_tasks(self, checker):
        assert checker.check_overdue(now=NOW) == 0


class TestCheckBlocked:
    """Tests for the blocked scan."""

    def test_blocked_past_threshold(
        self, checker, test_db_session, sample_event, sample_task, member
    ):
        event = sample_event()
        stuck = sample_task(
            event, member, title="Stuck", status=TaskStatus.BLOCKED, blocker_note="Vendor",
            status_changed_at=NOW - timedelta(hours=30),
        )
        sample_task(
            event, member, title="Fresh", status=TaskStatus.BLOCKED, blocker_note="Vendor",
            status_changed_at=NOW - timedelta(hours=2),
        )

        created = checker.check_blocked(threshold_hours=24, now=NOW)

        assert created == 1
        [notification] = _notifications(test_db_session, NotificationCategory.TASK_BLOCKED)
        assert notification.task_id == stuck.id
        assert "blocked for at least 24 hours" in notification.message

    def test_exactly_at_threshold(self, checker, sample_event, sample_task, member):
        sample_task(
            sample_event(), member, status=TaskStatus.BLOCKED, blocker_note="Vendor",
            status_changed_at=NOW - timedelta(hours=24),
        )

        assert checker.check_blocked(threshold_hours=24, now=NOW) == 1

    @pytest.mark.parametrize("threshold", [0, -3])
    def test_threshold_must_be_positive(self, checker, threshold):
        with pytest.raises(ValidationError):
            checker.check_blocked(threshold_hours=threshold, now=NOW)


class TestCheckApproaching:
    """Tests for the approaching-deadline scan."""

    def test_within_lookahead(
        self, checker, test_db_session, sample_event, sample_task, member
    ):
        event = sample_event()
        soon = sample_task(event, member, title="Soon", deadline=NOW + timedelta(hours=5))
        sample_task(event, member, title="Later", deadline=NOW + timedelta(hours=48))
        sample_task(event, member, title="Finished", deadline=NOW + timedelta(hours=3),
                    status=TaskStatus.DONE)

        created = checker.check_approaching_deadlines(now=NOW, lookahead_hours=24)

        assert created == 1
        [notification] = _notifications(
            test_db_session, NotificationCategory.DEADLINE_APPROACHING
        )
        assert notification.task_id == soon.id
        assert "(due 2026-11-10 17:00 UTC)" in notification.message

    def test_window_is_twelve_hours(self, checker, sample_event, sample_task, member):
        sample_task(sample_event(), member, deadline=NOW + timedelta(hours=20))

        assert checker.check_approaching_deadlines(now=NOW) == 1
        assert checker.check_approaching_deadlines(now=NOW + timedelta(hours=6)) == 0
        assert checker.check_approaching_deadlines(now=NOW + timedelta(hours=13)) == 1


class TestRunAll:
    """Tests for running every scan."""

    def test_counts(self, checker, sample_event, sample_task, member):
        event = sample_event()
        sample_task(event, member, deadline=NOW - timedelta(hours=1))
        sample_task(event, member, deadline=NOW + timedelta(hours=2))
        sample_task(
            event, member, status=TaskStatus.BLOCKED, blocker_note="Waiting",
            deadline=NOW + timedelta(days=5), status_changed_at=NOW - timedelta(days=2),
        )

        counts = checker.run_all(now=NOW)

        assert counts == {"overdue": 1, "blocked": 1, "approaching": 1, "total": 3}
        assert checker.run_all(now=NOW)["total"] == 0


class _RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def service_log_records():
    """Capture INFO records of the services logger (it does not propagate)."""
    logger = get_logger("services")
    handler = _RecordingHandler()
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    yield handler.records
    logger.removeHandler(handler)
    logger.setLevel(previous_level)


class TestScanLogging:
    """Tests for the per-scan summary log."""

    def test_scans_log_counts_at_info(
        self, checker, sample_event, sample_task, member, service_log_records
    ):
        event = sample_event()
        sample_task(event, member, deadline=NOW - timedelta(hours=1))
        sample_task(
            event, member, status=TaskStatus.BLOCKED, blocker_note="Waiting",
            deadline=NOW + timedelta(days=5), status_changed_at=NOW - timedelta(hours=48),
        )

        counts = checker.run_all(now=NOW)

        assert counts["overdue"] == 1
        assert counts["blocked"] == 1
        summaries = {
            r.category: r.notified for r in service_log_records if hasattr(r, "notified")
        }
        assert summaries["TASK_OVERDUE"] == 1
        assert summaries["TASK_BLOCKED"] == 1
        assert summaries["DEADLINE_APPROACHING"] == 0
