"""
Integration tests for Tasks API endpoints.

Tests end-to-end flows for task management:
- Creating tasks for an event
- Listing with filters and member visibility
- Partial updates and the blocker-note rule
- Detail view with the specialized sub-record
- Deletion (organizers only)
"""

from datetime import datetime

import pytest

from backend.src.models import GraphicsTask, Task, TaskCategory, TaskStatus


class TestTaskCreateAPI:
    """Tests for POST /api/tasks."""

    def test_create_defaults_owner_to_requester(
        self, test_client, auth_headers, member, sample_event
    ):
        event = sample_event()

        response = test_client.post(
            "/api/tasks",
            json={
                "event_guid": event.guid,
                "category": "GRAPHICS",
                "title": "Design poster",
                "deadline": "2026-11-20T10:00:00Z",
            },
            headers=auth_headers(member),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["guid"].startswith("tsk_")
        assert data["status"] == "PENDING"
        assert data["owner"]["guid"] == member.guid
        assert data["event_guid"] == event.guid
        assert data["deadline"] == "2026-11-20T10:00:00Z"
        assert data["subtask_guid"] is None

    def test_unknown_event(self, test_client, auth_headers, member):
        response = test_client.post(
            "/api/tasks",
            json={
                "event_guid": "evt_01hgw2bbg00000000000000000",
                "category": "LOGISTICS",
                "title": "Chairs",
                "deadline": "2026-11-20T10:00:00Z",
            },
            headers=auth_headers(member),
        )

        assert response.status_code == 404

    def test_unknown_owner(self, test_client, auth_headers, organizer, sample_event):
        response = test_client.post(
            "/api/tasks",
            json={
                "event_guid": sample_event().guid,
                "category": "LOGISTICS",
                "title": "Chairs",
                "deadline": "2026-11-20T10:00:00Z",
                "owner_guid": "usr_01hgw2bbg00000000000000000",
            },
            headers=auth_headers(organizer),
        )

        assert response.status_code == 400

    def test_invalid_category(self, test_client, auth_headers, member, sample_event):
        response = test_client.post(
            "/api/tasks",
            json={
                "event_guid": sample_event().guid,
                "category": "CATERING",
                "title": "Snacks",
                "deadline": "2026-11-20T10:00:00Z",
            },
            headers=auth_headers(member),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestTaskListAPI:
    """Tests for GET /api/tasks."""

    @pytest.fixture
    def tasks(self, sample_event, sample_task, member, other_member):
        event = sample_event()
        other_event = sample_event(name="Finale")
        return {
            "event": event,
            "late": sample_task(event, member, title="Poster",
                                deadline=datetime(2026, 11, 20, 10, 0)),
            "early": sample_task(event, other_member, title="Venue",
                                 category=TaskCategory.LOGISTICS,
                                 deadline=datetime(2026, 11, 10, 10, 0)),
            "elsewhere": sample_task(other_event, member, title="Reel",
                                     deadline=datetime(2026, 11, 15, 10, 0),
                                     status=TaskStatus.DONE),
        }

    def test_organizer_sees_all_by_deadline(self, test_client, auth_headers, organizer, tasks):
        response = test_client.get("/api/tasks", headers=auth_headers(organizer))

        assert response.status_code == 200
        assert [t["title"] for t in response.json()] == ["Venue", "Reel", "Poster"]

    def test_member_sees_own_tasks(self, test_client, auth_headers, member, tasks):
        response = test_client.get("/api/tasks", headers=auth_headers(member))

        assert [t["title"] for t in response.json()] == ["Reel", "Poster"]

    def test_filters(self, test_client, auth_headers, organizer, tasks):
        headers = auth_headers(organizer)

        by_event = test_client.get(
            "/api/tasks", params={"event_guid": tasks["event"].guid}, headers=headers
        )
        by_category = test_client.get(
            "/api/tasks", params={"category": "LOGISTICS"}, headers=headers
        )
        by_status = test_client.get("/api/tasks", params={"status": "DONE"}, headers=headers)

        assert [t["title"] for t in by_event.json()] == ["Venue", "Poster"]
        assert [t["title"] for t in by_category.json()] == ["Venue"]
        assert [t["title"] for t in by_status.json()] == ["Reel"]

    def test_unknown_event_filter(self, test_client, auth_headers, organizer, tasks):
        response = test_client.get(
            "/api/tasks",
            params={"event_guid": "evt_01hgw2bbg00000000000000000"},
            headers=auth_headers(organizer),
        )

        assert response.status_code == 404


class TestTaskUpdateAPI:
    """Tests for PUT /api/tasks/{guid}."""

    def test_partial_update(self, test_client, auth_headers, member, sample_event, sample_task):
        task = sample_task(sample_event(), member, title="Poster")

        response = test_client.put(
            f"/api/tasks/{task.guid}",
            json={"status": "IN_PROGRESS"},
            headers=auth_headers(member),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "IN_PROGRESS"
        assert data["title"] == "Poster"

    def test_blocked_requires_note(
        self, test_client, test_db_session, auth_headers, member, sample_event, sample_task
    ):
        task = sample_task(sample_event(), member)
        headers = auth_headers(member)

        rejected = test_client.put(
            f"/api/tasks/{task.guid}", json={"status": "BLOCKED"}, headers=headers
        )
        accepted = test_client.put(
            f"/api/tasks/{task.guid}",
            json={"status": "BLOCKED", "blocker_note": "Printer is down"},
            headers=headers,
        )

        assert rejected.status_code == 400
        assert rejected.json()["error"] == "validation_error"
        assert accepted.status_code == 200
        assert accepted.json()["blocker_note"] == "Printer is down"

    @pytest.mark.parametrize("note", [None, ""])
    def test_blocked_task_keeps_note(
        self, test_client, test_db_session, auth_headers, member, sample_event, sample_task,
        note,
    ):
        task = sample_task(
            sample_event(), member, status=TaskStatus.BLOCKED, blocker_note="Printer is down"
        )

        response = test_client.put(
            f"/api/tasks/{task.guid}", json={"blocker_note": note}, headers=auth_headers(member)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        test_db_session.refresh(task)
        assert task.status == TaskStatus.BLOCKED
        assert task.blocker_note == "Printer is down"

    def test_member_cannot_update_others_task(
        self, test_client, auth_headers, member, other_member, sample_event, sample_task
    ):
        task = sample_task(sample_event(), other_member)

        response = test_client.put(
            f"/api/tasks/{task.guid}",
            json={"title": "Mine now"},
            headers=auth_headers(member),
        )

        assert response.status_code == 403

    def test_member_cannot_reassign(
        self, test_client, auth_headers, member, other_member, sample_event, sample_task
    ):
        task = sample_task(sample_event(), member)

        response = test_client.put(
            f"/api/tasks/{task.guid}",
            json={"owner_guid": other_member.guid},
            headers=auth_headers(member),
        )

        assert response.status_code == 403

    def test_organizer_reassigns(
        self, test_client, auth_headers, organizer, member, other_member,
        sample_event, sample_task
    ):
        task = sample_task(sample_event(), member)

        response = test_client.put(
            f"/api/tasks/{task.guid}",
            json={"owner_guid": other_member.guid},
            headers=auth_headers(organizer),
        )

        assert response.status_code == 200
        assert response.json()["owner"]["guid"] == other_member.guid


class TestTaskDetailAndDeleteAPI:
    """Tests for GET and DELETE /api/tasks/{guid}."""

    def test_detail_includes_subrecord(
        self, test_client, test_db_session, auth_headers, member, sample_event, sample_task
    ):
        task = sample_task(sample_event(), member)
        test_db_session.add(GraphicsTask(
            task_id=task.id, owner_id=member.id, asset_type="poster", formats=["png"],
        ))
        test_db_session.commit()

        response = test_client.get(f"/api/tasks/{task.guid}", headers=auth_headers(member))

        assert response.status_code == 200
        data = response.json()
        assert data["event_name"] == "Launch Night"
        assert data["graphics_task"]["asset_type"] == "poster"
        assert data["graphics_task"]["status"] == "REQUESTED"
        assert data["subtask_guid"] == data["graphics_task"]["guid"]
        assert data["logistics_task"] is None

    def test_organizer_deletes(
        self, test_client, test_db_session, auth_headers, organizer, member,
        sample_event, sample_task
    ):
        task = sample_task(sample_event(), member)
        guid = task.guid

        response = test_client.delete(f"/api/tasks/{guid}", headers=auth_headers(organizer))

        assert response.status_code == 204
        test_db_session.expire_all()
        assert test_db_session.query(Task).count() == 0

    def test_member_cannot_delete(
        self, test_client, auth_headers, member, sample_event, sample_task
    ):
        task = sample_task(sample_event(), member)

        response = test_client.delete(f"/api/tasks/{task.guid}", headers=auth_headers(member))

        assert response.status_code == 403
