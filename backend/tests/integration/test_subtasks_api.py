"""
Integration tests for the task sub-resource endpoints.

Tests end-to-end flows for:
- /api/graphics-tasks
- /api/logistics-tasks
- /api/outreach-tasks
- /api/sponsorship-tasks
"""

import pytest

from backend.src.models import GraphicsTask, TaskCategory, TaskStatus


@pytest.fixture
def task_of(sample_event, sample_task, member):
    """Create a task of the given category owned by the member."""
    event = sample_event()

    def _create(category, owner=None):
        return sample_task(event, owner or member, category=category)
    return _create


class TestGraphicsTasksAPI:
    """Tests for graphics sub-records."""

    def test_create_starts_requested(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.GRAPHICS)

        response = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": "banner", "formats": ["png", "svg"]},
            headers=auth_headers(member),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["guid"].startswith("gfx_")
        assert data["status"] == "REQUESTED"
        assert data["formats"] == ["png", "svg"]
        assert data["task_guid"] == task.guid
        assert data["owner_guid"] == member.guid
        assert data["task"]["title"] == task.title

    @pytest.mark.parametrize("asset_type", ["POSTER", "Instagram carousel"])
    def test_asset_type_is_free_form(
        self, test_client, auth_headers, member, task_of, asset_type
    ):
        task = task_of(TaskCategory.GRAPHICS)

        response = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": asset_type, "formats": ["png"]},
            headers=auth_headers(member),
        )

        assert response.status_code == 201
        assert response.json()["asset_type"] == asset_type

    def test_blank_asset_type_rejected(
        self, test_client, test_db_session, auth_headers, member, task_of
    ):
        task = task_of(TaskCategory.GRAPHICS)

        response = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": "  ", "formats": ["png"]},
            headers=auth_headers(member),
        )

        assert response.status_code == 400
        assert "asset_type" in response.json()["message"]
        assert test_db_session.query(GraphicsTask).count() == 0

    def test_missing_formats_writes_nothing(
        self, test_client, test_db_session, auth_headers, member, task_of
    ):
        task = task_of(TaskCategory.GRAPHICS)

        response = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": "poster"},
            headers=auth_headers(member),
        )

        assert response.status_code == 400
        assert "formats" in response.json()["message"]
        assert test_db_session.query(GraphicsTask).count() == 0

    def test_second_record_conflicts(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.GRAPHICS)
        body = {"task_guid": task.guid, "asset_type": "story", "formats": ["jpg"]}
        headers = auth_headers(member)

        assert test_client.post("/api/graphics-tasks", json=body, headers=headers).status_code == 201
        response = test_client.post("/api/graphics-tasks", json=body, headers=headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_wrong_category(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.LOGISTICS)

        response = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": "poster", "formats": ["png"]},
            headers=auth_headers(member),
        )

        assert response.status_code == 400

    def test_update_status_leaves_task_alone(
        self, test_client, test_db_session, auth_headers, member, task_of
    ):
        task = task_of(TaskCategory.GRAPHICS)
        headers = auth_headers(member)
        created = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": "poster", "formats": ["png"]},
            headers=headers,
        ).json()

        response = test_client.put(
            "/api/graphics-tasks",
            json={
                "guid": created["guid"],
                "status": "DELIVERED",
                "final_output_link": "https://files.example.com/poster.png",
            },
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DELIVERED"
        assert data["final_output_link"] == "https://files.example.com/poster.png"
        test_db_session.refresh(task)
        assert task.status == TaskStatus.PENDING

    def test_update_unknown_record(self, test_client, auth_headers, member):
        response = test_client.put(
            "/api/graphics-tasks",
            json={"guid": "gfx_01hgw2bbg00000000000000000", "status": "REVIEW"},
            headers=auth_headers(member),
        )

        assert response.status_code == 404

    def test_member_cannot_touch_others_task(
        self, test_client, auth_headers, member, other_member, task_of
    ):
        task = task_of(TaskCategory.GRAPHICS, owner=other_member)

        response = test_client.post(
            "/api/graphics-tasks",
            json={"task_guid": task.guid, "asset_type": "poster", "formats": ["png"]},
            headers=auth_headers(member),
        )

        assert response.status_code == 403


class TestLogisticsTasksAPI:
    """Tests for logistics sub-records."""

    def test_create_and_update(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.LOGISTICS)
        headers = auth_headers(member)

        created = test_client.post(
            "/api/logistics-tasks",
            json={"task_guid": task.guid, "status": "NOT_READY"},
            headers=headers,
        )
        assert created.status_code == 201
        assert created.json()["status"] == "NOT_READY"

        updated = test_client.put(
            "/api/logistics-tasks",
            json={"guid": created.json()["guid"], "status": "READY"},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["status"] == "READY"

    def test_status_required(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.LOGISTICS)

        response = test_client.post(
            "/api/logistics-tasks",
            json={"task_guid": task.guid},
            headers=auth_headers(member),
        )

        assert response.status_code == 400


class TestOutreachTasksAPI:
    """Tests for outreach sub-records."""

    def test_partial_update_keeps_other_fields(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.OUTREACH)
        headers = auth_headers(member)
        created = test_client.post(
            "/api/outreach-tasks",
            json={
                "task_guid": task.guid,
                "channel": "instagram",
                "scheduled_time": "2026-11-12T09:00:00Z",
            },
            headers=headers,
        ).json()
        assert created["status"] == "PENDING"

        response = test_client.put(
            "/api/outreach-tasks",
            json={"guid": created["guid"], "outcome_note": "sent"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["outcome_note"] == "sent"
        assert data["status"] == "PENDING"
        assert data["channel"] == "instagram"
        assert data["scheduled_time"] == "2026-11-12T09:00:00Z"

    def test_channel_not_updatable(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.OUTREACH)
        headers = auth_headers(member)
        created = test_client.post(
            "/api/outreach-tasks",
            json={"task_guid": task.guid, "channel": "email"},
            headers=headers,
        ).json()

        response = test_client.put(
            "/api/outreach-tasks",
            json={"guid": created["guid"], "channel": "whatsapp"},
            headers=headers,
        )

        # Unknown update fields are dropped by the request schema
        assert response.status_code == 200
        assert response.json()["channel"] == "email"

    @pytest.mark.parametrize("channel", ["INSTAGRAM", "newsletter"])
    def test_channel_is_free_form(self, test_client, auth_headers, member, task_of, channel):
        task = task_of(TaskCategory.OUTREACH)

        response = test_client.post(
            "/api/outreach-tasks",
            json={"task_guid": task.guid, "channel": f" {channel} "},
            headers=auth_headers(member),
        )

        assert response.status_code == 201
        assert response.json()["channel"] == channel


class TestSponsorshipTasksAPI:
    """Tests for sponsorship sub-records."""

    def test_stage_changes_append_history(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.SPONSORSHIP)
        headers = auth_headers(member)
        created = test_client.post(
            "/api/sponsorship-tasks",
            json={
                "task_guid": task.guid,
                "current_stage": "INITIAL_CONTACT",
                "next_action": "Send deck",
            },
            headers=headers,
        )
        assert created.status_code == 201
        assert [h["stage"] for h in created.json()["status_history"]] == ["INITIAL_CONTACT"]

        response = test_client.put(
            "/api/sponsorship-tasks",
            json={"guid": created.json()["guid"], "current_stage": "PROPOSAL_SENT"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["current_stage"] == "PROPOSAL_SENT"
        assert data["next_action"] == "Send deck"
        assert [h["stage"] for h in data["status_history"]] == [
            "INITIAL_CONTACT", "PROPOSAL_SENT",
        ]

    def test_invalid_stage(self, test_client, auth_headers, member, task_of):
        task = task_of(TaskCategory.SPONSORSHIP)

        response = test_client.post(
            "/api/sponsorship-tasks",
            json={"task_guid": task.guid, "current_stage": "SIGNED"},
            headers=auth_headers(member),
        )

        assert response.status_code == 400
