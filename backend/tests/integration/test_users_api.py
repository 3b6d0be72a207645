"""
Integration tests for the current-user endpoints and service probes.
"""


class TestUsersAPI:
    """Tests for /api/users/me and preferences."""

    def test_me(self, test_client, auth_headers, organizer):
        response = test_client.get("/api/users/me", headers=auth_headers(organizer))

        assert response.status_code == 200
        assert response.json() == {
            "guid": organizer.guid,
            "email": "lead@example.com",
            "name": "Event Lead",
            "role": "ORGANIZER",
            "is_organizer": True,
            "auth_method": "token",
        }

    def test_me_without_credentials(self, test_client):
        response = test_client.get("/api/users/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    def test_invalid_token(self, test_client):
        response = test_client.get(
            "/api/users/me", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 401

    def test_preferences_round_trip(self, test_client, auth_headers, member):
        headers = auth_headers(member)

        defaults = test_client.get("/api/users/me/preferences", headers=headers)
        assert defaults.json() == {
            "theme_preference": "system",
            "calendar_view": "month",
            "sidebar_collapsed": False,
        }

        updated = test_client.patch(
            "/api/users/me/preferences", json={"theme_preference": "dark"}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()["theme_preference"] == "dark"
        assert updated.json()["calendar_view"] == "month"

        reloaded = test_client.get("/api/users/me/preferences", headers=headers)
        assert reloaded.json()["theme_preference"] == "dark"

    def test_invalid_preference(self, test_client, auth_headers, member):
        response = test_client.patch(
            "/api/users/me/preferences",
            json={"calendar_view": "year"},
            headers=auth_headers(member),
        )

        assert response.status_code == 400


class TestServiceEndpoints:
    """Tests for health and root endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "eventflow-backend"

    def test_root(self, test_client):
        assert test_client.get("/").json()["message"] == "Eventflow API"

    def test_unknown_route(self, test_client):
        response = test_client.get("/api/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
