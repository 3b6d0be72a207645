"""
Unit tests for NavigationGuardMiddleware.

Uses a minimal app with a stub identity resolver so the redirect rules can
be checked without a database.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.src.middleware.identity import Identity
from backend.src.middleware.navigation import NavigationGuardMiddleware
from backend.src.models import UserRole


ORGANIZER = Identity(
    user_id=1, user_guid="usr_organizer", email="lead@example.com", role=UserRole.ORGANIZER
)
MEMBER = Identity(
    user_id=2, user_guid="usr_member", email="member@example.com", role=UserRole.CORE_MEMBER
)


def _client(identity):
    app = FastAPI()
    app.add_middleware(NavigationGuardMiddleware, identity_resolver=lambda request: identity)

    @app.get("/dashboard")
    async def dashboard():
        return {"page": "dashboard"}

    @app.get("/organizer/overview")
    async def organizer_overview():
        return {"page": "organizer"}

    @app.get("/events/{guid}")
    async def event_page(guid: str):
        return {"page": "event"}

    @app.get("/login")
    async def login():
        return {"page": "login"}

    @app.get("/api/events")
    async def api_events():
        return []

    return TestClient(app, follow_redirects=False)


class TestNavigationGuard:
    """Tests for page redirects."""

    @pytest.mark.parametrize("path", ["/dashboard", "/organizer/overview", "/events/evt_x"])
    def test_anonymous_redirected_to_login(self, path):
        response = _client(None).get(path)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_member_redirected_from_organizer_pages(self):
        response = _client(MEMBER).get("/organizer/overview")

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

    def test_member_sees_dashboard(self):
        response = _client(MEMBER).get("/dashboard")
        assert response.status_code == 200

    def test_organizer_sees_organizer_pages(self):
        response = _client(ORGANIZER).get("/organizer/overview")
        assert response.json() == {"page": "organizer"}

    def test_api_is_never_redirected(self):
        response = _client(None).get("/api/events")
        assert response.status_code == 200

    def test_unguarded_page(self):
        response = _client(None).get("/login")
        assert response.status_code == 200
