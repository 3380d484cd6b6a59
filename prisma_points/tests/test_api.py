"""
HTTP tests for the FastAPI app.

The database dependency is overridden with the in-memory test session.
"""
import pytest
from fastapi.testclient import TestClient

from prisma_points.main import app
from prisma_points.database import get_db
from prisma_points.auth import API_KEY


@pytest.fixture
def client(db_session, default_settings):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app, headers={"X-API-Key": API_KEY})
    finally:
        app.dependency_overrides.clear()


class TestAuth:
    """Tests for API key protection"""

    def test_health_is_public(self, client):
        """The root endpoint needs no key"""
        response = TestClient(app).get("/")
        assert response.status_code == 200

    def test_missing_key(self, client):
        """API routes reject requests without a key"""
        response = TestClient(app).get("/api/actions")
        assert response.status_code == 401


class TestValidationFlow:
    """Tests for submit and validate over HTTP"""

    def test_submit_and_validate(self, client, analyst, admin, innovation_action):
        """A validated log credits the user"""
        response = client.post(f"/api/users/{analyst.id}/logs", json={"action_id": innovation_action.id})
        assert response.status_code == 201
        log_id = response.json()["id"]

        response = client.post(
            f"/api/logs/{log_id}/resolve",
            params={"validator_id": admin.id},
            json={"status": "validated"}
        )
        assert response.status_code == 200
        assert response.json()["points_awarded"] == 90

        response = client.get(f"/api/users/{analyst.id}/balance")
        assert response.json()["points"] == 90

    def test_revalidation_conflict(self, client, analyst, innovation_action):
        """Resolving a terminal log returns 409"""
        log_id = client.post(f"/api/users/{analyst.id}/logs", json={"action_id": innovation_action.id}).json()["id"]
        client.post(f"/api/logs/{log_id}/resolve", json={"status": "validated"})

        response = client.post(f"/api/logs/{log_id}/resolve", json={"status": "rejected"})
        assert response.status_code == 409

    def test_bad_status_rejected_by_schema(self, client, analyst, innovation_action):
        """Only validated/rejected are accepted"""
        log_id = client.post(f"/api/users/{analyst.id}/logs", json={"action_id": innovation_action.id}).json()["id"]

        response = client.post(f"/api/logs/{log_id}/resolve", json={"status": "approved"})
        assert response.status_code == 422

    def test_unknown_user(self, client, innovation_action):
        """Unknown users map to 404"""
        response = client.post("/api/users/999/logs", json={"action_id": innovation_action.id})
        assert response.status_code == 404

    def test_admin_log_requires_admin(self, client, analyst, innovation_action):
        """Non-admin actors get 403"""
        response = client.post(
            "/api/admin/logs",
            params={"actor_id": analyst.id},
            json={"user_id": analyst.id, "action_id": innovation_action.id}
        )
        assert response.status_code == 403


class TestRedemptionFlow:
    """Tests for redemption over HTTP"""

    def test_insufficient_points(self, client, analyst, prize):
        """Unaffordable prizes map to 400"""
        response = client.post(f"/api/users/{analyst.id}/redemptions", json={"prize_id": prize.id})
        assert response.status_code == 400

    def test_request_and_refuse(self, client, make_user, prize):
        """Refusal refunds the debit"""
        user = make_user(username="rica", points=300)

        response = client.post(f"/api/users/{user.id}/redemptions", json={"prize_id": prize.id})
        assert response.status_code == 201
        redemption_id = response.json()["id"]
        assert client.get(f"/api/users/{user.id}/balance").json()["points"] == 0

        response = client.post(f"/api/redemptions/{redemption_id}/resolve", json={"status": "refused"})
        assert response.json()["status"] == "refused"
        assert client.get(f"/api/users/{user.id}/balance").json()["points"] == 300


class TestSettingsAndReports:
    """Tests for settings and report endpoints"""

    def test_settings_update(self, client):
        """Prize store can be locked"""
        response = client.put("/api/settings", json={"prizes_locked": True})
        assert response.status_code == 200
        assert response.json()["prizes_locked"] is True
        assert response.json()["actions_locked"] is False

    def test_leaderboard(self, client, analyst, admin):
        """Leaderboard lists analysts only"""
        response = client.get("/api/reports/leaderboard")
        assert response.status_code == 200
        assert [entry["user_id"] for entry in response.json()] == [analyst.id]

    def test_missions_view(self, client, analyst, weekly_mission):
        """User missions include untouched global missions"""
        response = client.get(f"/api/users/{analyst.id}/missions")
        assert response.status_code == 200
        assert response.json()[0]["progress"] == 0

    def test_claim_unfinished_mission(self, client, analyst, weekly_mission):
        """Claiming an unfinished mission maps to 400"""
        response = client.post(f"/api/users/{analyst.id}/missions/{weekly_mission.id}/claim")
        assert response.status_code == 400

    def test_delete_action_in_use(self, client, analyst, innovation_action):
        """Deleting a logged action maps to 409"""
        client.post(f"/api/users/{analyst.id}/logs", json={"action_id": innovation_action.id})

        response = client.delete(f"/api/actions/{innovation_action.id}")
        assert response.status_code == 409
