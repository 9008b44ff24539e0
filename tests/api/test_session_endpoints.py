"""Tests for Session endpoints."""


class TestCreateSession:

    async def test_issues_mobile_session(self, client, tracking_service):
        response = await client.post("/api/v1/sessions")

        assert response.status_code == 201
        data = response.json()
        assert data["kind"] == "MOBILE"
        assert data["expires_at"] is not None
        assert tracking_service.sessions.get_session(data["session_id"]) is not None

    async def test_each_call_issues_new_session(self, client):
        first = (await client.post("/api/v1/sessions")).json()["session_id"]
        second = (await client.post("/api/v1/sessions")).json()["session_id"]
        assert first != second
