"""Tests for session provisioning and LiveKit webhook endpoints."""

from types import SimpleNamespace

from conftest import WEBHOOK_AUTH


class TestCreateSessionEndpoint:
    def test_returns_connection_parameters(self, client, auth_headers, agent, livekit):
        response = client.post(
            "/v1/livekit/create-session", json={"agentId": agent["id"]}, headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {
            "sessionId",
            "roomName",
            "accessToken",
            "wsUrl",
            "livekitAgentName",
            "agentConfig",
        }
        assert body["wsUrl"] == livekit.ws_url
        assert body["roomName"].startswith(f"agent-{agent['id']}-")
        assert body["agentConfig"]["instructions"] == agent["instructions"]

        session = client.get(f"/v1/sessions/{body['sessionId']}", headers=auth_headers)
        assert session.status_code == 200
        assert session.json()["status"] == "active"

    def test_is_test_defaults_to_false(self, client, auth_headers, agent, session_store):
        client.post("/v1/livekit/create-session", json={"agentId": agent["id"]}, headers=auth_headers)
        assert session_store.all()[0].metadata["isTest"] is False

    def test_platform_failure_is_generic_500(self, client, auth_headers, agent, livekit, session_store):
        livekit.fail_on.add("dispatch_agent")

        response = client.post(
            "/v1/livekit/create-session", json={"agentId": agent["id"]}, headers=auth_headers
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to provision session"}
        assert "twirp" not in response.text
        assert session_store.all() == []

    def test_other_owner_gets_not_found(self, client, other_headers, agent, livekit):
        response = client.post(
            "/v1/livekit/create-session", json={"agentId": agent["id"]}, headers=other_headers
        )
        assert response.status_code == 404
        assert livekit.rooms == {}

    def test_missing_agent_id(self, client, auth_headers):
        response = client.post("/v1/livekit/create-session", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "agentId"


class TestWebhook:
    def _provision(self, client, headers, agent_id):
        return client.post(
            "/v1/livekit/create-session", json={"agentId": agent_id}, headers=headers
        ).json()

    def test_room_finished_ends_active_sessions(self, client, auth_headers, agent, livekit, session_store):
        first = self._provision(client, auth_headers, agent["id"])
        self._provision(client, auth_headers, agent["id"])
        livekit.webhook_event = SimpleNamespace(
            event="room_finished", room=SimpleNamespace(name=first["roomName"])
        )

        response = client.post(
            "/v1/livekit/webhook",
            content=b'{"event": "room_finished"}',
            headers={"Authorization": WEBHOOK_AUTH, "Content-Type": "application/webhook+json"},
        )

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "endedSessions": 2}
        for record in session_store.all():
            assert record.status == "ended"
            assert record.ended_at is not None
            assert record.total_duration is not None

    def test_other_events_change_nothing(self, client, auth_headers, agent, livekit, session_store):
        session = self._provision(client, auth_headers, agent["id"])
        livekit.webhook_event = SimpleNamespace(
            event="participant_joined", room=SimpleNamespace(name=session["roomName"])
        )

        response = client.post(
            "/v1/livekit/webhook", content=b"{}", headers={"Authorization": WEBHOOK_AUTH}
        )

        assert response.json()["endedSessions"] == 0
        assert session_store.all()[0].status == "active"

    def test_bad_signature_rejected(self, client):
        response = client.post(
            "/v1/livekit/webhook", content=b"{}", headers={"Authorization": "forged"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid webhook signature"}
