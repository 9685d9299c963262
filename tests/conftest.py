"""Shared test fixtures and fakes."""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from voice_studio.api import create_app
from voice_studio.api.dependencies import get_livekit_service
from voice_studio.config import Settings, get_settings
from voice_studio.services.storage import AgentStore, SessionStore

WORKER_KEY = "worker-test-key"
WEBHOOK_AUTH = "signed-webhook"


class FakeLiveKit:
    """Records room platform calls; any step can be made to fail."""

    def __init__(self, ws_url: str = "wss://test.livekit.cloud"):
        self.ws_url = ws_url
        self.rooms: dict[str, str] = {}
        self.dispatches: list[dict] = []
        self.tokens: list[dict] = []
        self.fail_on: set[str] = set()
        self.webhook_event = None

    async def create_room(self, room_name: str, metadata: str):
        if "create_room" in self.fail_on:
            raise RuntimeError("twirp error: room service unavailable")
        self.rooms[room_name] = metadata
        return SimpleNamespace(name=room_name, metadata=metadata)

    async def dispatch_agent(self, room_name: str, agent_name: str, metadata: str) -> str:
        if "dispatch_agent" in self.fail_on:
            raise RuntimeError("twirp error: no worker for agent")
        self.dispatches.append({"room": room_name, "agent_name": agent_name, "metadata": metadata})
        return f"AD_{len(self.dispatches)}"

    async def has_active_dispatch(self, room_name: str, agent_name: str) -> bool:
        return any(
            d["room"] == room_name and d["agent_name"] == agent_name for d in self.dispatches
        )

    def create_token(self, room_name, identity, name=None, expires_in_seconds=3600, agent=False):
        if "create_token" in self.fail_on:
            raise ValueError("api secret missing")
        self.tokens.append(
            {"room": room_name, "identity": identity, "ttl": expires_in_seconds, "agent": agent}
        )
        return f"jwt-{room_name}-{identity}"

    def receive_webhook(self, body: str, auth_header: str):
        if auth_header != WEBHOOK_AUTH:
            raise ValueError("invalid webhook signature")
        return self.webhook_event


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        data_path=tmp_path / "data",
        token_secret="test-secret",
        worker_api_key=WORKER_KEY,
        worker_dispatch_name="studio-agent-test",
        livekit_url="wss://test.livekit.cloud",
        livekit_api_key="APItest",
        livekit_api_secret="test-livekit-secret-with-enough-length",
        api_base_url="http://studio.test",
    )


@pytest.fixture
def livekit() -> FakeLiveKit:
    return FakeLiveKit()


@pytest.fixture
def agent_store(settings) -> AgentStore:
    return AgentStore(settings.data_path)


@pytest.fixture
def session_store(settings, agent_store) -> SessionStore:
    return SessionStore(settings.data_path, agent_store)


@pytest.fixture
def app(settings, livekit):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_livekit_service] = lambda: livekit
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def register(client: TestClient, email: str = "owner@example.com") -> dict:
    response = client.post(
        "/v1/auth/register",
        json={"email": email, "password": "correct-horse", "name": "Owner"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def auth_headers(client) -> dict:
    return register(client)


@pytest.fixture
def other_headers(client) -> dict:
    return register(client, email="someone-else@example.com")


AGENT_PAYLOAD = {
    "name": "Support Agent",
    "description": "Answers billing questions",
    "instructions": "You are a friendly support agent for Acme.",
}


@pytest.fixture
def agent(client, auth_headers) -> dict:
    response = client.post("/v1/agents", json=AGENT_PAYLOAD, headers=auth_headers)
    assert response.status_code == 201
    return response.json()
