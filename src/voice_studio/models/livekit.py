"""Realtime session request/response models."""

from pydantic import Field

from .agent import RuntimeAgentConfig
from .base import CamelModel


class SessionCreate(CamelModel):
    """Request model for provisioning a realtime session."""

    agent_id: str = Field(..., min_length=1, description="Agent config to provision for")
    is_test: bool = Field(default=False, description="Use an isolated, single-use room")


class SessionResponse(CamelModel):
    """Connection parameters for a provisioned session."""

    session_id: str
    room_name: str
    access_token: str
    ws_url: str
    livekit_agent_name: str
    agent_config: RuntimeAgentConfig


class TestAgentConfig(CamelModel):
    llm_provider: str
    llm_model: str
    stt_provider: str
    tts_provider: str
    instructions: str


class TestSessionResponse(CamelModel):
    """Lightweight test session created without room provisioning."""

    # Keeps pytest from collecting this as a test class.
    __test__ = False

    session_id: str
    room_name: str
    agent_config: TestAgentConfig


class WebhookResponse(CamelModel):
    status: str = "ok"
    ended_sessions: int = 0
