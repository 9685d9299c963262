"""Session data models."""

from enum import Enum
from typing import Any

from pydantic import Field

from .base import CamelModel


class SessionStatus(str, Enum):
    """Lifecycle status of a realtime session."""

    ACTIVE = "active"
    ENDED = "ended"


class SessionRecord(CamelModel):
    """One realtime test or production session tied to an agent config."""

    id: str
    session_id: str
    room_name: str
    user_id: str
    agent_id: str
    status: SessionStatus = SessionStatus.ACTIVE
    metadata: dict[str, Any] = Field(default_factory=dict)
    total_duration: float | None = None
    avg_latency: float | None = None
    message_count: int = 0
    started_at: str
    ended_at: str | None = None


class SessionSummary(CamelModel):
    """Session fields shown alongside an agent."""

    id: str
    status: SessionStatus
    total_duration: float | None = None
    avg_latency: float | None = None
    message_count: int = 0
    started_at: str
    ended_at: str | None = None


class SessionReport(CamelModel):
    """End-of-session metrics posted by the worker."""

    total_duration: float = Field(..., ge=0)
    avg_latency: float | None = Field(default=None, ge=0)
    message_count: int = Field(default=0, ge=0)
