"""Data models for the Voice Studio platform."""

from .agent import (
    AgentConfig,
    AgentCreate,
    AgentDetail,
    AgentListResponse,
    AgentSummary,
    AgentUpdate,
    Pagination,
    RuntimeAgentConfig,
    TurnDetection,
)
from .livekit import SessionCreate, SessionResponse, TestSessionResponse
from .session import SessionRecord, SessionReport, SessionStatus, SessionSummary

__all__ = [
    "AgentConfig",
    "AgentCreate",
    "AgentDetail",
    "AgentListResponse",
    "AgentSummary",
    "AgentUpdate",
    "Pagination",
    "RuntimeAgentConfig",
    "TurnDetection",
    "SessionCreate",
    "SessionResponse",
    "TestSessionResponse",
    "SessionRecord",
    "SessionReport",
    "SessionStatus",
    "SessionSummary",
]
