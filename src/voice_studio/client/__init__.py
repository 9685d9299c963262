"""Dashboard-side client for testing agents in realtime sessions."""

from .api_client import APIError, StudioClient
from .connection import ConnectionState, ConnectionStateMachine, InvalidTransitionError
from .session_cache import SESSION_STORAGE_KEY, CachedSession, SessionCache
from .tester import AgentTester, LiveKitRoom, SessionExpiredError

__all__ = [
    "APIError",
    "AgentTester",
    "CachedSession",
    "ConnectionState",
    "ConnectionStateMachine",
    "InvalidTransitionError",
    "LiveKitRoom",
    "SESSION_STORAGE_KEY",
    "SessionCache",
    "SessionExpiredError",
    "StudioClient",
]
