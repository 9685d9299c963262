"""Persistence, room platform and provisioning services."""

from .livekit_service import LiveKitService
from .provisioner import SessionProvisioner
from .storage import AgentStore, SessionStore, UserStore

__all__ = ["AgentStore", "LiveKitService", "SessionProvisioner", "SessionStore", "UserStore"]
