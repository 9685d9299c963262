"""FastAPI dependencies: settings, stores, services and the caller identity."""

from fastapi import Depends, Header, HTTPException

from ..config import Settings, get_settings
from ..services.auth import verify_token
from ..services.livekit_service import LiveKitService
from ..services.provisioner import SessionProvisioner
from ..services.storage import AgentStore, SessionStore, UserStore


def get_agent_store(settings: Settings = Depends(get_settings)) -> AgentStore:
    return AgentStore(settings.data_path)


def get_session_store(
    settings: Settings = Depends(get_settings),
    agents: AgentStore = Depends(get_agent_store),
) -> SessionStore:
    return SessionStore(settings.data_path, agents)


def get_user_store(settings: Settings = Depends(get_settings)) -> UserStore:
    return UserStore(settings.data_path)


def get_livekit_service(settings: Settings = Depends(get_settings)) -> LiveKitService:
    return LiveKitService.from_settings(settings)


def get_provisioner(
    settings: Settings = Depends(get_settings),
    agents: AgentStore = Depends(get_agent_store),
    sessions: SessionStore = Depends(get_session_store),
    livekit: LiveKitService = Depends(get_livekit_service),
) -> SessionProvisioner:
    return SessionProvisioner(settings, agents, sessions, livekit)


async def get_current_user(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
) -> str:
    """Dependency to get current authenticated user."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid auth header")
    if scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid auth scheme")

    user_id = verify_token(token, settings.token_secret)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if user_id not in users.load():
        raise HTTPException(status_code=401, detail="User not found")

    return user_id
