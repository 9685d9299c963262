"""Client-side cache of the last provisioned test session."""

import json
import logging
from collections.abc import MutableMapping

from pydantic import ValidationError

from ..models.base import CamelModel

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "livekit:testSession"


class CachedSession(CamelModel):
    """Connection parameters remembered between page loads."""

    agent_id: str
    agent_name: str | None = None
    livekit_agent_name: str | None = None
    session_id: str | None = None
    room_name: str | None = None
    access_token: str | None = None
    ws_url: str | None = None


class SessionCache:
    """Single-entry cache over a string mapping (the sessionStorage analogue).

    Entries are never expired by time; a stale token is only discovered when
    connecting with it fails.
    """

    def __init__(self, storage: MutableMapping[str, str] | None = None):
        self.storage = storage if storage is not None else {}

    def load(self) -> CachedSession | None:
        raw = self.storage.get(SESSION_STORAGE_KEY)
        if not raw:
            return None
        try:
            return CachedSession.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cached session: {e}")
            return None

    def get_reusable(self, agent_id: str) -> CachedSession | None:
        """Return the cached session if it belongs to agent_id and can connect."""
        session = self.load()
        if session is None or session.agent_id != agent_id:
            return None
        if not session.access_token or not session.ws_url:
            return None
        return session

    def save(self, session: CachedSession) -> None:
        self.storage[SESSION_STORAGE_KEY] = session.model_dump_json(by_alias=True)

    def invalidate(self, agent_id: str | None = None) -> None:
        """Drop the entry, optionally only when it belongs to agent_id."""
        if agent_id is not None:
            session = self.load()
            if session is not None and session.agent_id != agent_id:
                return
        self.storage.pop(SESSION_STORAGE_KEY, None)
