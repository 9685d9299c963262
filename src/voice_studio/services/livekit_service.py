"""LiveKit service for rooms, agent dispatch and access tokens."""

import logging
from datetime import timedelta

from livekit import api

from ..config import Settings

logger = logging.getLogger(__name__)


class LiveKitService:
    """Service for managing LiveKit rooms, dispatches and tokens."""

    def __init__(
        self,
        url: str,
        api_key: str,
        api_secret: str,
        ws_url: str,
        empty_timeout: int = 300,
    ):
        self.url = url
        self.api_key = api_key
        self.api_secret = api_secret
        self.ws_url = ws_url
        self.empty_timeout = empty_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "LiveKitService":
        return cls(
            url=settings.livekit_http_url,
            api_key=settings.livekit_api_key,
            api_secret=settings.livekit_api_secret,
            ws_url=settings.livekit_url,
            empty_timeout=settings.room_empty_timeout_seconds,
        )

    def _client(self) -> api.LiveKitAPI:
        return api.LiveKitAPI(self.url, self.api_key, self.api_secret)

    async def create_room(self, room_name: str, metadata: str) -> api.Room:
        """Create a room, or reuse an existing one, carrying the given metadata.

        LiveKit returns an existing room unchanged when the name is taken, so
        stale metadata on a reused room is replaced.
        """
        lkapi = self._client()
        try:
            room = await lkapi.room.create_room(
                api.CreateRoomRequest(
                    name=room_name,
                    empty_timeout=self.empty_timeout,
                    metadata=metadata,
                )
            )
            if room.metadata != metadata:
                logger.info(f"Refreshing metadata on existing room {room_name}")
                room = await lkapi.room.update_room_metadata(
                    api.UpdateRoomMetadataRequest(room=room_name, metadata=metadata)
                )
            return room
        finally:
            await lkapi.aclose()

    async def dispatch_agent(self, room_name: str, agent_name: str, metadata: str) -> str:
        """Explicitly dispatch a named agent worker to a room. Returns the dispatch id."""
        lkapi = self._client()
        try:
            dispatch = await lkapi.agent_dispatch.create_dispatch(
                api.CreateAgentDispatchRequest(
                    agent_name=agent_name,
                    room=room_name,
                    metadata=metadata,
                )
            )
            return dispatch.id
        finally:
            await lkapi.aclose()

    async def has_active_dispatch(self, room_name: str, agent_name: str) -> bool:
        """Whether the room already has a live dispatch for the named agent.

        A dispatch with no jobs yet is still pending; one whose jobs have all
        ended no longer has a worker in the room.
        """
        lkapi = self._client()
        try:
            dispatches = await lkapi.agent_dispatch.list_dispatch(room_name=room_name)
        finally:
            await lkapi.aclose()
        for dispatch in dispatches:
            if dispatch.agent_name != agent_name:
                continue
            jobs = list(dispatch.state.jobs)
            if not jobs or any(not job.state.ended_at for job in jobs):
                return True
        return False

    def create_token(
        self,
        room_name: str,
        identity: str,
        name: str | None = None,
        expires_in_seconds: int = 3600,
        agent: bool = False,
    ) -> str:
        """Mint a join token scoped to one room and one identity."""
        grants = api.VideoGrants(
            room_join=True,
            room=room_name,
            can_publish=True,
            can_subscribe=True,
            can_publish_data=True,
            agent=agent,
        )
        return (
            api.AccessToken(self.api_key, self.api_secret)
            .with_identity(identity)
            .with_name(name or identity)
            .with_ttl(timedelta(seconds=expires_in_seconds))
            .with_grants(grants)
            .to_jwt()
        )

    def receive_webhook(self, body: str, auth_header: str) -> api.WebhookEvent:
        """Verify and parse a signed LiveKit webhook."""
        receiver = api.WebhookReceiver(api.TokenVerifier(self.api_key, self.api_secret))
        return receiver.receive(body, auth_header)
