"""Test-session client: provision or reuse a session, then join the room."""

import logging
from collections.abc import Callable
from typing import Protocol

from livekit import rtc

from .api_client import StudioClient
from .connection import ConnectionState, ConnectionStateMachine
from .session_cache import CachedSession, SessionCache

logger = logging.getLogger(__name__)


class SessionExpiredError(Exception):
    """Connecting failed again with a freshly provisioned session."""


def is_token_error(error: Exception) -> bool:
    """Whether a connect error means the cached credentials are no longer valid."""
    message = str(error).lower()
    return "token" in message


class RoomAdapter(Protocol):
    """What the tester needs from a realtime room."""

    async def connect(self, url: str, token: str) -> None: ...

    async def disconnect(self) -> None: ...

    async def set_microphone_enabled(self, enabled: bool) -> None: ...

    def on(self, event: str, callback: Callable[..., None]) -> None: ...


class LiveKitRoom:
    """RoomAdapter over livekit.rtc.Room.

    Audio for the microphone track is pushed by the caller through
    ``audio_source``.
    """

    def __init__(self, sample_rate: int = 48000, num_channels: int = 1):
        self.room = rtc.Room()
        self.audio_source = rtc.AudioSource(sample_rate, num_channels)
        self._publication: rtc.LocalTrackPublication | None = None

    async def connect(self, url: str, token: str) -> None:
        await self.room.connect(url, token, options=rtc.RoomOptions(auto_subscribe=True))
        logger.info(f"Connected to room {self.room.name}")

    async def disconnect(self) -> None:
        await self.room.disconnect()

    async def set_microphone_enabled(self, enabled: bool) -> None:
        participant = self.room.local_participant
        if enabled and self._publication is None:
            track = rtc.LocalAudioTrack.create_audio_track("microphone", self.audio_source)
            options = rtc.TrackPublishOptions()
            options.source = rtc.TrackSource.SOURCE_MICROPHONE
            self._publication = await participant.publish_track(track, options)
        elif not enabled and self._publication is not None:
            await participant.unpublish_track(self._publication.sid)
            self._publication = None

    def on(self, event: str, callback: Callable[..., None]) -> None:
        self.room.on(event, callback)


class AgentTester:
    """Drives one agent's test session from the dashboard side.

    A cached session is reused while it belongs to the agent. When joining
    fails because the token is no longer valid, the cache is cleared, a new
    session is provisioned once and the join retried.
    """

    def __init__(
        self,
        api: StudioClient,
        agent_id: str,
        agent_name: str | None = None,
        cache: SessionCache | None = None,
        room_factory: Callable[[], RoomAdapter] = LiveKitRoom,
    ):
        self.api = api
        self.agent_id = agent_id
        self.agent_name = agent_name
        self.cache = cache or SessionCache()
        self.room_factory = room_factory
        self.connection = ConnectionStateMachine()
        self.session: CachedSession | None = None
        self.room: RoomAdapter | None = None

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    async def _provision(self) -> CachedSession:
        response = await self.api.create_session(self.agent_id, is_test=True)
        session = CachedSession(
            agent_id=self.agent_id,
            agent_name=self.agent_name,
            livekit_agent_name=response.livekit_agent_name,
            session_id=response.session_id,
            room_name=response.room_name,
            access_token=response.access_token,
            ws_url=response.ws_url,
        )
        self.cache.save(session)
        logger.info(f"Provisioned test session {session.session_id} in {session.room_name}")
        return session

    async def ensure_session(self) -> CachedSession:
        """Reuse the cached session for this agent, or provision a new one."""
        cached = self.cache.get_reusable(self.agent_id)
        if cached is not None:
            logger.info(f"Reusing cached session {cached.session_id}")
            self.session = cached
        else:
            self.session = await self._provision()
        return self.session

    def _bind_room_events(self, room: RoomAdapter) -> None:
        def on_reconnecting(*args):
            if self.connection.can("connection_lost"):
                self.connection.fire("connection_lost")

        def on_reconnected(*args):
            if self.connection.can("reconnected"):
                self.connection.fire("reconnected")

        def on_disconnected(*args):
            if self.room is not room:
                return
            self.room = None
            if self.connection.can("disconnect"):
                self.connection.fire("disconnect")

        room.on("reconnecting", on_reconnecting)
        room.on("reconnected", on_reconnected)
        room.on("disconnected", on_disconnected)

    async def _join(self, session: CachedSession) -> None:
        room = self.room_factory()
        self._bind_room_events(room)
        try:
            await room.connect(session.ws_url, session.access_token)
        except Exception:
            await room.disconnect()
            raise
        self.room = room

    async def connect(self) -> CachedSession:
        """Join the room for this agent's test session.

        Raises:
            SessionExpiredError: the join failed again after re-provisioning.
        """
        session = await self.ensure_session()
        self.connection.fire("connect")

        try:
            await self._join(session)
        except Exception as e:
            if not is_token_error(e):
                self.connection.fire("connect_failed")
                raise
            logger.warning(f"Cached session rejected ({e}), provisioning a new one")
            self.cache.invalidate(self.agent_id)
            try:
                session = self.session = await self._provision()
                await self._join(session)
            except Exception as retry_error:
                self.connection.fire("connect_failed")
                raise SessionExpiredError(
                    "Session expired. Create a new session and try again."
                ) from retry_error

        self.connection.fire("connected")
        return session

    async def refresh_session(self) -> CachedSession:
        """Drop the current session and provision a fresh one."""
        if self.state != ConnectionState.DISCONNECTED:
            await self.disconnect()
        self.cache.invalidate(self.agent_id)
        self.session = await self._provision()
        return self.session

    async def toggle_microphone(self) -> bool:
        """Publish or unpublish the microphone. Returns whether it is now enabled."""
        if self.room is None or not self.connection.is_connected:
            raise RuntimeError("Not connected")
        enable = not self.connection.is_publishing
        await self.room.set_microphone_enabled(enable)
        self.connection.fire("start_publishing" if enable else "stop_publishing")
        return enable

    async def disconnect(self) -> None:
        if self.state == ConnectionState.DISCONNECTED:
            return
        room, self.room = self.room, None
        self.connection.fire("disconnect")
        if room is not None:
            await room.disconnect()

    async def save_instructions(self, instructions: str):
        """Store new instructions on the agent.

        Sessions provisioned afterwards carry them; a live session keeps the
        snapshot it was created with.
        """
        return await self.api.update_agent(self.agent_id, instructions=instructions)
