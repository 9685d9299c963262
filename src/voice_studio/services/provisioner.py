"""Turns a stored agent config into a joinable realtime session."""

import json
import logging
import secrets
import time
import uuid

from ..config import Settings
from ..errors import ProvisioningError
from ..models.agent import AgentConfig
from ..models.base import utc_now
from ..models.livekit import SessionResponse, TestAgentConfig, TestSessionResponse
from ..models.session import SessionRecord
from .livekit_service import LiveKitService
from .storage import AgentStore, SessionStore

logger = logging.getLogger(__name__)


def build_room_name(agent_id: str, user_id: str, is_test: bool) -> str:
    """Room name for a provisioning call.

    Production rooms are deterministic per (agent, user) so they can be
    reused; test rooms are unique per call.
    """
    if is_test:
        return f"test-{agent_id}-{int(time.time() * 1000)}-{secrets.token_hex(3)}"
    return f"agent-{agent_id}-{user_id}"


def build_room_metadata(session_id: str, agent: AgentConfig) -> str:
    return json.dumps(
        {
            "sessionId": session_id,
            "agentConfig": agent.snapshot().model_dump(mode="json", by_alias=True),
        }
    )


def build_job_metadata(session_id: str, agent: AgentConfig) -> str:
    return json.dumps(
        {
            "instructions": agent.instructions,
            "sessionId": session_id,
            "agentId": agent.id,
        }
    )


class SessionProvisioner:
    """Reuse-or-create flow for realtime sessions.

    Steps run strictly in order: load config, create room, mint the
    caller's token, dispatch the worker, and only then insert the Session
    row. A failure before the insert leaves no Session row behind, and a
    failed token leaves no worker dispatched. A production room that already
    has a live dispatch is not given a second worker.
    """

    def __init__(
        self,
        settings: Settings,
        agents: AgentStore,
        sessions: SessionStore,
        livekit: LiveKitService,
    ):
        self.settings = settings
        self.agents = agents
        self.sessions = sessions
        self.livekit = livekit

    async def _dispatch(self, room_name: str, session_id: str, agent: AgentConfig, is_test: bool) -> None:
        # A reused production room keeps the worker it already has.
        if not is_test and await self.livekit.has_active_dispatch(room_name, agent.livekit_agent_name):
            logger.info(f"{agent.livekit_agent_name} already dispatched to {room_name}")
            return
        await self.livekit.dispatch_agent(
            room_name, agent.livekit_agent_name, build_job_metadata(session_id, agent)
        )

    async def create_session(self, agent_id: str, user_id: str, is_test: bool = False) -> SessionResponse:
        agent = self.agents.get(agent_id, user_id)

        room_name = build_room_name(agent.id, user_id, is_test)
        session_id = f"sess_{uuid.uuid4().hex}"
        identity = f"user-{user_id}-{secrets.token_hex(3)}"

        try:
            await self.livekit.create_room(room_name, build_room_metadata(session_id, agent))
        except Exception as e:
            logger.error(f"Failed to create LiveKit room {room_name}: {e}")
            raise ProvisioningError("create_room", e) from e

        try:
            access_token = self.livekit.create_token(
                room_name,
                identity,
                expires_in_seconds=self.settings.access_token_ttl_seconds,
            )
        except Exception as e:
            logger.error(f"Failed to mint access token for {room_name}: {e}")
            raise ProvisioningError("create_token", e) from e

        try:
            await self._dispatch(room_name, session_id, agent, is_test)
        except Exception as e:
            logger.error(f"Failed to dispatch {agent.livekit_agent_name} to {room_name}: {e}")
            raise ProvisioningError("dispatch_agent", e) from e

        # TODO: decide whether production rooms should also reuse the Session row
        # before adding dedup of concurrent calls for the same (agent, user).
        record = self.sessions.insert(
            SessionRecord(
                id=str(uuid.uuid4()),
                session_id=session_id,
                room_name=room_name,
                user_id=user_id,
                agent_id=agent.id,
                metadata={
                    "isTest": is_test,
                    "identity": identity,
                    "livekitAgentName": agent.livekit_agent_name,
                },
                started_at=utc_now(),
            )
        )
        logger.info(f"Provisioned session {record.id} in room {room_name} (test={is_test})")

        return SessionResponse(
            session_id=record.id,
            room_name=room_name,
            access_token=access_token,
            ws_url=self.livekit.ws_url,
            livekit_agent_name=agent.livekit_agent_name,
            agent_config=agent.snapshot(),
        )

    def create_test_session(self, agent_id: str, user_id: str) -> TestSessionResponse:
        """Record a test session without touching the room platform."""
        agent = self.agents.get(agent_id, user_id)
        now_ms = int(time.time() * 1000)
        record = self.sessions.insert(
            SessionRecord(
                id=str(uuid.uuid4()),
                session_id=f"test_{now_ms}_{secrets.token_hex(5)[:9]}",
                room_name=f"test-room-{agent.id}-{now_ms}-{secrets.token_hex(3)}",
                user_id=user_id,
                agent_id=agent.id,
                metadata={"isTest": True},
                started_at=utc_now(),
            )
        )
        return TestSessionResponse(
            session_id=record.id,
            room_name=record.room_name,
            agent_config=TestAgentConfig(
                llm_provider=agent.llm_provider,
                llm_model=agent.llm_model,
                stt_provider=agent.stt_provider,
                tts_provider=agent.tts_provider,
                instructions=agent.instructions,
            ),
        )
