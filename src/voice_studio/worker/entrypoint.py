"""LiveKit agents worker: receives dispatches and runs the voice pipeline."""

import logging

from livekit.agents import JobContext, JobProcess, WorkerOptions, cli

from ..config import get_settings
from ..services.livekit_service import LiveKitService
from .metadata import load_runtime_config
from .metrics import UsageCollector
from .pipeline import VoiceAgent
from .providers import ProviderCredentials
from .reporting import report_session

logger = logging.getLogger(__name__)


def prewarm(proc: JobProcess):
    """Load settings and credentials once per worker process."""
    settings = get_settings()
    proc.userdata["settings"] = settings
    proc.userdata["credentials"] = ProviderCredentials.from_settings(settings)


async def entrypoint(ctx: JobContext):
    """
    Run one dispatched job.

    Configuration is resolved before joining the room, so a job without
    instructions fails without ever appearing as a participant.
    """
    settings = ctx.proc.userdata.get("settings") or get_settings()
    credentials = ctx.proc.userdata.get("credentials") or ProviderCredentials.from_settings(settings)

    room_name = ctx.job.room.name
    logger.info(f"Job {ctx.job.id} dispatched to room {room_name}")

    job_config = load_runtime_config(ctx.job.room.metadata, ctx.job.metadata)
    logger.info(
        f"Agent {job_config.agent_id or '<unknown>'} session {job_config.session_id or '<unknown>'}: "
        f"{job_config.agent.llm_provider}/{job_config.agent.llm_model}"
    )

    token = LiveKitService.from_settings(settings).create_token(
        room_name,
        identity=f"agent-{ctx.job.id}",
        name="Voice Studio Agent",
        expires_in_seconds=job_config.agent.session_timeout + 300,
        agent=True,
    )

    collector = UsageCollector()

    async def send_report():
        await report_session(settings, job_config.session_id, collector.summary())

    ctx.add_shutdown_callback(send_report)

    agent = VoiceAgent(job_config.agent, credentials, collector)
    try:
        await agent.run(settings.livekit_url, token, room_name)
    finally:
        ctx.shutdown(reason="pipeline finished")


def main():
    """Run the agent worker (``start``, ``dev`` and the other livekit-agents commands)."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    settings = get_settings()
    cli.run_app(
        WorkerOptions(
            entrypoint_fnc=entrypoint,
            prewarm_fnc=prewarm,
            agent_name=settings.worker_dispatch_name,
            ws_url=settings.livekit_url,
            api_key=settings.livekit_api_key,
            api_secret=settings.livekit_api_secret,
        )
    )
