"""Report end-of-session metrics back to the API."""

import logging

import httpx

from ..config import Settings
from .metrics import UsageSummary

logger = logging.getLogger(__name__)


async def report_session(
    settings: Settings,
    session_id: str | None,
    summary: UsageSummary,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Log the summary and post it to the API when possible.

    Returns True when the API accepted the report.
    """
    logger.info(
        f"Session {session_id or '<unknown>'} usage: {summary.total_duration:.1f}s, "
        f"{summary.message_count} messages, avg latency {summary.avg_latency_ms}ms, "
        f"LLM tokens {summary.llm_prompt_tokens}/{summary.llm_completion_tokens}, "
        f"TTS chars {summary.tts_characters}"
    )

    if not session_id:
        logger.warning("No session id in metadata, skipping session report")
        return False
    if not settings.worker_api_key:
        logger.warning("WORKER_API_KEY not set, skipping session report")
        return False

    url = f"{settings.api_base_url.rstrip('/')}/v1/sessions/{session_id}/end"
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=10.0)
    try:
        response = await client.post(
            url,
            json=summary.to_report(),
            headers={"X-Worker-Key": settings.worker_api_key},
        )
        response.raise_for_status()
        logger.info(f"Reported session {session_id}")
        return True
    except httpx.HTTPError as e:
        logger.error(f"Failed to report session {session_id}: {e}")
        return False
    finally:
        if owns_client:
            await client.aclose()
