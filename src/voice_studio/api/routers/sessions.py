"""Session record API endpoints."""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException

from ...config import Settings, get_settings
from ...models.session import SessionRecord, SessionReport
from ...services.storage import SessionStore
from ..dependencies import get_current_user, get_session_store

router = APIRouter()
logger = logging.getLogger(__name__)


def require_worker_key(
    x_worker_key: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Only the agent worker may report session results."""
    if not settings.worker_api_key or not x_worker_key:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not hmac.compare_digest(x_worker_key, settings.worker_api_key):
        raise HTTPException(status_code=401, detail="Not authenticated")


@router.get("/{record_id}", response_model=SessionRecord)
async def get_session(
    record_id: str,
    user_id: str = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    """Get a session owned by the caller."""
    return sessions.get(record_id, user_id)


@router.post("/{session_id}/end", response_model=SessionRecord, dependencies=[Depends(require_worker_key)])
async def end_session(
    session_id: str,
    report: SessionReport,
    sessions: SessionStore = Depends(get_session_store),
):
    """Record end-of-session metrics reported by the worker."""
    record = sessions.end(session_id, report)
    logger.info(
        f"Session {session_id} ended: {report.total_duration:.1f}s, "
        f"{report.message_count} messages"
    )
    return record
