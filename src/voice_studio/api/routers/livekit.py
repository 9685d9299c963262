"""Realtime session provisioning and LiveKit webhook endpoints."""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ...models.livekit import SessionCreate, SessionResponse, WebhookResponse
from ...services.livekit_service import LiveKitService
from ...services.provisioner import SessionProvisioner
from ...services.storage import SessionStore
from ..dependencies import get_current_user, get_livekit_service, get_provisioner, get_session_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/create-session", response_model=SessionResponse)
async def create_session(
    request: SessionCreate,
    user_id: str = Depends(get_current_user),
    provisioner: SessionProvisioner = Depends(get_provisioner),
):
    """
    Provision a realtime session for an agent.

    This will:
    1. Create (or reuse) a LiveKit room carrying the agent config as metadata
    2. Dispatch the agent worker to the room
    3. Mint an access token for the caller
    4. Record the session

    Returns the room name, token and websocket URL for the client to connect.
    """
    return await provisioner.create_session(request.agent_id, user_id, is_test=request.is_test)


@router.post("/webhook", response_model=WebhookResponse, include_in_schema=False)
async def livekit_webhook(
    request: Request,
    authorization: str | None = Header(None),
    livekit: LiveKitService = Depends(get_livekit_service),
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Handle LiveKit webhooks for room lifecycle events.

    ``room_finished`` closes every active session recorded for the room.
    """
    body = (await request.body()).decode()
    try:
        event = livekit.receive_webhook(body, authorization or "")
    except Exception as e:
        logger.warning(f"Rejected LiveKit webhook: {e}")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    logger.info(f"LiveKit webhook: {event.event}")

    ended = 0
    if event.event == "room_started":
        logger.info(f"Room started: {event.room.name}")
    elif event.event == "room_finished":
        ended = sessions.end_room(event.room.name)
        logger.info(f"Room finished: {event.room.name}, ended {ended} session(s)")

    return WebhookResponse(ended_sessions=ended)
