"""Agent configuration API endpoints."""

import logging
import math

from fastapi import APIRouter, Depends, Query

from ...config import Settings, get_settings
from ...models.agent import (
    AgentConfig,
    AgentCreate,
    AgentDetail,
    AgentListResponse,
    AgentSummary,
    AgentUpdate,
    MessageResponse,
    Pagination,
)
from ...models.livekit import TestSessionResponse
from ...models.session import SessionSummary
from ...services.provisioner import SessionProvisioner
from ...services.storage import AgentStore, SessionStore
from ..dependencies import get_agent_store, get_current_user, get_provisioner, get_session_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=AgentConfig, status_code=201)
async def create_agent(
    agent: AgentCreate,
    user_id: str = Depends(get_current_user),
    agents: AgentStore = Depends(get_agent_store),
    settings: Settings = Depends(get_settings),
):
    """Create a new agent."""
    return agents.create(user_id, agent, settings.worker_dispatch_name)


@router.get("", response_model=AgentListResponse)
async def list_agents(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    provider: str | None = Query(default=None, description="Filter by LLM provider"),
    user_id: str = Depends(get_current_user),
    agents: AgentStore = Depends(get_agent_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """List the caller's agents, newest first."""
    items, total = agents.list(user_id, page=page, limit=limit, provider=provider)
    counts = sessions.count_by_agent()

    data = [
        AgentSummary(
            **agent.model_dump(include=set(AgentSummary.model_fields)),
            session_count=counts.get(agent.id, 0),
        )
        for agent in items
    ]
    return AgentListResponse(
        data=data,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
        ),
    )


@router.get("/{agent_id}", response_model=AgentDetail)
async def get_agent(
    agent_id: str,
    user_id: str = Depends(get_current_user),
    agents: AgentStore = Depends(get_agent_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """Get an agent with its ten most recent sessions."""
    agent = agents.get(agent_id, user_id)
    recent = [
        SessionSummary(**record.model_dump(include=set(SessionSummary.model_fields)))
        for record in sessions.recent_for_agent(agent_id, limit=10)
    ]
    return AgentDetail(**agent.model_dump(), recent_sessions=recent)


@router.put("/{agent_id}", response_model=AgentConfig)
async def update_agent(
    agent_id: str,
    update: AgentUpdate,
    user_id: str = Depends(get_current_user),
    agents: AgentStore = Depends(get_agent_store),
):
    """Update an agent's configuration."""
    return agents.update(agent_id, user_id, update)


@router.delete("/{agent_id}", response_model=MessageResponse)
async def delete_agent(
    agent_id: str,
    user_id: str = Depends(get_current_user),
    agents: AgentStore = Depends(get_agent_store),
):
    """Delete an agent. Its sessions are kept as history."""
    agents.delete(agent_id, user_id)
    return MessageResponse(message="Agent deleted successfully")


@router.post("/{agent_id}/test", response_model=TestSessionResponse)
async def test_agent(
    agent_id: str,
    user_id: str = Depends(get_current_user),
    provisioner: SessionProvisioner = Depends(get_provisioner),
):
    """Create a lightweight test session without provisioning a room."""
    return provisioner.create_test_session(agent_id, user_id)
