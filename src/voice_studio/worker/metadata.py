"""Resolve the agent configuration a dispatched job should run with.

Two sources carry configuration to the worker:

* room metadata, written by the provisioner when the room is created:
  ``{"sessionId": ..., "agentConfig": {"instructions": ..., ...}}``
* job (dispatch) metadata: ``{"instructions": ..., "sessionId": ..., "agentId": ...}``

Room metadata is authoritative. Job metadata is the fallback for rooms that
were created before the snapshot was attached.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..errors import ConfigurationMissingError, InvalidAgentConfigError
from ..models.agent import RuntimeAgentConfig

logger = logging.getLogger(__name__)


@dataclass
class JobConfig:
    """Everything the pipeline needs for one job."""

    agent: RuntimeAgentConfig
    session_id: str | None = None
    agent_id: str | None = None


def parse_metadata(raw: str | None, source: str = "metadata") -> dict[str, Any]:
    """Parse a metadata string. Empty or malformed metadata counts as absent."""
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed {source}: {e}")
        return {}
    if not isinstance(parsed, dict):
        logger.warning(f"Ignoring {source}: expected a JSON object")
        return {}
    return parsed


def _non_blank(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def resolve_instructions(room_metadata: str | None, job_metadata: str | None) -> str:
    """Pick the agent instructions, room metadata first.

    Raises:
        ConfigurationMissingError: neither source carries instructions.
    """
    room = parse_metadata(room_metadata, "room metadata")
    agent_config = room.get("agentConfig")
    if isinstance(agent_config, dict):
        instructions = _non_blank(agent_config.get("instructions"))
        if instructions:
            logger.info("Using instructions from room metadata")
            return instructions

    job = parse_metadata(job_metadata, "job metadata")
    instructions = _non_blank(job.get("instructions"))
    if instructions:
        logger.info("Using instructions from job metadata")
        return instructions

    raise ConfigurationMissingError()


def load_runtime_config(room_metadata: str | None, job_metadata: str | None) -> JobConfig:
    """Build the runtime config for a job.

    Snapshot fields missing from room metadata take their defaults.

    Raises:
        ConfigurationMissingError: neither source carries instructions.
        InvalidAgentConfigError: the room snapshot fails validation.
    """
    instructions = resolve_instructions(room_metadata, job_metadata)

    room = parse_metadata(room_metadata, "room metadata")
    job = parse_metadata(job_metadata, "job metadata")

    snapshot = room.get("agentConfig") if isinstance(room.get("agentConfig"), dict) else {}
    try:
        agent = RuntimeAgentConfig.model_validate({**snapshot, "instructions": instructions})
    except ValidationError as e:
        logger.error(f"Invalid agent config in room metadata: {e}")
        raise InvalidAgentConfigError() from e

    return JobConfig(
        agent=agent,
        session_id=room.get("sessionId") or job.get("sessionId"),
        agent_id=job.get("agentId"),
    )
