"""JSON-file persistence for agents, sessions and users.

Each collection is one JSON object keyed by id. Reads and writes are
synchronous and never span an await, so async handlers cannot interleave
a read-modify-write on the same file.
"""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path

from ..errors import AgentNotFoundError, SessionNotFoundError
from ..models.agent import AgentBase, AgentConfig, AgentCreate, AgentUpdate
from ..models.base import utc_now
from ..models.session import SessionRecord, SessionReport, SessionStatus

logger = logging.getLogger(__name__)

# Fields an update may clear by sending null; for every other field null means "keep".
NULLABLE_AGENT_FIELDS = frozenset(
    name for name, field in AgentBase.model_fields.items() if field.default is None
)


class JsonCollection:
    """A dict of records persisted to a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, dict]:
        """Load records from the JSON file."""
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            return json.load(f)

    def save(self, records: dict[str, dict]) -> None:
        """Save records to the JSON file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(records, f, indent=2)


class AgentStore:
    """Agent configurations, always scoped to their owner."""

    def __init__(self, data_path: Path):
        self._collection = JsonCollection(Path(data_path) / "agents.json")

    def create(self, user_id: str, agent: AgentCreate, default_dispatch_name: str) -> AgentConfig:
        agents = self._collection.load()
        now = utc_now()
        record = AgentConfig(
            **agent.model_dump(exclude={"livekit_agent_name"}),
            id=str(uuid.uuid4()),
            user_id=user_id,
            livekit_agent_name=agent.livekit_agent_name or default_dispatch_name,
            created_at=now,
            updated_at=now,
        )
        agents[record.id] = record.model_dump(mode="json")
        self._collection.save(agents)
        logger.info(f"Created agent {record.id} for user {user_id}")
        return record

    def exists(self, agent_id: str) -> bool:
        return agent_id in self._collection.load()

    def get(self, agent_id: str, user_id: str) -> AgentConfig:
        """Fetch an agent owned by user_id.

        Agents owned by someone else are reported exactly like missing ones.
        """
        data = self._collection.load().get(agent_id)
        if data is None or data.get("user_id") != user_id:
            raise AgentNotFoundError()
        return AgentConfig.model_validate(data)

    def list(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        provider: str | None = None,
    ) -> tuple[list[AgentConfig], int]:
        """Return one page of the user's agents (newest first) and the total count."""
        owned = [
            data
            for data in self._collection.load().values()
            if data.get("user_id") == user_id
            and (provider is None or data.get("llm_provider") == provider)
        ]
        owned.sort(key=lambda data: data["created_at"], reverse=True)
        offset = (page - 1) * limit
        page_items = [AgentConfig.model_validate(data) for data in owned[offset:offset + limit]]
        return page_items, len(owned)

    def update(self, agent_id: str, user_id: str, update: AgentUpdate) -> AgentConfig:
        """Apply a partial update and revalidate the merged record."""
        agents = self._collection.load()
        current = agents.get(agent_id)
        if current is None or current.get("user_id") != user_id:
            raise AgentNotFoundError()

        merged = dict(current)
        for key, value in update.model_dump(exclude_unset=True).items():
            if value is not None or key in NULLABLE_AGENT_FIELDS:
                merged[key] = value
        merged["updated_at"] = utc_now()

        record = AgentConfig.model_validate(merged)
        agents[agent_id] = record.model_dump(mode="json")
        self._collection.save(agents)
        return record

    def delete(self, agent_id: str, user_id: str) -> None:
        """Delete an agent. Its sessions are historical records and stay."""
        agents = self._collection.load()
        current = agents.get(agent_id)
        if current is None or current.get("user_id") != user_id:
            raise AgentNotFoundError()
        del agents[agent_id]
        self._collection.save(agents)
        logger.info(f"Deleted agent {agent_id}")


class SessionStore:
    """Session records."""

    def __init__(self, data_path: Path, agents: AgentStore):
        self._collection = JsonCollection(Path(data_path) / "sessions.json")
        self._agents = agents

    def insert(self, record: SessionRecord) -> SessionRecord:
        if not self._agents.exists(record.agent_id):
            raise AgentNotFoundError()
        sessions = self._collection.load()
        sessions[record.id] = record.model_dump(mode="json")
        self._collection.save(sessions)
        return record

    def get(self, record_id: str, user_id: str) -> SessionRecord:
        data = self._collection.load().get(record_id)
        if data is None or data.get("user_id") != user_id:
            raise SessionNotFoundError()
        return SessionRecord.model_validate(data)

    def all(self) -> list[SessionRecord]:
        return [SessionRecord.model_validate(data) for data in self._collection.load().values()]

    def recent_for_agent(self, agent_id: str, limit: int = 10) -> list[SessionRecord]:
        records = [
            SessionRecord.model_validate(data)
            for data in self._collection.load().values()
            if data.get("agent_id") == agent_id
        ]
        records.sort(key=lambda record: record.started_at, reverse=True)
        return records[:limit]

    def count_by_agent(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for data in self._collection.load().values():
            counts[data["agent_id"]] = counts.get(data["agent_id"], 0) + 1
        return counts

    def end(self, session_id: str, report: SessionReport) -> SessionRecord:
        """Close a session identified by its generated session id."""
        sessions = self._collection.load()
        for key, data in sessions.items():
            if data.get("session_id") == session_id:
                record = SessionRecord.model_validate(data)
                record.status = SessionStatus.ENDED
                record.ended_at = record.ended_at or utc_now()
                record.total_duration = report.total_duration
                record.avg_latency = report.avg_latency
                record.message_count = report.message_count
                sessions[key] = record.model_dump(mode="json")
                self._collection.save(sessions)
                return record
        raise SessionNotFoundError()

    def end_room(self, room_name: str) -> int:
        """Mark every active session in a room as ended. Returns how many changed."""
        sessions = self._collection.load()
        ended = 0
        now = utc_now()
        for key, data in sessions.items():
            if data.get("room_name") != room_name or data.get("status") != SessionStatus.ACTIVE.value:
                continue
            record = SessionRecord.model_validate(data)
            record.status = SessionStatus.ENDED
            record.ended_at = now
            if record.total_duration is None:
                started = datetime.fromisoformat(record.started_at)
                record.total_duration = (datetime.fromisoformat(now) - started).total_seconds()
            sessions[key] = record.model_dump(mode="json")
            ended += 1
        if ended:
            self._collection.save(sessions)
        return ended


class UserStore:
    """Local user accounts."""

    def __init__(self, data_path: Path):
        self._collection = JsonCollection(Path(data_path) / "users.json")

    def load(self) -> dict[str, dict]:
        return self._collection.load()

    def save(self, users: dict[str, dict]) -> None:
        self._collection.save(users)

    def find_by_email(self, email: str) -> tuple[str, dict] | None:
        for user_id, data in self._collection.load().items():
            if data.get("email", "").lower() == email.lower():
                return user_id, data
        return None
