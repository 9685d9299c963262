"""Async HTTP client for the Voice Studio REST API."""

import logging
from typing import Any

import httpx

from ..models.agent import AgentConfig
from ..models.livekit import SessionResponse, TestSessionResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Non-success response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StudioClient:
    """Thin wrapper over httpx.AsyncClient with bearer auth."""

    def __init__(
        self,
        base_url: str,
        token: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {"Authorization": f"Bearer {token}"}

    async def __aenter__(self) -> "StudioClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, headers=self._headers, **kwargs)
        if response.is_error:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            logger.debug(f"{method} {path} -> {response.status_code}: {message}")
            raise APIError(response.status_code, message)
        return response.json()

    async def list_agents(self, page: int = 1, limit: int = 10, provider: str | None = None) -> dict:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if provider:
            params["provider"] = provider
        return await self._request("GET", "/v1/agents", params=params)

    async def get_agent(self, agent_id: str) -> AgentConfig:
        return AgentConfig.model_validate(await self._request("GET", f"/v1/agents/{agent_id}"))

    async def create_agent(self, **fields) -> AgentConfig:
        return AgentConfig.model_validate(await self._request("POST", "/v1/agents", json=fields))

    async def update_agent(self, agent_id: str, **fields) -> AgentConfig:
        return AgentConfig.model_validate(
            await self._request("PUT", f"/v1/agents/{agent_id}", json=fields)
        )

    async def delete_agent(self, agent_id: str) -> None:
        await self._request("DELETE", f"/v1/agents/{agent_id}")

    async def test_agent(self, agent_id: str) -> TestSessionResponse:
        return TestSessionResponse.model_validate(
            await self._request("POST", f"/v1/agents/{agent_id}/test")
        )

    async def create_session(self, agent_id: str, is_test: bool = True) -> SessionResponse:
        data = await self._request(
            "POST",
            "/v1/livekit/create-session",
            json={"agentId": agent_id, "isTest": is_test},
        )
        return SessionResponse.model_validate(data)
