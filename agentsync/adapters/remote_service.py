"""Remote agent service: create/update/get/delete for LLM and Agent resources.

Every failure surfaces as RemoteCallFailed with a code of not_found,
unauthorized, rate_limited, connection_error or api_error. Retries are the
caller's business.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from agentsync.errors import RemoteCallFailed
from agentsync.models.remote import RemoteAgent, RemoteAgentPayload, RemoteLlm, RemoteLlmPayload

logger = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", RemoteLlm, RemoteAgent)

DEFAULT_BASE_URL = "https://api.retellai.com"


class RemoteAgentService:
    """Protocol for the remote execution API."""

    def create_llm(self, payload: RemoteLlmPayload) -> RemoteLlm:
        raise NotImplementedError

    def update_llm(self, llm_id: str, payload: RemoteLlmPayload) -> RemoteLlm:
        raise NotImplementedError

    def get_llm(self, llm_id: str) -> RemoteLlm:
        raise NotImplementedError

    def delete_llm(self, llm_id: str) -> None:
        raise NotImplementedError

    def create_agent(self, payload: RemoteAgentPayload) -> RemoteAgent:
        raise NotImplementedError

    def update_agent(self, agent_id: str, payload: RemoteAgentPayload) -> RemoteAgent:
        raise NotImplementedError

    def get_agent(self, agent_id: str) -> RemoteAgent:
        raise NotImplementedError

    def delete_agent(self, agent_id: str) -> None:
        raise NotImplementedError


def _payload_body(payload: RemoteLlmPayload | RemoteAgentPayload) -> dict[str, Any]:
    # unset fields stay out of the body; explicit nulls are sent to clear them
    return payload.model_dump(mode="json", exclude_unset=True)


class InMemoryRemoteAgentService(RemoteAgentService):
    """Keeps resources in dicts and records every call.

    Useful for dry runs and tests. ``fail_on`` maps an operation name
    (``"create_llm"``, ``"update_agent"``...) to the error it should raise.
    """

    def __init__(self) -> None:
        self.llms: dict[str, dict[str, Any]] = {}
        self.agents: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.fail_on: dict[str, RemoteCallFailed] = {}

    def _record(self, operation: str, resource_id: str | None = None) -> None:
        self.calls.append((operation, resource_id))
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def _lookup(self, store: dict[str, dict[str, Any]], resource_id: str, operation: str) -> dict:
        if resource_id not in store:
            raise RemoteCallFailed(
                "not_found",
                f"Resource not found: {resource_id}",
                operation=operation,
                status_code=404,
            )
        return store[resource_id]

    def create_llm(self, payload: RemoteLlmPayload) -> RemoteLlm:
        self._record("create_llm")
        llm_id = f"llm_{uuid.uuid4().hex[:24]}"
        self.llms[llm_id] = {**_payload_body(payload), "llm_id": llm_id, "version": 0}
        return RemoteLlm.model_validate(self.llms[llm_id])

    def update_llm(self, llm_id: str, payload: RemoteLlmPayload) -> RemoteLlm:
        self._record("update_llm", llm_id)
        current = self._lookup(self.llms, llm_id, "update_llm")
        current.update(_payload_body(payload))
        current["version"] += 1
        return RemoteLlm.model_validate(current)

    def get_llm(self, llm_id: str) -> RemoteLlm:
        self._record("get_llm", llm_id)
        return RemoteLlm.model_validate(self._lookup(self.llms, llm_id, "get_llm"))

    def delete_llm(self, llm_id: str) -> None:
        self._record("delete_llm", llm_id)
        self._lookup(self.llms, llm_id, "delete_llm")
        del self.llms[llm_id]

    def create_agent(self, payload: RemoteAgentPayload) -> RemoteAgent:
        self._record("create_agent")
        agent_id = f"agent_{uuid.uuid4().hex[:24]}"
        self.agents[agent_id] = {**_payload_body(payload), "agent_id": agent_id, "version": 0}
        return RemoteAgent.model_validate(self.agents[agent_id])

    def update_agent(self, agent_id: str, payload: RemoteAgentPayload) -> RemoteAgent:
        self._record("update_agent", agent_id)
        current = self._lookup(self.agents, agent_id, "update_agent")
        current.update(_payload_body(payload))
        current["version"] += 1
        return RemoteAgent.model_validate(current)

    def get_agent(self, agent_id: str) -> RemoteAgent:
        self._record("get_agent", agent_id)
        return RemoteAgent.model_validate(self._lookup(self.agents, agent_id, "get_agent"))

    def delete_agent(self, agent_id: str) -> None:
        self._record("delete_agent", agent_id)
        self._lookup(self.agents, agent_id, "delete_agent")
        del self.agents[agent_id]


class HttpRemoteAgentService(RemoteAgentService):
    """REST implementation over httpx with bearer authentication."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            api_key: Workspace API key, sent as a bearer token
            base_url: Base URL of the remote API
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Send one request and map failures to RemoteCallFailed."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = client.request(method, path, json=body)
        except httpx.TimeoutException as e:
            raise RemoteCallFailed(
                "connection_error",
                f"Request to {self.base_url} timed out: {e}",
                operation=operation,
            ) from e
        except httpx.RequestError as e:
            raise RemoteCallFailed(
                "connection_error",
                f"Failed to connect to {self.base_url}: {e}",
                operation=operation,
            ) from e

        if response.status_code >= 400:
            raise RemoteCallFailed(
                _error_code(response.status_code),
                f"{operation} failed with HTTP {response.status_code}: {_error_message(response)}",
                operation=operation,
                status_code=response.status_code,
            )
        logger.debug("%s %s -> %d", method, path, response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallFailed(
                "api_error",
                f"{operation} returned a body that is not JSON: {response.text[:200]}",
                operation=operation,
                status_code=response.status_code,
            ) from e

    def create_llm(self, payload: RemoteLlmPayload) -> RemoteLlm:
        data = self._request("create_llm", "POST", "/create-retell-llm", _payload_body(payload))
        return _parse(RemoteLlm, data, "create_llm")

    def update_llm(self, llm_id: str, payload: RemoteLlmPayload) -> RemoteLlm:
        data = self._request(
            "update_llm", "PATCH", f"/update-retell-llm/{llm_id}", _payload_body(payload)
        )
        return _parse(RemoteLlm, data, "update_llm")

    def get_llm(self, llm_id: str) -> RemoteLlm:
        return _parse(RemoteLlm, self._request("get_llm", "GET", f"/get-retell-llm/{llm_id}"), "get_llm")

    def delete_llm(self, llm_id: str) -> None:
        self._request("delete_llm", "DELETE", f"/delete-retell-llm/{llm_id}")

    def create_agent(self, payload: RemoteAgentPayload) -> RemoteAgent:
        data = self._request("create_agent", "POST", "/create-agent", _payload_body(payload))
        return _parse(RemoteAgent, data, "create_agent")

    def update_agent(self, agent_id: str, payload: RemoteAgentPayload) -> RemoteAgent:
        data = self._request(
            "update_agent", "PATCH", f"/update-agent/{agent_id}", _payload_body(payload)
        )
        return _parse(RemoteAgent, data, "update_agent")

    def get_agent(self, agent_id: str) -> RemoteAgent:
        return _parse(RemoteAgent, self._request("get_agent", "GET", f"/get-agent/{agent_id}"), "get_agent")

    def delete_agent(self, agent_id: str) -> None:
        self._request("delete_agent", "DELETE", f"/delete-agent/{agent_id}")


def _parse(model: type[ResponseModel], data: Any, operation: str) -> ResponseModel:
    """Validate a success body; a malformed one is an api_error."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteCallFailed(
            "api_error",
            f"{operation} returned an unexpected response: {e.error_count()} error(s)",
            operation=operation,
        ) from e


def _error_code(status_code: int) -> str:
    if status_code in (401, 403):
        return "unauthorized"
    if status_code == 404:
        return "not_found"
    if status_code == 429:
        return "rate_limited"
    return "api_error"


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)
