"""Payloads exchanged with the remote agent service.

A remote agent is two resources: an LLM (model, prompt, tools) and an Agent
(voice, language, webhook) that points at the LLM through ``response_engine``.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class RemoteLlmPayload(BaseModel):
    model_config = {"extra": "forbid", "protected_namespaces": ()}

    model: str
    temperature: float | None = None
    general_prompt: str
    begin_message: str | None = None
    tools: list[Any] | None = None


class ResponseEngine(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["retell-llm"] = "retell-llm"
    llm_id: str = Field(min_length=1)


class RemoteAgentPayload(BaseModel):
    """Agent payload; cannot be built without the id of an existing LLM."""

    model_config = {"extra": "forbid"}

    agent_name: str
    voice_id: str
    voice_speed: float | None = None
    voice_temperature: float | None = None
    interruption_sensitivity: float | None = None
    responsiveness: float | None = None
    language: str
    enable_backchannel: bool | None = None
    backchannel_frequency: float | None = None
    ambient_sound: str | None = None
    boosted_keywords: list[str] | None = None
    pronunciation_dictionary: list[dict[str, str]] | None = None
    normalize_for_speech: bool | None = None
    webhook_url: str | None = None
    post_call_analysis_data: list[dict[str, Any]] | None = None
    response_engine: ResponseEngine


class RemoteLlm(BaseModel):
    """LLM resource as returned by the service; unknown fields are kept."""

    model_config = {"extra": "allow", "protected_namespaces": ()}

    llm_id: str
    version: int | None = None
    model: str | None = None
    temperature: float | None = None
    general_prompt: str | None = None
    begin_message: str | None = None
    tools: list[Any] | None = None


class RemoteAgent(BaseModel):
    """Agent resource as returned by the service; unknown fields are kept."""

    model_config = {"extra": "allow"}

    agent_id: str
    version: int | None = None
    agent_name: str | None = None
    voice_id: str | None = None
    language: str | None = None
    response_engine: dict[str, Any] | None = None
