"""Local AgentConfig <-> remote LLM + Agent payloads.

The forward direction is exact. The reverse direction is best-effort: scalar
fields round-trip, but a composed prompt string cannot in general be split
back into sections. With a local hint whose section template still matches
the remote prompt, the section list is kept and only static variable values
are refreshed; otherwise the remote prompt is stored as a flat string.
Section boundaries are never invented.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from agentsync.adapters.section_resolvers import SectionResolver
from agentsync.core.prompt_composer import ComposedPrompt, render_template
from agentsync.core.variables import TOKEN_PATTERN
from agentsync.errors import ConfigInvalid, SyncError
from agentsync.models.agent_config import AgentConfig, LiteralValue, PromptConfig
from agentsync.models.remote import (
    RemoteAgent,
    RemoteAgentPayload,
    RemoteLlm,
    RemoteLlmPayload,
    ResponseEngine,
)

logger = logging.getLogger(__name__)

# agent-level fields copied 1:1 between agent.json and the remote agent
AGENT_FIELDS = (
    "agent_name",
    "voice_id",
    "voice_speed",
    "voice_temperature",
    "interruption_sensitivity",
    "responsiveness",
    "language",
    "enable_backchannel",
    "backchannel_frequency",
    "ambient_sound",
    "boosted_keywords",
    "pronunciation_dictionary",
    "normalize_for_speech",
    "webhook_url",
    "post_call_analysis_data",
)

# llm_config fields copied 1:1 (the prompt is handled separately)
LLM_FIELDS = ("model", "temperature", "begin_message", "tools")


def to_remote_llm(config: AgentConfig, composed: ComposedPrompt) -> RemoteLlmPayload:
    """Build the LLM payload from a config and its composed prompt."""
    llm = config.llm_config.model_dump(mode="json", exclude_unset=True)
    fields = {name: llm[name] for name in LLM_FIELDS if name in llm}
    return RemoteLlmPayload(general_prompt=composed.text, **fields)


def to_remote_agent(config: AgentConfig, llm_id: str) -> RemoteAgentPayload:
    """Build the Agent payload. ``llm_id`` must name an existing remote LLM."""
    data = config.to_file_dict()
    fields = {name: data[name] for name in AGENT_FIELDS if name in data}
    return RemoteAgentPayload(response_engine=ResponseEngine(llm_id=llm_id), **fields)


def from_remote(
    llm: RemoteLlm,
    agent: RemoteAgent,
    hint: AgentConfig | None = None,
    resolver: SectionResolver | None = None,
) -> AgentConfig:
    """Rebuild a local config from remote state.

    Raises ConfigInvalid when the remote state does not form a valid config.
    """
    remote_agent = agent.model_dump(mode="json")
    remote_llm = llm.model_dump(mode="json")
    remote_prompt = llm.general_prompt or ""

    if hint is None:
        data = {name: remote_agent[name] for name in AGENT_FIELDS if remote_agent.get(name) is not None}
        llm_data = {name: remote_llm[name] for name in LLM_FIELDS if remote_llm.get(name) is not None}
        llm_data["general_prompt"] = remote_prompt
        data["llm_config"] = llm_data
        return _validate(data)

    data = hint.to_file_dict()
    _merge_fields(data, remote_agent, AGENT_FIELDS)
    llm_data = data["llm_config"]
    _merge_fields(llm_data, remote_llm, LLM_FIELDS)

    prompt_config = hint.llm_config.prompt_config
    if prompt_config is None:
        llm_data["general_prompt"] = remote_prompt
        return _validate(data)

    refreshed = _refresh_prompt_config(prompt_config, remote_prompt, resolver)
    if refreshed is not None:
        llm_data["prompt_config"] = refreshed.model_dump(mode="json", exclude_unset=True)
    else:
        logger.warning(
            "Remote prompt for %s no longer matches its sections; storing it as a flat prompt",
            hint.agent_name,
        )
        llm_data.pop("prompt_config", None)
        llm_data["general_prompt"] = remote_prompt
    return _validate(data)


def _merge_fields(target: dict[str, Any], remote: dict[str, Any], names: tuple[str, ...]) -> None:
    """Refresh the fields the hint sets from remote state.

    Fields the hint omits stay omitted even when the remote reports a value
    for them, so platform defaults never show up as drift and the rebuilt
    config hashes over the same field set as the local one.
    """
    for name in names:
        if name in target:
            target[name] = remote.get(name)


def _refresh_prompt_config(
    prompt_config: PromptConfig,
    remote_prompt: str,
    resolver: SectionResolver | None,
) -> PromptConfig | None:
    """Keep the hint's structure if its template can produce ``remote_prompt``."""
    try:
        template = render_template(prompt_config, resolver)
    except SyncError:
        return None

    values = _recover_static_values(template, prompt_config.literal_variables(), remote_prompt)
    if values is None:
        return None

    changed = {
        name: LiteralValue(value=value)
        for name, value in values.items()
        if prompt_config.literal_variables().get(name) != value
    }
    if not changed:
        return prompt_config
    return prompt_config.model_copy(
        update={"variables": {**prompt_config.variables, **changed}}
    )


def _template_parts(template: str, literals: dict[str, str]) -> list[tuple[str, str]]:
    """Split ``template`` into ("text", chunk) and ("static", name) parts.

    Tokens that are not static values stay part of the surrounding text, and
    empty text chunks are dropped.
    """
    parts: list[tuple[str, str]] = []
    text = ""
    position = 0
    for match in TOKEN_PATTERN.finditer(template):
        name = match.group(1)
        if name not in literals:
            text += template[position:match.end()]
        else:
            text += template[position:match.start()]
            if text:
                parts.append(("text", text))
            text = ""
            parts.append(("static", name))
        position = match.end()
    text += template[position:]
    if text:
        parts.append(("text", text))
    return parts


def _recover_static_values(
    template: str,
    literals: dict[str, str],
    remote_prompt: str,
) -> dict[str, str] | None:
    """Match the template against the remote prompt, capturing static values.

    A single left-to-right scan: each static value runs up to the first
    occurrence of the text that follows it (the last text chunk is anchored
    at the end of the prompt). A repeated token must reproduce its first
    value. Returns None as soon as any chunk fails to line up.
    """
    parts = _template_parts(template, literals)
    values: dict[str, str] = {}
    position = 0
    for index, (kind, chunk) in enumerate(parts):
        if kind == "text":
            if not remote_prompt.startswith(chunk, position):
                return None
            position += len(chunk)
            continue

        if chunk in values:
            if not remote_prompt.startswith(values[chunk], position):
                return None
            position += len(values[chunk])
            continue

        following = parts[index + 1] if index + 1 < len(parts) else None
        if following is None:
            end = len(remote_prompt)
        elif following[0] == "static":
            # adjacent static values cannot be told apart; the first takes nothing
            end = position
        elif index + 2 == len(parts):
            end = len(remote_prompt) - len(following[1])
            if end < position:
                return None
        else:
            end = remote_prompt.find(following[1], position)
            if end == -1:
                return None
        values[chunk] = remote_prompt[position:end]
        position = end

    if position != len(remote_prompt):
        return None
    return values


def _validate(data: dict[str, Any]) -> AgentConfig:
    try:
        return AgentConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalid(
            f"Remote state does not form a valid agent config: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e
