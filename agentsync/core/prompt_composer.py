"""Assemble ordered prompt sections into the final prompt text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from agentsync.adapters.section_resolvers import SectionResolver
from agentsync.errors import Err, Ok, Result, SectionNotFound, SyncError
from agentsync.models.agent_config import LlmConfig, PromptConfig
from agentsync.models.variables import VariableSummary
from agentsync.core.variables import resolve_variables, substitute_static

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n"


@dataclass(frozen=True)
class ComposedPrompt:
    """Result of composing a prompt.

    ``template`` is the joined section text before static substitution;
    ``text`` is what gets sent to the remote LLM.
    """

    text: str
    template: str
    summary: VariableSummary


@dataclass(frozen=True)
class PromptReport:
    """Operator-facing validation of a prompt configuration."""

    summary: VariableSummary
    unused_variables: list[str] = field(default_factory=list)
    unused_dynamic_variables: list[str] = field(default_factory=list)


def render_template(prompt_config: PromptConfig, resolver: SectionResolver | None) -> str:
    """Join the resolved sections in declared order.

    Overrides win over the resolver; a section found in neither raises
    SectionNotFound.
    """
    parts = []
    for section_id in prompt_config.sections:
        if section_id in prompt_config.overrides:
            parts.append(prompt_config.overrides[section_id])
            continue
        text = resolver.resolve(section_id) if resolver is not None else None
        if text is None:
            raise SectionNotFound(section_id)
        parts.append(text)
    return SECTION_SEPARATOR.join(parts)


def build_prompt(prompt_config: PromptConfig, resolver: SectionResolver | None) -> ComposedPrompt:
    """Raising variant of compose_prompt, used inside the engine."""
    template = render_template(prompt_config, resolver)
    summary = resolve_variables(prompt_config, template)
    text = substitute_static(template, summary)
    logger.debug(
        "Composed %d sections (%d static, %d override, %d dynamic, %d system)",
        len(prompt_config.sections),
        len(summary.static),
        len(summary.override),
        len(summary.dynamic),
        len(summary.system),
    )
    return ComposedPrompt(text=text, template=template, summary=summary)


def build_llm_prompt(llm_config: LlmConfig, resolver: SectionResolver | None) -> ComposedPrompt:
    """Compose from ``prompt_config`` when present, else use the flat prompt."""
    if llm_config.prompt_config is not None:
        return build_prompt(llm_config.prompt_config, resolver)
    flat = llm_config.general_prompt or ""
    # a flat prompt declares nothing, so every token is a system variable
    return ComposedPrompt(
        text=flat,
        template=flat,
        summary=resolve_variables(PromptConfig(), flat),
    )


def compose_prompt(
    prompt_config: PromptConfig,
    resolver: SectionResolver | None,
) -> Result[ComposedPrompt]:
    """Compose a prompt, returning SectionNotFound/AmbiguousVariable as Err."""
    try:
        return Ok(build_prompt(prompt_config, resolver))
    except SyncError as e:
        return Err(e)


def validate_prompt(
    llm_config: LlmConfig,
    resolver: SectionResolver | None,
) -> Result[PromptReport]:
    """Compose the prompt and report declarations that are never referenced."""
    try:
        composed = build_llm_prompt(llm_config, resolver)
    except SyncError as e:
        return Err(e)

    prompt_config = llm_config.prompt_config or PromptConfig()
    used = composed.summary.names()
    return Ok(
        PromptReport(
            summary=composed.summary,
            unused_variables=sorted(set(prompt_config.variables) - used),
            unused_dynamic_variables=sorted(set(prompt_config.dynamic_variables) - used),
        )
    )
