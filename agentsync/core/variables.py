"""Classify the ``{{token}}`` references of a prompt into variable kinds.

Precedence for a token found in the text:
  1. declared in ``variables`` with a literal value  -> static
  2. declared in ``variables`` as OVERRIDE           -> override
  3. declared in ``dynamic_variables``               -> dynamic
  4. otherwise                                       -> system
"""

from __future__ import annotations

import re

from agentsync.errors import AmbiguousVariable
from agentsync.models.agent_config import DeferToRuntime, LiteralValue, PromptConfig
from agentsync.models.variables import (
    DynamicVariable,
    OverrideVariable,
    StaticVariable,
    SystemVariable,
    VariableSummary,
)

TOKEN_PATTERN = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


def find_tokens(text: str) -> list[str]:
    """Distinct token names in order of first appearance."""
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def check_declarations(prompt_config: PromptConfig) -> None:
    """Raise AmbiguousVariable if a name is both static and dynamic."""
    both = sorted(set(prompt_config.variables) & set(prompt_config.dynamic_variables))
    if both:
        raise AmbiguousVariable(both)


def resolve_variables(prompt_config: PromptConfig, text: str) -> VariableSummary:
    """Partition every token used in ``text`` into exactly one kind."""
    check_declarations(prompt_config)

    static: list[StaticVariable] = []
    override: list[OverrideVariable] = []
    dynamic: list[DynamicVariable] = []
    system: list[SystemVariable] = []

    for name in find_tokens(text):
        declared = prompt_config.variables.get(name)
        if isinstance(declared, LiteralValue):
            static.append(StaticVariable(name=name, value=declared.value))
        elif isinstance(declared, DeferToRuntime):
            override.append(OverrideVariable(name=name))
        elif name in prompt_config.dynamic_variables:
            spec = prompt_config.dynamic_variables[name]
            dynamic.append(
                DynamicVariable(
                    name=name,
                    value_type=spec.type,
                    description=spec.description,
                )
            )
        else:
            system.append(SystemVariable(name=name))

    return VariableSummary(static=static, override=override, dynamic=dynamic, system=system)


def substitute_static(text: str, summary: VariableSummary) -> str:
    """Replace static tokens with their values in a single pass.

    Substituted values are not rescanned, so a value containing ``{{x}}``
    stays literal. Other tokens are left verbatim for the runtime.
    """
    values = summary.static_values()

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in values:
            return values[name]
        return match.group(0)

    return TOKEN_PATTERN.sub(_replace, text)
