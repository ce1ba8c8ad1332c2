"""Deterministic content fingerprint of an agent configuration.

The canonical form is compact JSON with object keys sorted at every level.
Array order is kept (section order is data). An explicit ``null`` is written
as ``null`` while an omitted optional field contributes nothing, so adding an
explicit null is a detectable change.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from agentsync.models.agent_config import AgentConfig

HASH_PREFIX = "sha256:"


def canonicalize(config: AgentConfig | dict[str, Any]) -> str:
    """Return the canonical JSON text of a config.

    Accepts either a model or its file dict. Non-JSON values and circular
    references raise; a loaded config can contain neither.
    """
    payload = config.to_file_dict() if isinstance(config, AgentConfig) else config
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def calculate_hash(config: AgentConfig | dict[str, Any]) -> str:
    """SHA-256 of the canonical form, hex encoded and prefixed ``sha256:``."""
    digest = hashlib.sha256(canonicalize(config).encode("utf-8")).hexdigest()
    return f"{HASH_PREFIX}{digest}"


def compare_hashes(a: str | None, b: str | None) -> bool:
    """Exact equality of two prefixed hashes; a missing hash never matches."""
    if a is None or b is None:
        return False
    return a == b


def short_hash(value: str | None, length: int = 16) -> str:
    """Abbreviated hash for log lines."""
    if not value:
        return "-"
    return value.removeprefix(HASH_PREFIX)[:length]
