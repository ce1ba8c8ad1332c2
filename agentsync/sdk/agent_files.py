"""Reading and writing agent.json files."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from agentsync.core.metadata_store import atomic_write_text
from agentsync.errors import ConfigInvalid
from agentsync.models.agent_config import AgentConfig

AGENT_FILE = "agent.json"


def load_agent_config(agent_dir: Path | str) -> AgentConfig:
    """Load and validate ``<agent_dir>/agent.json``.

    Raises ConfigInvalid for a missing file, malformed JSON or schema errors.
    """
    path = Path(agent_dir) / AGENT_FILE
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigInvalid(f"Could not read {path}: {e}", hint="Check the agent name and path") from e

    try:
        return AgentConfig.model_validate_json(text)
    except ValidationError as e:
        raise ConfigInvalid(
            f"{path} is invalid: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


def save_agent_config(agent_dir: Path | str, config: AgentConfig) -> Path:
    """Write ``config`` to ``<agent_dir>/agent.json`` atomically."""
    path = Path(agent_dir) / AGENT_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, json.dumps(config.to_file_dict(), indent=2, ensure_ascii=False) + "\n")
    return path
