"""Workspace credentials: one resolved {api_key, base_url} per slot.

Read from ``workspaces.json`` when present, else from environment variables
(a ``.env`` file is loaded first):

    RETELL_STAGING_API_KEY
    RETELL_PRODUCTION_API_KEY
    RETELL_BASE_URL          (optional, defaults to https://api.retellai.com)
    AGENTSYNC_HTTP_TIMEOUT   (optional, seconds, defaults to 30)

workspaces.json may reference keys by environment variable name so it can be
committed:

    {
      "staging": {"name": "Staging", "api_key_env": "RETELL_STAGING_API_KEY"},
      "production": [
        {"name": "EU", "api_key_env": "RETELL_PRODUCTION_EU_API_KEY"},
        {"name": "US", "api_key_env": "RETELL_PRODUCTION_US_API_KEY"}
      ]
    }

A production list switches to multi-production mode, with slots
``production-0``, ``production-1``...
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from agentsync.errors import WorkspaceConfigError
from agentsync.models.workspace import STAGING, Production, WorkspaceSlot, parse_slot

DEFAULT_BASE_URL = "https://api.retellai.com"
DEFAULT_HTTP_TIMEOUT = 30.0
WORKSPACES_FILE = "workspaces.json"


class WorkspaceEntry(BaseModel):
    """One entry of workspaces.json."""

    model_config = {"extra": "forbid"}

    name: str | None = None
    api_key: str | None = None
    api_key_env: str | None = None
    base_url: str | None = None


class WorkspaceCredentials(BaseModel):
    """Resolved credentials for one slot."""

    key: str  # slot key, e.g. "staging", "production-1"
    name: str
    api_key: str
    base_url: str = DEFAULT_BASE_URL

    @property
    def slot(self) -> WorkspaceSlot:
        return parse_slot(self.key)


class WorkspaceSettings(BaseModel):
    mode: Literal["single-production", "multi-production"] = "single-production"
    workspaces: dict[str, WorkspaceCredentials]
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    def list_slots(self) -> list[WorkspaceSlot]:
        return [credentials.slot for credentials in self.workspaces.values()]

    def get(self, slot: WorkspaceSlot) -> WorkspaceCredentials:
        try:
            return self.workspaces[slot.key]
        except KeyError:
            raise WorkspaceConfigError(
                f"Workspace '{slot.key}' is not configured",
                details={"workspace": slot.key},
            ) from None


def _resolve_entry(
    key: str,
    entry: WorkspaceEntry,
    env: Mapping[str, str],
    default_base_url: str,
) -> WorkspaceCredentials:
    api_key = entry.api_key
    if api_key is None and entry.api_key_env:
        api_key = env.get(entry.api_key_env)
        if not api_key:
            raise WorkspaceConfigError(
                f"{entry.api_key_env} environment variable is not set (workspace '{key}')"
            )
    if not api_key:
        raise WorkspaceConfigError(f"Workspace '{key}' has no api_key or api_key_env")
    return WorkspaceCredentials(
        key=key,
        name=entry.name or key,
        api_key=api_key,
        base_url=entry.base_url or default_base_url,
    )


def _from_file(path: Path, env: Mapping[str, str], timeout: float) -> WorkspaceSettings:
    try:
        raw: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise WorkspaceConfigError(f"Could not read {path}: {e}") from e

    default_base_url = env.get("RETELL_BASE_URL", DEFAULT_BASE_URL)
    if "staging" not in raw:
        raise WorkspaceConfigError(f"{path} has no 'staging' workspace")
    if "production" not in raw:
        raise WorkspaceConfigError(f"{path} has no 'production' workspace")

    try:
        staging_entry = WorkspaceEntry.model_validate(raw["staging"])
        production_raw = raw["production"]
        if isinstance(production_raw, list):
            mode = "multi-production"
            production_entries = [
                (Production(index=index).key, WorkspaceEntry.model_validate(item))
                for index, item in enumerate(production_raw)
            ]
        else:
            mode = "single-production"
            production_entries = [
                (Production().key, WorkspaceEntry.model_validate(production_raw))
            ]
    except ValidationError as e:
        raise WorkspaceConfigError(f"{path} is invalid: {e.error_count()} error(s)") from e

    workspaces = {STAGING.key: _resolve_entry(STAGING.key, staging_entry, env, default_base_url)}
    for key, entry in production_entries:
        workspaces[key] = _resolve_entry(key, entry, env, default_base_url)
    return WorkspaceSettings(mode=mode, workspaces=workspaces, http_timeout=timeout)


def _from_env(env: Mapping[str, str], timeout: float) -> WorkspaceSettings:
    base_url = env.get("RETELL_BASE_URL", DEFAULT_BASE_URL)
    workspaces = {}
    for key, variable in (
        ("staging", "RETELL_STAGING_API_KEY"),
        ("production", "RETELL_PRODUCTION_API_KEY"),
    ):
        api_key = env.get(variable)
        if not api_key:
            raise WorkspaceConfigError(
                f"{variable} environment variable is not set. Please add it to your .env file."
            )
        workspaces[key] = WorkspaceCredentials(key=key, name=key, api_key=api_key, base_url=base_url)
    return WorkspaceSettings(workspaces=workspaces, http_timeout=timeout)


def load_workspaces(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> WorkspaceSettings:
    """Load workspace settings from ``path`` (or ./workspaces.json) or the environment.

    ``env`` replaces ``os.environ`` (and skips .env loading) when given.
    """
    if env is None:
        load_dotenv()  # load environment variables from .env file
        env = os.environ

    try:
        timeout = float(env.get("AGENTSYNC_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
    except ValueError as e:
        raise WorkspaceConfigError("AGENTSYNC_HTTP_TIMEOUT must be a number") from e

    file_path = Path(path) if path is not None else Path.cwd() / WORKSPACES_FILE
    if file_path.is_file():
        return _from_file(file_path, env, timeout)
    if path is not None:
        raise WorkspaceConfigError(f"{file_path} not found")
    return _from_env(env, timeout)
