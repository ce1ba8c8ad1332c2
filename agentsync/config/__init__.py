"""Settings and logging configuration."""

from agentsync.config.logging_config import configure_logging
from agentsync.config.settings import (
    WorkspaceCredentials,
    WorkspaceSettings,
    load_workspaces,
)

__all__ = [
    "configure_logging",
    "WorkspaceCredentials",
    "WorkspaceSettings",
    "load_workspaces",
]
