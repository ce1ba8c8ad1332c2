"""SDK for driving the sync engine from scripts and automation."""

from agentsync.sdk.agent_files import load_agent_config, save_agent_config
from agentsync.sdk.session import SyncSession, open_session

__all__ = [
    "load_agent_config",
    "save_agent_config",
    "SyncSession",
    "open_session",
]
