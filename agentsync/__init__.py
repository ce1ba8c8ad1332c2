"""agentsync - reproducible deployment of voice-agent configurations.

Describe an agent once in agent.json, push it to staging and production
workspaces, and detect drift between local files and remote state.
"""

from agentsync.config.logging_config import configure_logging
from agentsync.core.drift import DriftClassifier
from agentsync.core.hashing import calculate_hash
from agentsync.core.metadata_store import MetadataStore
from agentsync.core.prompt_composer import compose_prompt
from agentsync.core.sync_controller import SyncController
from agentsync.errors import Err, Ok, Result, SyncError
from agentsync.models.agent_config import AgentConfig, LlmConfig, PromptConfig
from agentsync.models.metadata import MetadataRecord
from agentsync.models.workspace import PRODUCTION, STAGING, Production, Staging
from agentsync.sdk.session import SyncSession, open_session

__all__ = [
    # Models
    "AgentConfig",
    "LlmConfig",
    "PromptConfig",
    "MetadataRecord",
    "PRODUCTION",
    "STAGING",
    "Production",
    "Staging",
    # Results
    "Err",
    "Ok",
    "Result",
    "SyncError",
    # Engine
    "DriftClassifier",
    "MetadataStore",
    "SyncController",
    "calculate_hash",
    "compose_prompt",
    # High-level APIs
    "configure_logging",
    "SyncSession",
    "open_session",
]
