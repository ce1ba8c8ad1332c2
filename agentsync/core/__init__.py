"""The configuration synchronization engine."""

from agentsync.core.drift import DriftClassifier, classify
from agentsync.core.hashing import calculate_hash, canonicalize, compare_hashes
from agentsync.core.metadata_store import (
    FileMetadataBackend,
    InMemoryMetadataBackend,
    MetadataBackend,
    MetadataStore,
)
from agentsync.core.prompt_composer import (
    ComposedPrompt,
    PromptReport,
    compose_prompt,
    validate_prompt,
)
from agentsync.core.sync_controller import PullOutcome, PushOutcome, SyncController
from agentsync.core.transformer import from_remote, to_remote_agent, to_remote_llm
from agentsync.core.variables import resolve_variables

__all__ = [
    # Hashing
    "calculate_hash",
    "canonicalize",
    "compare_hashes",
    # Prompts
    "ComposedPrompt",
    "PromptReport",
    "compose_prompt",
    "resolve_variables",
    "validate_prompt",
    # Transformation
    "from_remote",
    "to_remote_agent",
    "to_remote_llm",
    # Metadata
    "FileMetadataBackend",
    "InMemoryMetadataBackend",
    "MetadataBackend",
    "MetadataStore",
    # Sync
    "DriftClassifier",
    "PullOutcome",
    "PushOutcome",
    "SyncController",
    "classify",
]
