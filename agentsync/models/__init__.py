"""Data models for the sync engine."""

from agentsync.models.agent_config import (
    OVERRIDE_SENTINEL,
    AgentConfig,
    AnalysisField,
    DeferToRuntime,
    DynamicVariableSpec,
    LiteralValue,
    LlmConfig,
    PromptConfig,
    PronunciationEntry,
    VariableValue,
)
from agentsync.models.metadata import MetadataRecord
from agentsync.models.remote import (
    RemoteAgent,
    RemoteAgentPayload,
    RemoteLlm,
    RemoteLlmPayload,
    ResponseEngine,
)
from agentsync.models.sync_status import (
    BothChanged,
    InSync,
    LocalChanged,
    NeverSynced,
    OutOfSync,
    RemoteChanged,
    SlotStatus,
    SyncStatus,
)
from agentsync.models.variables import (
    DynamicVariable,
    OverrideVariable,
    StaticVariable,
    SystemVariable,
    Variable,
    VariableSummary,
)
from agentsync.models.workspace import (
    PRODUCTION,
    STAGING,
    Production,
    Staging,
    WorkspaceSlot,
    parse_slot,
)

__all__ = [
    # Agent configuration
    "OVERRIDE_SENTINEL",
    "AgentConfig",
    "AnalysisField",
    "DeferToRuntime",
    "DynamicVariableSpec",
    "LiteralValue",
    "LlmConfig",
    "PromptConfig",
    "PronunciationEntry",
    "VariableValue",
    # Variables
    "DynamicVariable",
    "OverrideVariable",
    "StaticVariable",
    "SystemVariable",
    "Variable",
    "VariableSummary",
    # Workspaces and metadata
    "PRODUCTION",
    "STAGING",
    "Production",
    "Staging",
    "WorkspaceSlot",
    "parse_slot",
    "MetadataRecord",
    # Remote payloads
    "RemoteAgent",
    "RemoteAgentPayload",
    "RemoteLlm",
    "RemoteLlmPayload",
    "ResponseEngine",
    # Sync status
    "BothChanged",
    "InSync",
    "LocalChanged",
    "NeverSynced",
    "OutOfSync",
    "RemoteChanged",
    "SlotStatus",
    "SyncStatus",
]
