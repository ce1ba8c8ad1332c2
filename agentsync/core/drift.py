"""Sync status and drift classification.

Up to three hashes are compared: the local config, the hash stored at the
last successful push, and optionally a hash of the current remote state
(fetched, reverse transformed with the local config as hint, then hashed).
Without a remote fetch no network call is made.
"""

from __future__ import annotations

import logging
from typing import Mapping

from agentsync.adapters.remote_service import RemoteAgentService
from agentsync.adapters.section_resolvers import SectionResolver
from agentsync.core.hashing import calculate_hash, compare_hashes
from agentsync.core.metadata_store import MetadataStore
from agentsync.core.sync_controller import service_for
from agentsync.core.transformer import from_remote
from agentsync.errors import Err, Ok, Result, SyncError, unwrap
from agentsync.models.agent_config import AgentConfig
from agentsync.models.metadata import MetadataRecord
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
from agentsync.models.workspace import WorkspaceSlot

logger = logging.getLogger(__name__)


def classify(
    local_hash: str,
    stored: MetadataRecord | None,
    remote_hash: str | None = None,
) -> SyncStatus:
    """Three-way comparison of local, stored and (optional) remote hashes."""
    if stored is None or stored.config_hash is None:
        return NeverSynced()

    local_same = compare_hashes(local_hash, stored.config_hash)
    if remote_hash is None:
        if local_same:
            return InSync(last_sync=stored.last_sync)
        return OutOfSync(reason=LocalChanged(local_hash=local_hash))

    remote_same = compare_hashes(remote_hash, stored.config_hash)
    if local_same and remote_same:
        return InSync(last_sync=stored.last_sync)
    if remote_same:
        return OutOfSync(reason=LocalChanged(local_hash=local_hash))
    if local_same:
        return OutOfSync(reason=RemoteChanged(remote_hash=remote_hash))
    if compare_hashes(local_hash, remote_hash):
        # both sides moved to the same content; only the record is stale
        return InSync(last_sync=stored.last_sync)
    return OutOfSync(reason=BothChanged(local_hash=local_hash, remote_hash=remote_hash))


class DriftClassifier:
    """Reports per-slot sync status for an agent."""

    def __init__(
        self,
        store: MetadataStore,
        services: Mapping[str, RemoteAgentService] | None = None,
        resolver: SectionResolver | None = None,
    ) -> None:
        self.store = store
        self.services = services or {}
        self.resolver = resolver

    def remote_hash(self, config: AgentConfig, record: MetadataRecord, slot: WorkspaceSlot) -> str | None:
        """Hash of the slot's current remote state, or None if it has no resources."""
        if not record.agent_id or not record.llm_id:
            return None
        service = service_for(self.services, slot)
        llm = service.get_llm(record.llm_id)
        agent = service.get_agent(record.agent_id)
        return calculate_hash(from_remote(llm, agent, hint=config, resolver=self.resolver))

    def status(
        self,
        config: AgentConfig,
        agent_ref: str,
        slot: WorkspaceSlot,
        fetch_remote: bool = False,
    ) -> Result[SlotStatus]:
        """Status of one slot. Only ``fetch_remote=True`` touches the network."""
        try:
            local_hash = calculate_hash(config)
            stored = unwrap(self.store.read(agent_ref, slot))
            remote_hash = None
            if fetch_remote and stored is not None and stored.config_hash is not None:
                remote_hash = self.remote_hash(config, stored, slot)
        except SyncError as e:
            logger.warning("Status of %s in %s failed (%s): %s", agent_ref, slot.key, e.kind, e.message)
            return Err(e)

        return Ok(
            SlotStatus(
                workspace=slot.key,
                status=classify(local_hash, stored, remote_hash),
                local_hash=local_hash,
                stored_hash=stored.config_hash if stored is not None else None,
                remote_hash=remote_hash,
            )
        )

    def status_all(
        self,
        config: AgentConfig,
        agent_ref: str,
        slots: list[WorkspaceSlot],
        fetch_remote: bool = False,
    ) -> dict[str, Result[SlotStatus]]:
        """Status of every slot, keyed by slot key. Slots are checked independently."""
        return {
            slot.key: self.status(config, agent_ref, slot, fetch_remote=fetch_remote)
            for slot in slots
        }
