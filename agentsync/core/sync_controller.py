"""Push/pull decision logic for one agent and one workspace slot.

A push runs strictly in order:
    hash -> stored record -> in-sync short-circuit -> staging-first gate
    -> compose prompt -> LLM create/update -> Agent create/update
    -> metadata merge

The Agent payload needs the LLM id, so nothing here can be reordered or run
concurrently. Metadata is written only after both remote calls succeed; a
failed push leaves the stored record as it was and is safe to retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Mapping

from agentsync.adapters.remote_service import RemoteAgentService
from agentsync.adapters.section_resolvers import SectionResolver
from agentsync.core.hashing import calculate_hash, compare_hashes, short_hash
from agentsync.core.metadata_store import MetadataStore
from agentsync.core.prompt_composer import build_llm_prompt
from agentsync.core.transformer import from_remote, to_remote_agent, to_remote_llm
from agentsync.errors import (
    Err,
    NotSynced,
    Ok,
    Result,
    StagingRequired,
    SyncError,
    WorkspaceConfigError,
    unwrap,
)
from agentsync.models.agent_config import AgentConfig
from agentsync.models.metadata import MetadataRecord
from agentsync.models.workspace import STAGING, WorkspaceSlot
from agentsync.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)

ConflictChoice = Literal["use-local", "use-remote"]


@dataclass(frozen=True)
class PushOutcome:
    """What a push did. ``skipped`` means the slot was already in sync."""

    workspace: str
    agent_id: str | None
    llm_id: str | None
    config_hash: str
    last_sync: str | None
    skipped: bool = False
    created_llm: bool = False
    created_agent: bool = False
    remote_version: int | None = None


@dataclass(frozen=True)
class PullOutcome:
    """Config rebuilt from remote state; ``written`` is False for previews."""

    workspace: str
    config: AgentConfig
    config_hash: str
    remote_version: int | None
    written: bool = False


def service_for(services: Mapping[str, RemoteAgentService], slot: WorkspaceSlot) -> RemoteAgentService:
    """The remote service configured for ``slot``."""
    try:
        return services[slot.key]
    except KeyError:
        raise WorkspaceConfigError(
            f"No remote service configured for workspace '{slot.key}'",
            details={"workspace": slot.key},
        ) from None


class SyncController:
    """Pushes local configs to workspace slots and pulls them back.

    Every operation takes its (agent_ref, slot) explicitly; the controller
    itself holds no per-agent state.
    """

    def __init__(
        self,
        store: MetadataStore,
        services: Mapping[str, RemoteAgentService],
        resolver: SectionResolver | None = None,
    ) -> None:
        self.store = store
        self.services = services
        self.resolver = resolver

    def push(
        self,
        config: AgentConfig,
        agent_ref: str,
        slot: WorkspaceSlot,
        force: bool = False,
    ) -> Result[PushOutcome]:
        """Push ``config`` to ``slot``, creating or updating both resources."""
        try:
            return Ok(self._push(config, agent_ref, slot, force))
        except SyncError as e:
            logger.warning("Push of %s to %s failed (%s): %s", agent_ref, slot.key, e.kind, e.message)
            return Err(e)

    def _push(
        self,
        config: AgentConfig,
        agent_ref: str,
        slot: WorkspaceSlot,
        force: bool,
    ) -> PushOutcome:
        local_hash = calculate_hash(config)
        stored = unwrap(self.store.read(agent_ref, slot))
        logger.info("Pushing %s to %s (local hash %s)", agent_ref, slot.key, short_hash(local_hash))

        if stored is not None and not force and compare_hashes(stored.config_hash, local_hash):
            logger.info("%s is already in sync with %s", agent_ref, slot.key)
            return PushOutcome(
                workspace=slot.key,
                agent_id=stored.agent_id,
                llm_id=stored.llm_id,
                config_hash=local_hash,
                last_sync=stored.last_sync,
                skipped=True,
                remote_version=stored.remote_version,
            )

        if slot.is_production and not force:
            self._check_staging(agent_ref, local_hash)

        composed = build_llm_prompt(config.llm_config, self.resolver)
        service = service_for(self.services, slot)
        existing = stored or MetadataRecord.empty(slot.key)

        llm_payload = to_remote_llm(config, composed)
        if existing.llm_id:
            logger.info("Updating LLM %s", existing.llm_id)
            llm = service.update_llm(existing.llm_id, llm_payload)
        else:
            logger.info("Creating LLM in %s", slot.key)
            llm = service.create_llm(llm_payload)

        agent_payload = to_remote_agent(config, llm.llm_id)
        if existing.agent_id:
            logger.info("Updating agent %s", existing.agent_id)
            agent = service.update_agent(existing.agent_id, agent_payload)
        else:
            logger.info("Creating agent in %s", slot.key)
            agent = service.create_agent(agent_payload)

        record = unwrap(
            self.store.update(
                agent_ref,
                slot,
                agent_id=agent.agent_id,
                llm_id=llm.llm_id,
                config_hash=local_hash,
                last_sync=utc_timestamp(),
                remote_version=agent.version,
            )
        )
        logger.info(
            "Pushed %s to %s: agent %s, llm %s",
            agent_ref,
            slot.key,
            agent.agent_id,
            llm.llm_id,
        )
        return PushOutcome(
            workspace=slot.key,
            agent_id=record.agent_id,
            llm_id=record.llm_id,
            config_hash=local_hash,
            last_sync=record.last_sync,
            created_llm=not existing.llm_id,
            created_agent=not existing.agent_id,
            remote_version=record.remote_version,
        )

    def _check_staging(self, agent_ref: str, local_hash: str) -> None:
        """Raise StagingRequired unless staging holds ``local_hash``. Reads only."""
        staging = unwrap(self.store.read(agent_ref, STAGING))
        staging_hash = staging.config_hash if staging is not None else None
        if not compare_hashes(staging_hash, local_hash):
            raise StagingRequired(
                "This configuration has not been pushed to staging",
                details={
                    "local_hash": local_hash,
                    "staging_hash": staging_hash,
                },
            )

    def pull(
        self,
        agent_ref: str,
        slot: WorkspaceSlot,
        hint: AgentConfig | None = None,
        writer: Callable[[AgentConfig], None] | None = None,
    ) -> Result[PullOutcome]:
        """Rebuild the local config from the slot's remote resources.

        Without ``writer`` this is a preview and nothing is recorded. With a
        writer, the config is handed to it and the slot's record then takes
        the pulled hash, so the slot reads as in sync afterwards.
        """
        try:
            return Ok(self._pull(agent_ref, slot, hint, writer))
        except SyncError as e:
            logger.warning("Pull of %s from %s failed (%s): %s", agent_ref, slot.key, e.kind, e.message)
            return Err(e)

    def _pull(
        self,
        agent_ref: str,
        slot: WorkspaceSlot,
        hint: AgentConfig | None,
        writer: Callable[[AgentConfig], None] | None,
    ) -> PullOutcome:
        stored = unwrap(self.store.read(agent_ref, slot))
        if stored is None or not stored.agent_id or not stored.llm_id:
            raise NotSynced(f"{agent_ref} has no remote resources in {slot.key}")

        service = service_for(self.services, slot)
        llm = service.get_llm(stored.llm_id)
        agent = service.get_agent(stored.agent_id)
        config = from_remote(llm, agent, hint=hint, resolver=self.resolver)
        config_hash = calculate_hash(config)

        if writer is None:
            return PullOutcome(
                workspace=slot.key,
                config=config,
                config_hash=config_hash,
                remote_version=agent.version,
            )

        writer(config)
        unwrap(
            self.store.update(
                agent_ref,
                slot,
                config_hash=config_hash,
                last_sync=utc_timestamp(),
                remote_version=agent.version,
            )
        )
        logger.info("Pulled %s from %s (hash %s)", agent_ref, slot.key, short_hash(config_hash))
        return PullOutcome(
            workspace=slot.key,
            config=config,
            config_hash=config_hash,
            remote_version=agent.version,
            written=True,
        )

    def resolve_conflict(
        self,
        config: AgentConfig,
        agent_ref: str,
        slot: WorkspaceSlot,
        choice: ConflictChoice,
        writer: Callable[[AgentConfig], None] | None = None,
    ) -> Result[PushOutcome] | Result[PullOutcome]:
        """Resolve a conflict by overwriting one side. There is no merge.

        ``use-local`` force-pushes ``config``; ``use-remote`` pulls the remote
        state (with ``config`` as the structural hint) and hands it to
        ``writer``.
        """
        if choice == "use-local":
            return self.push(config, agent_ref, slot, force=True)
        if choice == "use-remote":
            if writer is None:
                raise ValueError("use-remote needs a writer for the local config")
            return self.pull(agent_ref, slot, hint=config, writer=writer)
        raise ValueError(f"Unknown conflict choice: {choice!r}")

    def delete(self, agent_ref: str, slot: WorkspaceSlot) -> Result[MetadataRecord]:
        """Delete the slot's remote agent. The LLM is kept since it may be shared.

        The record keeps its llm_id and loses agent_id and config_hash, so the
        next push creates a fresh agent on the existing LLM.
        """
        try:
            stored = unwrap(self.store.read(agent_ref, slot))
            if stored is None or not stored.agent_id:
                raise NotSynced(f"{agent_ref} has no agent in {slot.key}")
            service_for(self.services, slot).delete_agent(stored.agent_id)
            logger.info("Deleted agent %s from %s", stored.agent_id, slot.key)
            return self.store.update(agent_ref, slot, agent_id=None, config_hash=None)
        except SyncError as e:
            logger.warning("Delete of %s from %s failed (%s): %s", agent_ref, slot.key, e.kind, e.message)
            return Err(e)
