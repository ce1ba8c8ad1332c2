"""Single entry point wiring the engine to an agents directory.

Example:
    from agentsync.sdk import open_session

    session = open_session("./agents", "./prompts")
    result = session.push("support-bot", "staging")
    if not result.ok:
        print(result.error.message, result.error.hint)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from agentsync.adapters.remote_service import HttpRemoteAgentService, RemoteAgentService
from agentsync.adapters.section_resolvers import DirectorySectionResolver, SectionResolver
from agentsync.config.settings import WorkspaceSettings, load_workspaces
from agentsync.core.drift import DriftClassifier
from agentsync.core.metadata_store import FileMetadataBackend, MetadataStore
from agentsync.core.prompt_composer import PromptReport, validate_prompt
from agentsync.core.sync_controller import PullOutcome, PushOutcome, SyncController
from agentsync.errors import ConfigInvalid, Err, Ok, Result
from agentsync.models.agent_config import AgentConfig
from agentsync.models.sync_status import SlotStatus
from agentsync.models.workspace import WorkspaceSlot, parse_slot
from agentsync.sdk.agent_files import load_agent_config, save_agent_config


def _slot(slot: WorkspaceSlot | str) -> WorkspaceSlot:
    return parse_slot(slot) if isinstance(slot, str) else slot


@dataclass
class SyncSession:
    """Engine components bound to one agents directory.

    Agents are referenced by directory name; metadata lives beside each
    agent.json.
    """

    agents_dir: Path
    controller: SyncController
    classifier: DriftClassifier
    resolver: SectionResolver | None = None

    def load(self, agent_ref: str) -> Result[AgentConfig]:
        try:
            return Ok(load_agent_config(self.agents_dir / agent_ref))
        except ConfigInvalid as e:
            return Err(e)

    def push(self, agent_ref: str, slot: WorkspaceSlot | str, force: bool = False) -> Result[PushOutcome]:
        loaded = self.load(agent_ref)
        if not loaded.ok:
            return loaded
        return self.controller.push(loaded.value, agent_ref, _slot(slot), force=force)

    def pull(self, agent_ref: str, slot: WorkspaceSlot | str, write: bool = False) -> Result[PullOutcome]:
        """Pull remote state; ``write=True`` overwrites the local agent.json."""
        loaded = self.load(agent_ref)
        hint = loaded.value if loaded.ok else None
        writer = None
        if write:
            def writer(config: AgentConfig) -> None:
                save_agent_config(self.agents_dir / agent_ref, config)
        return self.controller.pull(agent_ref, _slot(slot), hint=hint, writer=writer)

    def status(
        self,
        agent_ref: str,
        slots: list[WorkspaceSlot | str],
        fetch_remote: bool = False,
    ) -> Result[dict[str, Result[SlotStatus]]]:
        loaded = self.load(agent_ref)
        if not loaded.ok:
            return loaded
        return Ok(
            self.classifier.status_all(
                loaded.value,
                agent_ref,
                [_slot(slot) for slot in slots],
                fetch_remote=fetch_remote,
            )
        )

    def validate(self, agent_ref: str) -> Result[PromptReport]:
        loaded = self.load(agent_ref)
        if not loaded.ok:
            return loaded
        return validate_prompt(loaded.value.llm_config, self.resolver)


def open_session(
    agents_dir: Path | str,
    prompts_dir: Path | str | None = None,
    settings: WorkspaceSettings | None = None,
    services: dict[str, RemoteAgentService] | None = None,
) -> SyncSession:
    """Build a session for ``agents_dir``.

    Remote services default to one HTTP client per configured workspace;
    pass ``services`` to substitute them (tests, dry runs).
    """
    agents_path = Path(agents_dir)
    if services is None:
        settings = settings or load_workspaces()
        services = {
            key: HttpRemoteAgentService(
                api_key=credentials.api_key,
                base_url=credentials.base_url,
                timeout=settings.http_timeout,
            )
            for key, credentials in settings.workspaces.items()
        }
    resolver = DirectorySectionResolver(prompts_dir) if prompts_dir is not None else None
    store = MetadataStore(FileMetadataBackend(agents_path))
    return SyncSession(
        agents_dir=agents_path,
        controller=SyncController(store, services, resolver),
        classifier=DriftClassifier(store, services, resolver),
        resolver=resolver,
    )
