"""Shared fixtures for agentsync tests."""

import shutil
from pathlib import Path

import pytest

from agentsync.adapters.remote_service import InMemoryRemoteAgentService
from agentsync.adapters.section_resolvers import MappingSectionResolver
from agentsync.core.metadata_store import FileMetadataBackend, MetadataStore
from agentsync.core.sync_controller import SyncController
from agentsync.models.agent_config import AgentConfig

FIXTURES = Path(__file__).parent / "fixtures"


def base_config_dict() -> dict:
    """A minimal valid agent.json payload with a composable prompt."""
    return {
        "agent_name": "Acme Receptionist",
        "voice_id": "11labs-Adrian",
        "language": "en-US",
        "llm_config": {
            "model": "gpt-4o",
            "temperature": 0.7,
            "prompt_config": {
                "sections": ["greeting"],
                "variables": {"company": "Acme"},
            },
        },
    }


@pytest.fixture
def config_dict() -> dict:
    return base_config_dict()


@pytest.fixture
def config() -> AgentConfig:
    return AgentConfig.model_validate(base_config_dict())


@pytest.fixture
def resolver() -> MappingSectionResolver:
    return MappingSectionResolver({"greeting": "Hello from {{company}}, ask {{caller_name}}"})


@pytest.fixture
def agents_dir(tmp_path: Path) -> Path:
    """A writable copy of the fixture agents directory."""
    target = tmp_path / "agents"
    shutil.copytree(FIXTURES / "agents", target)
    return target


@pytest.fixture
def store(tmp_path: Path) -> MetadataStore:
    return MetadataStore(FileMetadataBackend(tmp_path / "agents"))


@pytest.fixture
def services() -> dict[str, InMemoryRemoteAgentService]:
    """One in-memory remote workspace per slot."""
    return {
        "staging": InMemoryRemoteAgentService(),
        "production": InMemoryRemoteAgentService(),
        "production-1": InMemoryRemoteAgentService(),
    }


@pytest.fixture
def controller(store, services, resolver) -> SyncController:
    return SyncController(store, services, resolver)
