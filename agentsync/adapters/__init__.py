"""Collaborator implementations: section lookup and the remote agent service."""

from agentsync.adapters.remote_service import (
    HttpRemoteAgentService,
    InMemoryRemoteAgentService,
    RemoteAgentService,
)
from agentsync.adapters.section_resolvers import (
    DirectorySectionResolver,
    MappingSectionResolver,
    SectionResolver,
)

__all__ = [
    "HttpRemoteAgentService",
    "InMemoryRemoteAgentService",
    "RemoteAgentService",
    "DirectorySectionResolver",
    "MappingSectionResolver",
    "SectionResolver",
]
