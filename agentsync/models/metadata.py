"""Per-(agent, workspace slot) sync record persisted next to the agent file."""

from pydantic import BaseModel, Field

# fields a caller may merge into a record
MERGEABLE_FIELDS = frozenset(
    {"agent_id", "llm_id", "kb_id", "last_sync", "config_hash", "remote_version"}
)


class MetadataRecord(BaseModel):
    """Last known-good push to one slot.

    The on-disk shape is stable: the remote version is stored under
    ``retell_version`` for compatibility with existing metadata files.
    """

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    workspace: str
    agent_id: str | None = None
    llm_id: str | None = None
    kb_id: str | None = None
    last_sync: str | None = None  # ISO8601
    config_hash: str | None = None  # "sha256:<hex>"
    remote_version: int | None = Field(default=None, alias="retell_version")

    @classmethod
    def empty(cls, workspace: str) -> "MetadataRecord":
        return cls(workspace=workspace)

    def to_file_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
