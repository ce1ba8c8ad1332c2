"""Derived sync status of one agent in one slot. Never persisted."""

from typing import Literal

from pydantic import BaseModel


class LocalChanged(BaseModel):
    type: Literal["local_changes"] = "local_changes"
    local_hash: str


class RemoteChanged(BaseModel):
    """Drift: the remote resource changed outside this tool."""

    type: Literal["remote_changes"] = "remote_changes"
    remote_hash: str


class BothChanged(BaseModel):
    """Conflict: local and remote both moved away from the stored hash."""

    type: Literal["both_changed"] = "both_changed"
    local_hash: str
    remote_hash: str


OutOfSyncReason = LocalChanged | RemoteChanged | BothChanged


class InSync(BaseModel):
    status: Literal["in_sync"] = "in_sync"
    last_sync: str | None = None


class OutOfSync(BaseModel):
    status: Literal["out_of_sync"] = "out_of_sync"
    reason: OutOfSyncReason


class NeverSynced(BaseModel):
    status: Literal["never_synced"] = "never_synced"


SyncStatus = InSync | OutOfSync | NeverSynced


class SlotStatus(BaseModel):
    """Status of one slot plus the hashes it was derived from."""

    workspace: str
    status: SyncStatus
    local_hash: str
    stored_hash: str | None = None
    remote_hash: str | None = None
