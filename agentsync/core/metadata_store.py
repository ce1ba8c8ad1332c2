"""Per-(agent, workspace slot) metadata records.

Records are merged, never blindly overwritten, and every write goes through
a temporary file that is renamed into place, so a crash never leaves a
half-written record. Slots are independent: an operation on one slot only
ever touches that slot's record.

Two processes pushing the same (agent, slot) at once are not coordinated;
the last write wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from agentsync.errors import Err, MetadataCorrupt, Ok, Result
from agentsync.models.metadata import MERGEABLE_FIELDS, MetadataRecord
from agentsync.models.workspace import WorkspaceSlot

logger = logging.getLogger(__name__)


class MetadataBackend:
    """Protocol for reading and atomically writing one JSON text per key."""

    def read(self, agent_ref: str, key: str) -> str | None:
        """Return the stored text, or None if nothing is stored."""
        raise NotImplementedError

    def write(self, agent_ref: str, key: str, text: str) -> None:
        """Replace the stored text atomically."""
        raise NotImplementedError


class InMemoryMetadataBackend(MetadataBackend):
    """Stores records in a dict keyed by (agent_ref, key)."""

    def __init__(self) -> None:
        self.records: dict[tuple[str, str], str] = {}

    def read(self, agent_ref: str, key: str) -> str | None:
        return self.records.get((agent_ref, key))

    def write(self, agent_ref: str, key: str, text: str) -> None:
        self.records[(agent_ref, key)] = text


class FileMetadataBackend(MetadataBackend):
    """Stores ``<agents_dir>/<agent_ref>/<slot key>.json``.

    Layout:
        agents/
            support-bot/
                agent.json
                staging.json
                production.json
                production-1.json
    """

    def __init__(self, agents_dir: Path | str) -> None:
        self.agents_dir = Path(agents_dir)

    def path_for(self, agent_ref: str, key: str) -> Path:
        return self.agents_dir / agent_ref / f"{key}.json"

    def read(self, agent_ref: str, key: str) -> str | None:
        path = self.path_for(agent_ref, key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, agent_ref: str, key: str, text: str) -> None:
        path = self.path_for(agent_ref, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(path, text)


def atomic_write_text(path: Path, text: str) -> None:
    """Write to a temp file in the same directory, then rename over ``path``."""
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


class MetadataStore:
    """Reads and merge-updates metadata records through a backend."""

    def __init__(self, backend: MetadataBackend) -> None:
        self.backend = backend

    def _load(self, agent_ref: str, slot: WorkspaceSlot) -> MetadataRecord | None:
        try:
            text = self.backend.read(agent_ref, slot.key)
        except UnicodeDecodeError as e:
            raise MetadataCorrupt(
                f"Metadata for {agent_ref}/{slot.key} is corrupt: not valid UTF-8",
                details={"agent": agent_ref, "workspace": slot.key},
            ) from e
        if text is None:
            return None
        try:
            return MetadataRecord.model_validate_json(text)
        except ValidationError as e:
            raise MetadataCorrupt(
                f"Metadata for {agent_ref}/{slot.key} is corrupt: {e.error_count()} error(s)",
                details={"agent": agent_ref, "workspace": slot.key},
            ) from e

    def read(
        self,
        agent_ref: str,
        slot: WorkspaceSlot,
        treat_corrupt_as_missing: bool = False,
    ) -> Result[MetadataRecord | None]:
        """Read one slot's record. ``Ok(None)`` means the slot was never synced.

        A corrupt record is an error unless the caller opts into treating it
        as missing.
        """
        try:
            return Ok(self._load(agent_ref, slot))
        except MetadataCorrupt as e:
            if treat_corrupt_as_missing:
                logger.warning("%s; treating %s as never synced", e.message, slot.key)
                return Ok(None)
            return Err(e)

    def update(self, agent_ref: str, slot: WorkspaceSlot, **fields) -> Result[MetadataRecord]:
        """Merge ``fields`` into the slot's record (or a fresh one) and persist it."""
        unknown = set(fields) - MERGEABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown metadata fields: {sorted(unknown)}")

        try:
            current = self._load(agent_ref, slot)
        except MetadataCorrupt as e:
            return Err(e)

        base = current.model_dump() if current is not None else {}
        merged = MetadataRecord.model_validate(
            {**base, **fields, "workspace": slot.key}
        )
        text = json.dumps(merged.to_file_dict(), indent=2) + "\n"
        self.backend.write(agent_ref, slot.key, text)
        logger.debug("Wrote metadata %s/%s: %s", agent_ref, slot.key, sorted(fields))
        return Ok(merged)
