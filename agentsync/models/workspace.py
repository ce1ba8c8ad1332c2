"""Workspace slots: the deployment targets an agent can be pushed to."""

import re
from typing import Literal

from pydantic import BaseModel, Field

_SLOT_PATTERN = re.compile(r"^(staging|production)(?:[-:](\d+))?$")


class Staging(BaseModel):
    """The staging slot. There is exactly one."""

    model_config = {"frozen": True}

    kind: Literal["staging"] = "staging"

    @property
    def is_production(self) -> bool:
        return False

    @property
    def key(self) -> str:
        """Metadata key and record label for this slot."""
        return "staging"


class Production(BaseModel):
    """A production slot; ``index`` selects one of several in multi-production mode."""

    model_config = {"frozen": True}

    kind: Literal["production"] = "production"
    index: int | None = Field(default=None, ge=0)

    @property
    def is_production(self) -> bool:
        return True

    @property
    def key(self) -> str:
        if self.index is None:
            return "production"
        return f"production-{self.index}"


WorkspaceSlot = Staging | Production

STAGING = Staging()
PRODUCTION = Production()


def parse_slot(value: str) -> WorkspaceSlot:
    """Parse ``staging``, ``production`` or ``production-<n>`` (also ``production:<n>``)."""
    match = _SLOT_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Unknown workspace slot: {value!r}")
    kind, index = match.groups()
    if kind == "staging":
        if index is not None:
            raise ValueError("The staging slot takes no index")
        return STAGING
    return Production(index=int(index) if index is not None else None)
