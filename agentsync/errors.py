"""Typed failures and the Ok/Err result wrapper returned by engine operations.

Components raise SyncError subclasses internally. Public operations catch them
at the boundary and hand back a Result so callers can render and act on the
failure without try/except around every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SyncError(Exception):
    """Base class for every expected failure in the sync engine."""

    kind = "SyncError"
    default_hint: str | None = None

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint if hint is not None else self.default_hint
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class SectionNotFound(SyncError):
    """A declared prompt section has no override and no stored text."""

    kind = "SectionNotFound"
    default_hint = "Create the prompt section file or update your agent.json"

    def __init__(self, section_id: str) -> None:
        super().__init__(
            f"Prompt section not found: {section_id}",
            details={"section_id": section_id},
        )
        self.section_id = section_id


class AmbiguousVariable(SyncError):
    """A name is declared both in variables and dynamic_variables."""

    kind = "AmbiguousVariable"
    default_hint = "Declare the variable in either variables or dynamic_variables, not both"

    def __init__(self, names: list[str]) -> None:
        joined = ", ".join(names)
        super().__init__(
            f"Variables declared as both static and dynamic: {joined}",
            details={"names": names},
        )
        self.names = names


class StagingRequired(SyncError):
    """Production push attempted for a hash that was never pushed to staging."""

    kind = "StagingRequired"
    default_hint = "Push to staging first, or pass force=True to bypass the gate"


class RemoteCallFailed(SyncError):
    """The remote agent service rejected or could not complete a call."""

    kind = "RemoteCallFailed"

    # error code -> operator hint
    HINTS = {
        "not_found": "The resource may have been deleted remotely",
        "unauthorized": "Check the API key configured for this workspace",
        "rate_limited": "Wait a moment and try again",
        "connection_error": "Check your network connection",
        "api_error": "Check your network connection and API key",
    }

    def __init__(
        self,
        code: str,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            message,
            hint=self.HINTS.get(code),
            details={
                "code": code,
                "operation": operation,
                "status_code": status_code,
            },
        )
        self.code = code
        self.operation = operation
        self.status_code = status_code


class MetadataCorrupt(SyncError):
    """A persisted metadata record could not be parsed."""

    kind = "MetadataCorrupt"
    default_hint = "Inspect or remove the metadata file, then push again"


class ConfigInvalid(SyncError):
    """An agent configuration file failed validation."""

    kind = "ConfigInvalid"
    default_hint = "Check your agent.json file for syntax errors or invalid values"


class NotSynced(SyncError):
    """The operation needs remote ids but the slot was never pushed."""

    kind = "NotSynced"
    default_hint = "Push the agent to the workspace first"


class WorkspaceConfigError(SyncError):
    """Workspace credentials are missing or malformed."""

    kind = "WorkspaceConfigError"
    default_hint = "Check workspaces.json or the RETELL_*_API_KEY variables in your .env file"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: SyncError

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err


def unwrap(result: Ok[T] | Err) -> T:
    """Return the value of an Ok result, raising the carried error otherwise.

    Use sparingly; prefer checking ``result.ok``.
    """
    if isinstance(result, Ok):
        return result.value
    raise result.error
