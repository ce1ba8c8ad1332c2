"""Timestamp utilities."""

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
