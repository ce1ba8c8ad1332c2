"""Utility functions for agentsync."""

from agentsync.utils.identifiers import utc_timestamp

__all__ = [
    "utc_timestamp",
]
