"""
Core types shared across the cache package.

This module defines:
- The reserved key character set of the store's key format
- Type aliases for DynamoDB attribute maps and clocks
- Helper functions for ID generation and timestamps
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from uuid6 import uuid7

# Characters the store's key format reserves
RESERVED_CHARACTERS = "{}()/\\@:"

# One DynamoDB item in low-level client form, e.g. {"id": {"S": "k"}}
AttributeMap = dict[str, dict[str, Any]]

# Zero-argument callable returning the current aware UTC time
Clock = Callable[[], datetime]


def generate_id(prefix: str = "") -> str:
    """Generate a time-ordered unique ID using UUID7.

    Args:
        prefix: Optional prefix for the ID (e.g., "slot")

    Returns:
        A unique ID string, optionally prefixed.
    """
    uid = str(uuid7())
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_unix_seconds(value: datetime) -> int:
    """Convert a datetime to whole Unix seconds."""
    return int(ensure_utc(value).timestamp())


def from_unix_seconds(value: int | float | str) -> datetime:
    """Convert Unix seconds (number or numeric string) to aware UTC datetime."""
    return datetime.fromtimestamp(int(float(value)), tz=timezone.utc)
