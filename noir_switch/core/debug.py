"""Debug utilities for conditional printing."""

import os
from datetime import UTC, datetime


def _is_debug_mode() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG_MODE", "false").lower() == "true"


def debug_print(*args: object, **kwargs: object) -> None:
    """Print only if DEBUG_MODE is enabled."""
    if _is_debug_mode():
        print(*args, **kwargs)  # type: ignore[call-overload]


def format_utc(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC timestamp (e.g. 2026-06-21T20:21:00Z)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
