"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """Current local time, second precision (e.g., "2025-11-13 18:45:40")."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def now_exact() -> str:
    """Current local time as a full ISO 8601 string (used for event ordering)."""
    return datetime.now().isoformat()


def format_timestamp(iso_timestamp: str) -> str:
    """
    Format ISO 8601 timestamp to readable format.

    Returns the input unchanged if it cannot be parsed.

    Examples:
        format_timestamp("2025-11-13T18:45:40.572549")
        # "2025-11-13 18:45:40"
    """
    try:
        return datetime.fromisoformat(iso_timestamp).strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, TypeError):
        return iso_timestamp
