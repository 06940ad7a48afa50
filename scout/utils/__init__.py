"""
Shared utilities for SCOUT.

Common functionality used across contexts:
- Logger setup
- Pipeline event log
- Report tables
- Timestamps
"""

from scout.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
