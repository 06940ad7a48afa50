"""
Pipeline event logging utilities for SCOUT (Tier 2 logging).

Appends classification run events to a JSON Lines file so that site builds
can be audited and compared across runs.

For detailed within-context logging (Tier 1), use scout.utils.logger instead.

Usage:
    from scout.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        event_type="page_classified",
        page_url="/2025/01/02/hello/",
        source="publishing",
        content_type="tutorial",
    )
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from scout.utils.timestamp import now_exact

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
EVENTS_FILE = Path(os.getenv("SCOUT_EVENTS_FILE", str(LOGS_PATH / "scout_events.log")))


def log_pipeline_event(
    event_type: str,
    page_url: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Log an event to the pipeline event log.

    Events are appended in JSON Lines format (one JSON object per line),
    which keeps the log streamable and easy to filter by event_type,
    page_url, or source.

    Args:
        event_type: Type of event (e.g., "page_classified", "site_classified")
        page_url: Page URL the event is about ("*" for site-wide events)
        source: Event source (e.g., "publishing", "cli")
        events_file: Override log file (defaults to SCOUT_EVENTS_FILE)
        **extra_fields: Additional event-specific fields
    """
    events_file = Path(events_file) if events_file is not None else EVENTS_FILE
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "page_url": page_url,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    n: int = 10,
    page_url: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        page_url: Filter to only events for this page (optional)
        event_type: Filter to only events of this type (optional)
        events_file: Override log file (defaults to SCOUT_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = Path(events_file) if events_file is not None else EVENTS_FILE
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if page_url:
        events = [e for e in events if e.get("page_url") == page_url]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
