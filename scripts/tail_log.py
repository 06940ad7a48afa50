#!/usr/bin/env python3
"""
View recent classification events from the event log.

Provides filtered access to the event log with options to filter by
page URL and event type.
"""

import json
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from scout.utils.event_logging import get_recent_events
from scout.utils.timestamp import format_timestamp

load_dotenv()

app = typer.Typer(
    add_completion=False,
    help="View recent classification events",
)


@app.command()
def main(
    n: int = typer.Option(10, "--num", "-n", help="Number of recent events to show"),
    page: Optional[str] = typer.Option(
        None, "--page", "-p", help="Filter to events for this page URL"
    ),
    event_type: Optional[str] = typer.Option(
        None, "--event-type", "-e", help="Filter to events of this type"
    ),
    events_file: Optional[Path] = typer.Option(
        None, "--events-file", help="Event log to read (default: SCOUT_EVENTS_FILE)"
    ),
    compact: bool = typer.Option(
        False, "--compact", "-c", help="Print one event per line (no pretty formatting)"
    ),
):
    """
    Show the last n events from the event log.

    Examples:\n

        $ python scripts/tail_log.py                          # Last 10 events

        $ python scripts/tail_log.py -e site_classified       # Last 10 site runs

        $ python scripts/tail_log.py -n 5 -p /about/          # Last 5 events for a page
    """
    events = get_recent_events(n=n, page_url=page, event_type=event_type, events_file=events_file)

    if not events:
        typer.secho("No events found", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    if not compact:
        filters = []
        if page:
            filters.append(f"page={page}")
        if event_type:
            filters.append(f"type={event_type}")
        suffix = f" [{', '.join(filters)}]" if filters else ""
        typer.secho(f"\nShowing last {len(events)} event(s){suffix}:", fg=typer.colors.BLUE)
        typer.echo("")

    for event in events:
        if compact:
            typer.echo(json.dumps(event))
        else:
            typer.echo(json.dumps(event, indent=2))
            typer.echo("")


@app.command()
def history(
    page_url: str = typer.Argument(..., help="Page URL to track"),
    n: int = typer.Option(20, "--num", "-n", help="Maximum number of runs to show"),
    events_file: Optional[Path] = typer.Option(
        None, "--events-file", help="Event log to read (default: SCOUT_EVENTS_FILE)"
    ),
):
    """
    Show how a page's labels changed across site runs.

    Examples:\n

        $ python scripts/tail_log.py history /2025/01/02/hello/
    """
    events = get_recent_events(
        n=n, page_url=page_url, event_type="page_classified", events_file=events_file
    )
    if not events:
        typer.secho(f"No classifications found for {page_url}", fg=typer.colors.YELLOW)
        return

    typer.secho(f"\nLabel history for {page_url}", bold=True)
    previous = None
    changes = Counter()
    for event in events:
        labels = event.get("labels", {})
        changed = [k for k in labels if previous is not None and previous.get(k) != labels[k]]
        changes.update(changed)
        marker = " *" if changed else ""
        summary = ", ".join(f"{k}={v}" for k, v in labels.items())
        typer.echo(f"  {format_timestamp(event['timestamp'])}  {summary}{marker}")
        previous = labels

    if changes:
        typer.echo("")
        for key, count in changes.most_common():
            typer.echo(f"  {key} changed {count} time(s)")


if __name__ == "__main__":
    app()
