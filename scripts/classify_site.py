#!/usr/bin/env python3
"""
Classify every page of a Jekyll site and write _data/scout_context.json.

Usage:
    python scripts/classify_site.py path/to/site
    python scripts/classify_site.py path/to/site --report outs/site_report.md
    python scripts/classify_site.py path/to/site --dry-run
"""

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from scout.contexts.publishing.engine import ContextEngine
from scout.contexts.publishing.logger import setup_publishing_logger
from scout.contexts.publishing.site_builder import classify_site
from scout.utils.logger import run_log_dir
from scout.utils.report_formatter import Column, TableFormatter

load_dotenv()

app = typer.Typer(add_completion=False, help="Classify a Jekyll site.")


@app.command()
def main(
    site_root: Path = typer.Argument(..., help="Jekyll source root"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Data file path (default: <site>/_data/scout_context.json)"
    ),
    report: Optional[Path] = typer.Option(
        None, "--report", "-r", help="Also write a markdown summary report here"
    ),
    drafts: bool = typer.Option(False, "--drafts", help="Include _drafts pages"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Classify and summarize without writing files"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for the run log (default: LOGS_PATH/site_<timestamp>)"
    ),
):
    """
    Classify a site and publish the page context data file.

    Examples:\n

        $ python scripts/classify_site.py ~/sites/example

        $ python scripts/classify_site.py ~/sites/example --dry-run --drafts
    """
    if not site_root.is_dir():
        typer.secho(f"Site root not found: {site_root}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if log_dir is None:
        log_dir = run_log_dir("site")
    setup_publishing_logger(log_dir, site_root=site_root)

    overrides = {"publishing": {"include_drafts": True}} if drafts else None
    engine = ContextEngine.for_site(site_root, overrides=overrides)
    result = classify_site(
        site_root,
        engine=engine,
        data_path=output,
        report_path=report,
        write=not dry_run,
    )

    table = TableFormatter([Column("Taxonomy", 20), Column("Label", 24), Column("Pages", 6, ">")], 52)
    table.add_section_header(f"LABEL DISTRIBUTION ({len(result.contexts)} pages)")
    table.add_table_header().add_separator()
    for taxonomy in result.taxonomies():
        for label, count in result.label_distribution(taxonomy).most_common():
            table.add_row([taxonomy, label, count])
        table.add_separator()
    typer.echo(table.render())

    if result.fallback_urls:
        typer.secho(
            f"\n{len(result.fallback_urls)} page(s) used the fallback context",
            fg=typer.colors.YELLOW,
        )
    if dry_run:
        typer.secho("\nDry run: nothing written", fg=typer.colors.BLUE)
    else:
        typer.secho(f"\n✓ Wrote {result.data_path}", fg=typer.colors.GREEN)
        if result.report_path:
            typer.secho(f"✓ Wrote {result.report_path}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
