#!/usr/bin/env python3
"""
Check a page's declared tech stack against how the page uses it.

Usage:
    python scripts/validate_tech_stack.py page.md
    python scripts/validate_tech_stack.py page.md --catalog my_catalog.yaml --no-discover
    python scripts/validate_tech_stack.py page.md --tech Python --tech Elixir
"""

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv

from scout.contexts.detection.logger import log_tech_report, setup_detection_logger
from scout.contexts.detection.tech_stack import (
    DISCOVERY_THRESHOLD,
    TechCatalog,
    validate_tech_stack,
)
from scout.contexts.intake.page_data_structure import PageDocument
from scout.utils.report_formatter import Column, TableFormatter, format_confidence

load_dotenv()

app = typer.Typer(add_completion=False, help="Validate a page's tech stack.")


@app.command()
def main(
    page_path: Path = typer.Argument(..., help="Markdown page to validate"),
    catalog_path: Optional[Path] = typer.Option(
        None, "--catalog", help="Tech catalog YAML (default: SCOUT_TECH_CATALOG_PATH)"
    ),
    tech: Optional[List[str]] = typer.Option(
        None, "--tech", "-t", help="Validate against these names instead of a catalog"
    ),
    discover: bool = typer.Option(
        True, "--discover/--no-discover", help="Report undeclared technologies the page uses"
    ),
    threshold: float = typer.Option(
        DISCOVERY_THRESHOLD, "--threshold", help="Minimum confidence for discovered technologies"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Also write a detection log to this directory"
    ),
):
    """Validate declared technologies and show usage evidence."""
    if not page_path.exists():
        typer.secho(f"Page not found: {page_path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    page = PageDocument.from_file(page_path)
    catalog = TechCatalog.from_names(tech) if tech else TechCatalog.load(catalog_path)
    report = validate_tech_stack(page, catalog, threshold if discover else None)
    if log_dir is not None:
        setup_detection_logger(log_dir)
        log_tech_report(page.url, report)

    declared = page.declared_tech_stack
    typer.echo(f"Page: {page_path}")
    typer.echo(f"Declared: {', '.join(declared) if declared else '(none)'}")

    columns = [
        Column("Technology", 22),
        Column("Status", 13),
        Column("Conf", 7, ">"),
        Column("Mentions", 8, ">"),
        Column("Negated", 7, ">"),
        Column("Category", 14),
    ]
    table = TableFormatter(columns, total_width=80)
    table.add_section_header("TECH STACK VALIDATION").add_table_header().add_separator()
    for validation in report.technologies + report.discovered:
        table.add_row(
            [
                validation.name,
                validation.status,
                format_confidence(validation.confidence),
                validation.mentions,
                validation.negated_mentions,
                validation.category,
            ]
        )
    counts = report.status_counts()
    table.add_summary(", ".join(f"{n} {s}" for s, n in sorted(counts.items())) or "Nothing to report")
    typer.echo("")
    typer.echo(table.render())

    unknown = [v.name for v in report.technologies if not v.in_catalog]
    if unknown and not tech:
        typer.secho(f"\nNot in catalog: {', '.join(unknown)}", fg=typer.colors.YELLOW)

    if report.contradicted:
        typer.secho(
            f"\n! {len(report.contradicted)} declared technology(ies) only mentioned negatively",
            fg=typer.colors.RED,
        )
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
