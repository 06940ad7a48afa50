#!/usr/bin/env python3
"""
Classify a single page and show the evidence behind each label.

Usage:
    python scripts/classify_page.py path/to/_posts/2025-01-02-hello.md --site-root path/to/site
    python scripts/classify_page.py page.md --json
"""

import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from scout.contexts.intake.page_data_structure import PageDocument
from scout.contexts.intake.page_urls import DEFAULT_PERMALINK_STYLE, relative_to_site
from scout.contexts.publishing.engine import ContextEngine
from scout.utils.report_formatter import Column, TableFormatter, breakdown_cells, format_confidence

load_dotenv()

app = typer.Typer(add_completion=False, help="Classify a single page.")


@app.command()
def main(
    page_path: Path = typer.Argument(..., help="Markdown page to classify"),
    site_root: Optional[Path] = typer.Option(
        None, "--site-root", "-s", help="Jekyll source root (URL and _scout.yml come from here)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the published context as JSON"),
    candidates: bool = typer.Option(
        False, "--candidates", "-c", help="Show every label that had evidence"
    ),
):
    """Classify a page and display its context."""
    if not page_path.exists():
        typer.secho(f"Page not found: {page_path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if site_root is not None:
        try:
            relative_to_site(page_path, site_root)
        except ValueError as e:
            typer.secho(str(e), fg=typer.colors.RED, err=True)
            raise typer.Exit(1)

    engine = ContextEngine.for_site(site_root) if site_root else ContextEngine()
    page = PageDocument.from_file(
        page_path,
        site_root=site_root,
        permalink_style=engine.site.get("permalink") or DEFAULT_PERMALINK_STYLE,
    )
    context = engine.build_context(page)

    if as_json:
        typer.echo(json.dumps({context.url: context.to_dict()}, indent=2, ensure_ascii=False))
        return

    typer.echo(f"Page: {page_path}")
    typer.echo(f"URL: {context.url}")
    typer.echo(f"Navigation: {context.navigation.variant} (rule: {context.navigation.rule})")
    typer.echo(
        f"Words: {context.dynamic['wordCount']}, "
        f"reading time: {context.dynamic['readingTimeMinutes']} min"
    )

    columns = [
        Column("Taxonomy", 16),
        Column("Label", 18),
        Column("Conf", 7, ">"),
        Column("Source", 11),
        Column("Base", 6, ">"),
        Column("Comp", 6, ">"),
        Column("Keyword", 7, ">"),
    ]
    table = TableFormatter(columns, total_width=80)
    table.add_section_header("CLASSIFICATION").add_table_header().add_separator()
    for result in context.classification.results.values():
        table.add_row(
            [result.output_key, result.label, format_confidence(result.confidence)]
            + breakdown_cells(result.breakdown)
        )
        if candidates:
            table.add_rows(
                ["", f"  {name}", format_confidence(candidate.confidence)] + breakdown_cells(candidate)
                for name, candidate in result.candidates.items()
                if name != result.label
            )
    typer.echo("")
    typer.echo(table.render())

    report = context.tech_stack
    if report.technologies or report.discovered:
        tech_table = TableFormatter(
            [Column("Technology", 24), Column("Status", 13), Column("Conf", 7, ">"), Column("Catalog", 8)],
            total_width=80,
        )
        tech_table.add_section_header("TECH STACK").add_table_header().add_separator()
        for validation in report.technologies + report.discovered:
            tech_table.add_row(
                [
                    validation.name,
                    validation.status,
                    format_confidence(validation.confidence),
                    "yes" if validation.in_catalog else "no",
                ]
            )
        typer.echo("")
        typer.echo(tech_table.render())

    if context.warnings:
        typer.echo("\n=== Warnings ===")
        for w in context.warnings:
            typer.echo(f"  ! {w}")

    if context.fallback:
        typer.secho(f"\nFallback context used: {context.error}", fg=typer.colors.YELLOW)
    else:
        typer.secho("\n✓ Classification complete", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
