"""
Text table formatting for the CLI scripts.

Prints classification results, tech stack validations and label
distributions with aligned columns.
"""

from typing import Any, Iterable, List


class Column:
    """Column definition: header name, width and alignment ('<', '>' or '^')."""

    def __init__(self, name: str, width: int, align: str = "<"):
        self.name = name
        self.width = width
        self.align = align

    def format_header(self) -> str:
        return f"{self.name:{self.align}{self.width}}"

    def format_value(self, value: Any) -> str:
        """Format a cell, truncating strings that overflow the column."""
        if isinstance(value, str) and len(value) > self.width:
            value = value[: max(self.width - 3, 0)] + "..."
        return f"{value:{self.align}{self.width}}"


class TableFormatter:
    """
    Builder for text tables with aligned columns.

    Every add_* method returns the formatter so calls can be chained:

        TableFormatter(columns).add_section_header("CLASSIFICATION").add_table_header().render()
    """

    def __init__(self, columns: List[Column], total_width: int = 100):
        self.columns = columns
        self.total_width = total_width
        self.lines: List[str] = []

    def _join(self, cells: Iterable[str]) -> str:
        return " ".join(cells)

    def add_section_header(self, title: str) -> "TableFormatter":
        rule = "=" * self.total_width
        self.lines.extend([rule, title, rule])
        return self

    def add_table_header(self) -> "TableFormatter":
        self.lines.append(self._join(col.format_header() for col in self.columns))
        return self

    def add_separator(self, char: str = "-") -> "TableFormatter":
        self.lines.append(char * self.total_width)
        return self

    def add_row(self, values: List[Any]) -> "TableFormatter":
        """
        Add a data row.

        Raises:
            ValueError: If the number of values doesn't match the columns
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        self.lines.append(self._join(col.format_value(v) for col, v in zip(self.columns, values)))
        return self

    def add_rows(self, rows: Iterable[List[Any]]) -> "TableFormatter":
        for row in rows:
            self.add_row(row)
        return self

    def add_summary(self, text: str) -> "TableFormatter":
        self.lines.append(f"\n{text}")
        return self

    def render(self) -> str:
        return "\n".join(self.lines)


def format_confidence(confidence: float, decimal_places: int = 1) -> str:
    """Format a confidence in [0, 1) as a percentage string (e.g., "63.2%")."""
    return f"{confidence * 100:.{decimal_places}f}%"


def format_evidence(value: float) -> str:
    """Format an evidence value with two decimals (e.g., "0.96")."""
    return f"{value:.2f}"


def breakdown_cells(breakdown) -> List[str]:
    """
    Cells for an evidence breakdown: source, base, component, keyword.

    Args:
        breakdown: EvidenceBreakdown (anything with those four attributes)
    """
    return [
        breakdown.source,
        format_evidence(breakdown.base),
        format_evidence(breakdown.component),
        format_evidence(breakdown.keyword),
    ]
