"""
Page parsing utilities for the Intake context.

Parses a Jekyll page (YAML frontmatter + markdown body) into raw structured
data: the frontmatter mapping, structural signals found in the body, and the
body text split into positioned segments. This module has no knowledge of
PageDocument - it returns ParsedPageData that PageDocument.from_text() uses
to construct instances.

Pattern follows the intake convention: parser produces data, data structure consumes it.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from scout.contexts.intake.normalizer import (
    preprocess_page_text,
    strip_inline_markdown,
    strip_liquid_markup,
)
from scout.contexts.intake.page_patterns import (
    CHIP_NAME_PARAMETERS,
    FrontmatterPatterns,
    LiquidComponentPatterns,
    MarkdownStructurePatterns,
    extract_code_comment,
    include_kind,
    parse_include_parameters,
    split_table_cells,
)

# Frontmatter fields read as hero text (rendered in the page hero block)
HERO_FIELDS = ("description", "excerpt", "subtitle", "summary")

# Heading level -> position name
HEADING_POSITIONS = {1: "hero", 2: "h2", 3: "h3", 4: "h4", 5: "h5", 6: "h6"}


@dataclass(frozen=True)
class StructuralSignal:
    """
    A structural component observed in a page body.

    kind is one of: heading, code_block, table, ordered_list, chip, callout.
    Only the fields relevant to the kind are populated.
    """

    kind: str
    text: str = ""
    position: str = "body"
    level: Optional[int] = None
    language: Optional[str] = None
    headers: tuple[str, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class TextSegment:
    """A run of plain text tagged with where it appears on the page."""

    text: str
    position: str


@dataclass
class ParsedPageData:
    """
    Raw parsed page data.

    This is the intermediate form between raw text and PageDocument.
    """

    raw_text: str
    frontmatter: dict[str, Any]
    body: str
    signals: list[StructuralSignal] = field(default_factory=list)
    segments: list[TextSegment] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str, list[str]]:
    """
    Split a page into its YAML frontmatter mapping and markdown body.

    A missing frontmatter block is not an error (plain markdown). A malformed
    block is reported as a warning and treated as empty.

    Args:
        text: Normalized page text

    Returns:
        Tuple of (frontmatter dict, body text, warnings list)
    """
    warnings = []
    match = FrontmatterPatterns.BLOCK.match(text)

    if not match:
        if FrontmatterPatterns.UNCLOSED.match(text):
            warnings.append("Frontmatter block is never closed; treating whole file as body")
        return {}, text, warnings

    raw_yaml = match.group(1)
    body = text[match.end() :]

    try:
        data = yaml.safe_load(raw_yaml) if raw_yaml.strip() else {}
    except yaml.YAMLError as e:
        warnings.append(f"Malformed frontmatter YAML: {e}")
        return {}, body, warnings

    if data is None:
        data = {}
    if not isinstance(data, dict):
        warnings.append(f"Frontmatter is a {type(data).__name__}, expected a mapping; ignoring it")
        return {}, body, warnings

    return data, body, warnings


def clean_inline_text(text: str) -> str:
    """Strip Liquid and inline markdown and collapse whitespace."""
    text = strip_liquid_markup(text)
    text = strip_inline_markdown(text)
    return re.sub(r"\s+", " ", text).strip()


def _strip_block_markers(line: str) -> str:
    """Remove list bullets, numbering and blockquote markers from a line."""
    line = re.sub(r"^(?:>\s*)+", "", line)
    line = re.sub(r"^(?:[*+-]|\d+[.)])\s+", "", line)
    return line


def _extract_includes(line: str, line_number: int) -> tuple[list[StructuralSignal], list[str]]:
    """
    Extract chip and callout components from Liquid includes on one line.

    Returns:
        Tuple of (signals, callout body texts)
    """
    signals = []
    callout_texts = []

    for match in LiquidComponentPatterns.INCLUDE.finditer(line):
        kind = include_kind(match.group(1))
        if kind is None:
            continue
        params = parse_include_parameters(match.group(2))

        if kind == "chip":
            name = next((params[p] for p in CHIP_NAME_PARAMETERS if params.get(p)), "")
            if name:
                signals.append(StructuralSignal(kind="chip", text=name.strip(), line=line_number))
        else:
            callout_type = params.get("type", "note").strip().lower()
            signals.append(StructuralSignal(kind="callout", text=callout_type, line=line_number))
            content = " ".join(params[k] for k in ("title", "content", "text") if params.get(k))
            if content:
                callout_texts.append(content)

    return signals, callout_texts


def extract_structure(body: str) -> tuple[list[StructuralSignal], list[TextSegment], list[str]]:
    """
    Scan a markdown body for structural signals and positioned text.

    Recognizes:
    - ATX headings (# through ######)
    - Fenced code blocks (``` or ~~~) and {% highlight %} blocks, with
      language and comment lines
    - Pipe tables (header row followed by a separator row)
    - Ordered lists
    - Chip and callout Liquid includes

    Paragraph text outside those blocks becomes body segments; the first
    paragraph gets its own position.

    Args:
        body: Markdown body (frontmatter already removed, text normalized)

    Returns:
        Tuple of (signals, segments, warnings)
    """
    patterns = MarkdownStructurePatterns
    signals: list[StructuralSignal] = []
    segments: list[TextSegment] = []
    warnings: list[str] = []

    paragraph: list[str] = []
    seen_first_paragraph = False
    in_ordered_list = False

    def flush_paragraph() -> None:
        nonlocal seen_first_paragraph
        if not paragraph:
            return
        text = clean_inline_text(" ".join(paragraph))
        paragraph.clear()
        if not text:
            return
        position = "body" if seen_first_paragraph else "first_paragraph"
        seen_first_paragraph = True
        segments.append(TextSegment(text=text, position=position))

    lines = body.split("\n")
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        line_number = i + 1

        # Fenced code block or Jekyll highlight block: consume through the close
        fence_match = patterns.CODE_FENCE.match(stripped)
        highlight_match = LiquidComponentPatterns.HIGHLIGHT_OPEN.match(stripped)
        if fence_match or highlight_match:
            flush_paragraph()
            in_ordered_list = False
            if fence_match:
                fence = fence_match.group(1)
                language = fence_match.group(2).lower() or None
            else:
                fence = None
                language = highlight_match.group(1).lower()
            comments = []
            i += 1
            closed = False
            while i < len(lines):
                code_line = lines[i].strip()
                if fence is None:
                    closed = bool(LiquidComponentPatterns.HIGHLIGHT_CLOSE.match(code_line))
                else:
                    closed = code_line.startswith(fence) and not code_line.strip(fence[0])
                if closed:
                    break
                comment = extract_code_comment(lines[i])
                if comment:
                    comments.append(comment)
                i += 1
            if not closed:
                warnings.append(f"Unclosed code fence opened at line {line_number}")
            signals.append(
                StructuralSignal(kind="code_block", language=language, line=line_number)
            )
            for comment in comments:
                segments.append(TextSegment(text=comment, position="code_comment"))
            i += 1
            continue

        heading_match = patterns.ATX_HEADING.match(stripped)
        if heading_match:
            flush_paragraph()
            in_ordered_list = False
            level = len(heading_match.group(1))
            text = clean_inline_text(heading_match.group(2))
            if text:
                position = HEADING_POSITIONS[level]
                signals.append(
                    StructuralSignal(
                        kind="heading", text=text, position=position, level=level, line=line_number
                    )
                )
                segments.append(TextSegment(text=text, position=position))
            i += 1
            continue

        # Table: header row immediately followed by a separator row
        if (
            patterns.TABLE_ROW.match(stripped)
            and i + 1 < len(lines)
            and patterns.TABLE_SEPARATOR.match(lines[i + 1].strip())
        ):
            flush_paragraph()
            in_ordered_list = False
            headers = tuple(clean_inline_text(c) for c in split_table_cells(stripped))
            signals.append(
                StructuralSignal(
                    kind="table", text=" ".join(headers), headers=headers, line=line_number
                )
            )
            i += 2
            cells = list(headers)
            while i < len(lines) and patterns.TABLE_ROW.match(lines[i].strip()):
                cells.extend(clean_inline_text(c) for c in split_table_cells(lines[i]))
                i += 1
            table_text = " ".join(c for c in cells if c)
            if table_text:
                segments.append(TextSegment(text=table_text, position="body"))
            continue

        if not stripped:
            flush_paragraph()
            i += 1
            continue

        include_signals, callout_texts = _extract_includes(stripped, line_number)
        signals.extend(include_signals)
        for callout_text in callout_texts:
            text = clean_inline_text(callout_text)
            if text:
                segments.append(TextSegment(text=text, position="body"))

        if patterns.ORDERED_ITEM.match(stripped):
            if not in_ordered_list:
                signals.append(StructuralSignal(kind="ordered_list", line=line_number))
                in_ordered_list = True
        elif not line.startswith((" ", "\t")):
            in_ordered_list = False

        paragraph.append(_strip_block_markers(stripped))
        i += 1

    flush_paragraph()
    return signals, segments, warnings


def frontmatter_segments(frontmatter: dict[str, Any]) -> list[TextSegment]:
    """
    Build title and hero segments from frontmatter fields.

    Args:
        frontmatter: Parsed frontmatter mapping

    Returns:
        Segments for the title and any hero fields that hold text
    """
    segments = []
    fields = [("title", "title")] + [(name, "hero") for name in HERO_FIELDS]

    for field_name, position in fields:
        value = frontmatter.get(field_name)
        if not isinstance(value, str):
            continue
        text = clean_inline_text(value)
        if text:
            segments.append(TextSegment(text=text, position=position))

    return segments


def parse_page_text(text: str) -> ParsedPageData:
    """
    Parse a Jekyll page into structured data.

    This is the main parsing function. It returns raw parsed data,
    not a PageDocument. Use PageDocument.from_text() to get a PageDocument.

    Args:
        text: Raw page file content

    Returns:
        ParsedPageData with frontmatter, signals, segments and warnings
    """
    normalized = preprocess_page_text(text)

    frontmatter, body, warnings = split_frontmatter(normalized)
    signals, body_segments, structure_warnings = extract_structure(body)
    warnings.extend(structure_warnings)

    return ParsedPageData(
        raw_text=text,
        frontmatter=frontmatter,
        body=body,
        signals=signals,
        segments=frontmatter_segments(frontmatter) + body_segments,
        warnings=warnings,
    )


def parse_page_file(file_path: Path) -> ParsedPageData:
    """
    Parse a page from file.

    Args:
        file_path: Path to markdown file

    Returns:
        ParsedPageData with all extracted information
    """
    text = Path(file_path).read_text(encoding="utf-8")
    return parse_page_text(text)
