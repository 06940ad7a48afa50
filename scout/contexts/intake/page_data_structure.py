"""
Page data structure for the Intake context.

Provides PageDocument, a parsed Jekyll page with structured access methods
for the Detection context.
"""

import re
import warnings as warnings_module
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from scout.contexts.intake.page_parser import (
    HEADING_POSITIONS,
    ParsedPageData,
    StructuralSignal,
    TextSegment,
    clean_inline_text,
    frontmatter_segments,
    parse_page_file,
    parse_page_text,
)
from scout.contexts.intake.page_urls import (
    DEFAULT_PERMALINK_STYLE,
    derive_page_url,
    relative_to_site,
)

# Frontmatter fields that declare a page's technology stack
DECLARED_STACK_FIELDS = ("tech_stack", "tools_stack")

# Reading speed used for reading time estimates
WORDS_PER_MINUTE = 200

# Segment positions that hold body prose (excludes title/hero frontmatter text)
BODY_POSITIONS = {"hero", "h2", "h3", "h4", "h5", "h6", "first_paragraph", "body"}


def flatten_stack_declaration(value: Any) -> list[str]:
    """
    Flatten a tech stack declaration into a list of technology names.

    Accepts the shapes used across the site's content:
    - list of strings: [Python, Django]
    - comma-separated string: "Python, Django"
    - project config mapping: {languages: [...], frameworks: [...],
      dependencies: [{name: ..., version: ...}], ...}

    Args:
        value: Raw frontmatter value

    Returns:
        Technology names in declaration order (may contain duplicates)
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, dict):
        names = []
        for item in value.values():
            names.extend(flatten_stack_declaration(item))
        return names
    if isinstance(value, (list, tuple)):
        names = []
        for item in value:
            if isinstance(item, dict):
                # Dependency entries: {name: ..., version: ...}
                if item.get("name"):
                    names.append(str(item["name"]).strip())
            else:
                names.extend(flatten_stack_declaration(item))
        return names
    return [str(value).strip()]


@dataclass
class PageDocument:
    """
    Parsed Jekyll page with structured access methods.

    This class provides the minimal API needed by the Detection context
    to score evidence about a page.

    Factory methods:
        from_text(text) - Parse raw page text
        from_file(path) - Load from file (derives URL from path relative to site root)
        from_record(record) - Build from an already-extracted document record
    """

    # Raw content
    raw_text: str
    frontmatter: dict[str, Any]
    body: str

    # Extracted signals
    signals: list[StructuralSignal] = field(default_factory=list)
    segments: list[TextSegment] = field(default_factory=list)

    # Location
    url: str = "/"
    source_path: Optional[Path] = None

    warnings: list[str] = field(default_factory=list)

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_parsed(
        cls,
        parsed: ParsedPageData,
        url: Optional[str] = None,
        source_path: Optional[Path] = None,
        relative_path: Optional[Path] = None,
        permalink_style: str = DEFAULT_PERMALINK_STYLE,
    ) -> "PageDocument":
        """Build a PageDocument from parser output, deriving the URL if needed."""
        if url is None:
            url = derive_page_url(relative_path or "index.md", parsed.frontmatter, permalink_style)

        return cls(
            raw_text=parsed.raw_text,
            frontmatter=parsed.frontmatter,
            body=parsed.body,
            signals=parsed.signals,
            segments=parsed.segments,
            url=url,
            source_path=source_path,
            warnings=list(parsed.warnings),
        )

    @classmethod
    def from_text(
        cls,
        text: str,
        url: Optional[str] = None,
        source_path: Optional[Path] = None,
    ) -> "PageDocument":
        """
        Parse page text and create a PageDocument.

        Args:
            text: Raw page content (frontmatter + markdown)
            url: Page URL. Defaults to the frontmatter permalink, else the
                 URL derived from source_path, else "/".
            source_path: Optional path the text was read from

        Returns:
            PageDocument instance
        """
        parsed = parse_page_text(text)

        # Surface parser warnings
        for warning in parsed.warnings:
            warnings_module.warn(warning, stacklevel=2)

        if source_path is not None:
            source_path = Path(source_path)
            relative_path = Path(source_path.name)
        else:
            relative_path = None
        return cls.from_parsed(
            parsed, url=url, source_path=source_path, relative_path=relative_path
        )

    @classmethod
    def from_file(
        cls,
        file_path: Path,
        site_root: Optional[Path] = None,
        permalink_style: str = DEFAULT_PERMALINK_STYLE,
    ) -> "PageDocument":
        """
        Parse a page file and create a PageDocument.

        Args:
            file_path: Path to markdown file
            site_root: Jekyll source root; the URL is derived from the path
                       relative to it (defaults to the file's directory)
            permalink_style: Site `permalink` setting used for the URL

        Returns:
            PageDocument instance

        Raises:
            ValueError: If file_path is outside site_root
        """
        file_path = Path(file_path)
        parsed = parse_page_file(file_path)

        for warning in parsed.warnings:
            warnings_module.warn(f"{file_path}: {warning}", stacklevel=2)

        if site_root is not None:
            relative_path = relative_to_site(file_path, site_root)
        else:
            relative_path = Path(file_path.name)

        return cls.from_parsed(
            parsed,
            source_path=file_path,
            relative_path=relative_path,
            permalink_style=permalink_style,
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "PageDocument":
        """
        Create a PageDocument from an already-extracted document record.

        Used when another tool (e.g., a Jekyll plugin) has done the
        extraction. Record shape:

            {
                "frontmatter": {...},
                "structuralSignals": [{"type": "heading", "text": "...", "level": 2},
                                      {"type": "code_block", "language": "python"},
                                      {"type": "table", "headers": [...]}],
                "bodyText": "...",
                "declaredTechStack": ["Python", ...],
                "url": "/optional/"
            }

        bodyText is split into paragraphs on blank lines. declaredTechStack
        is used only when the frontmatter declares no stack of its own.

        Args:
            record: Document record mapping

        Returns:
            PageDocument instance
        """
        frontmatter = dict(record.get("frontmatter") or {})
        declared = record.get("declaredTechStack")
        if declared and not any(frontmatter.get(f) for f in DECLARED_STACK_FIELDS):
            frontmatter[DECLARED_STACK_FIELDS[0]] = list(declared)

        signals = []
        for raw in record.get("structuralSignals") or []:
            kind = raw.get("type") or raw.get("kind")
            if not kind:
                continue
            level = raw.get("level")
            headers = tuple(str(h) for h in raw.get("headers") or ())
            text = raw.get("text") or raw.get("name") or " ".join(headers)
            language = raw.get("language")
            signals.append(
                StructuralSignal(
                    kind=kind,
                    text=str(text),
                    position=HEADING_POSITIONS.get(level, "body") if kind == "heading" else "body",
                    level=level,
                    language=str(language).lower() if language else None,
                    headers=headers,
                )
            )

        body = record.get("bodyText") or ""
        segments = frontmatter_segments(frontmatter)
        segments.extend(
            TextSegment(text=s.text, position=s.position)
            for s in signals
            if s.kind == "heading" and s.text
        )
        paragraphs = [p for p in (clean_inline_text(p) for p in re.split(r"\n\s*\n", body)) if p]
        for i, paragraph in enumerate(paragraphs):
            position = "first_paragraph" if i == 0 else "body"
            segments.append(TextSegment(text=paragraph, position=position))

        return cls(
            raw_text=body,
            frontmatter=frontmatter,
            body=body,
            signals=signals,
            segments=segments,
            url=record.get("url") or derive_page_url("index.md", frontmatter),
        )

    # =========================================================================
    # PUBLIC API METHODS
    # =========================================================================

    @property
    def title(self) -> str:
        """Frontmatter title, falling back to the first H1 heading."""
        title = self.frontmatter.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        for signal in self.get_signals("heading"):
            if signal.level == 1:
                return signal.text
        return ""

    @property
    def layout(self) -> Optional[str]:
        layout = self.frontmatter.get("layout")
        return str(layout).strip().lower() if layout else None

    @property
    def declared_tech_stack(self) -> list[str]:
        """
        Technologies declared in tech_stack / tools_stack, deduplicated
        case-insensitively in declaration order.
        """
        names = []
        seen = set()
        for field_name in DECLARED_STACK_FIELDS:
            for name in flatten_stack_declaration(self.frontmatter.get(field_name)):
                key = name.lower()
                if name and key not in seen:
                    seen.add(key)
                    names.append(name)
        return names

    @property
    def body_text(self) -> str:
        """Body prose (headings and paragraphs) joined with blank lines."""
        return "\n\n".join(s.text for s in self.get_segments(BODY_POSITIONS))

    @property
    def word_count(self) -> int:
        return len(re.findall(r"\b\w+\b", self.body_text))

    @property
    def reading_time_minutes(self) -> int:
        """Estimated reading time, never less than one minute."""
        return max(1, round(self.word_count / WORDS_PER_MINUTE))

    def get_signals(self, kind: Optional[str] = None) -> list[StructuralSignal]:
        """
        Get structural signals, optionally filtered by kind.

        Args:
            kind: Signal kind (e.g., "heading", "code_block"); None for all
        """
        if kind is None:
            return list(self.signals)
        return [s for s in self.signals if s.kind == kind]

    def get_segments(self, positions: Optional[set[str]] = None) -> list[TextSegment]:
        """
        Get text segments, optionally filtered by position.

        Args:
            positions: Positions to keep (e.g., {"title", "hero"}); None for all
        """
        if positions is None:
            return list(self.segments)
        return [s for s in self.segments if s.position in positions]
