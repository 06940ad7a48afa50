"""
Pattern matching for Jekyll page parsing.

Provides regex patterns used to split frontmatter from body and to detect
structural components in markdown bodies.

Pattern classes follow one convention throughout:
- Dataclasses with frozen=True for immutability
- Class-level constants for patterns
- Helper functions that use these patterns
"""

import re
from dataclasses import dataclass
from typing import Optional

# =============================================================================
# FRONTMATTER PATTERNS
# =============================================================================


@dataclass(frozen=True)
class FrontmatterPatterns:
    """
    Regex patterns for Jekyll YAML frontmatter.

    Jekyll only treats a file as a page when the first line is exactly `---`.
    """

    # Opening fence must be the very first line
    BLOCK: re.Pattern = re.compile(
        r"\A---[ \t]*\n(.*?)^(?:---|\.\.\.)[ \t]*$\n?", re.DOTALL | re.MULTILINE
    )

    # Opening fence with no closing fence anywhere
    UNCLOSED: re.Pattern = re.compile(r"\A---[ \t]*\n")


# =============================================================================
# MARKDOWN STRUCTURE PATTERNS
# =============================================================================


@dataclass(frozen=True)
class MarkdownStructurePatterns:
    """
    Regex patterns for structural markdown elements.

    All patterns are applied to single stripped lines by the page parser's
    line scanner.
    """

    # ATX headings: # H1 through ###### H6 (optional closing hashes)
    ATX_HEADING: re.Pattern = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")

    # Fenced code block opener/closer: ``` or ~~~ with optional language
    CODE_FENCE: re.Pattern = re.compile(r"^(`{3,}|~{3,})\s*([\w#+.-]*)")

    # Table row: starts and ends with a pipe
    TABLE_ROW: re.Pattern = re.compile(r"^\|(.+)\|$")

    # Table header separator: | --- | :---: | ---: |
    TABLE_SEPARATOR: re.Pattern = re.compile(r"^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?$")

    # Ordered list item: "1. Step"
    ORDERED_ITEM: re.Pattern = re.compile(r"^\d+[.)]\s+\S")


# =============================================================================
# LIQUID COMPONENT PATTERNS
# =============================================================================


@dataclass(frozen=True)
class LiquidComponentPatterns:
    """
    Regex patterns for theme components embedded as Liquid includes.

    The theme renders rich components through includes, e.g.:
        {% include chip.html name="Python" url="/tags/python/" %}
        {% include callout.html type="warning" content="..." %}
    """

    # Any include tag, capturing the include file name and raw parameters
    INCLUDE: re.Pattern = re.compile(r"\{%-?\s*include\s+([\w./-]+)\s*(.*?)-?%\}", re.DOTALL)

    # key="value" or key='value' include parameters
    PARAMETER: re.Pattern = re.compile(r"(\w+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s\"']+))")

    # Jekyll highlight blocks: {% highlight python %} ... {% endhighlight %}
    HIGHLIGHT_OPEN: re.Pattern = re.compile(r"^\{%-?\s*highlight\s+([\w#+.-]+).*?-?%\}$")
    HIGHLIGHT_CLOSE: re.Pattern = re.compile(r"^\{%-?\s*endhighlight\s*-?%\}$")

    # Liquid tags and output markup stripped from prose before keyword matching
    LIQUID_MARKUP: re.Pattern = re.compile(r"\{%.*?%\}|\{\{.*?\}\}", re.DOTALL)


# Include file stems that count as chips / callouts
CHIP_INCLUDES = ("chip", "tech-chip", "tag-chip", "chips")
CALLOUT_INCLUDES = ("callout", "alert", "admonition", "note")

# Parameter names that carry a chip's linked entity
CHIP_NAME_PARAMETERS = ("name", "text", "label", "tech", "tag")

# Comment prefixes recognized inside fenced code blocks
CODE_COMMENT_PREFIXES = ("#", "//", "--", ";", "%")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def parse_include_parameters(raw: str) -> dict[str, str]:
    """
    Parse Liquid include parameters into a dict.

    Args:
        raw: Parameter string (e.g., 'name="Python" url="/tags/python/"')

    Returns:
        Dict mapping parameter name to value
    """
    params = {}
    for match in LiquidComponentPatterns.PARAMETER.finditer(raw):
        key = match.group(1)
        value = next((g for g in match.groups()[1:] if g is not None), "")
        params[key] = value
    return params


def include_kind(include_name: str) -> Optional[str]:
    """
    Classify an include file name as "chip", "callout", or None.

    Args:
        include_name: Include path (e.g., "components/chip.html")

    Returns:
        Component kind or None for unrelated includes
    """
    stem = include_name.rsplit("/", 1)[-1].split(".", 1)[0].lower()
    if stem in CHIP_INCLUDES:
        return "chip"
    if stem in CALLOUT_INCLUDES:
        return "callout"
    return None


def extract_code_comment(line: str) -> Optional[str]:
    """
    Return the comment text of a code line, or None if it is not a comment.

    Shebangs are not comments.
    """
    stripped = line.strip()
    if stripped.startswith("#!"):
        return None
    for prefix in CODE_COMMENT_PREFIXES:
        if stripped.startswith(prefix):
            text = stripped[len(prefix) :].lstrip("/#-;% ").strip()
            return text or None
    return None


def split_table_cells(row: str) -> list[str]:
    """Split a pipe table row into stripped cell strings."""
    return [cell.strip() for cell in row.strip().strip("|").split("|")]
