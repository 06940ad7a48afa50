"""
Evidence model for the Detection context.

Every classification decision is expressed as non-negative evidence built
from three independent sources and converted to a bounded confidence:

    base_evidence      = declaration weight x validation multiplier
    component_evidence = sum(component weight x position weight)
    keyword_evidence   = sum(keyword weight x position weight x context multiplier)

    total_evidence = sqrt(base^2 + component^2 + keyword^2)
    confidence     = 1 - exp(-0.5 * total_evidence)

The constants below are the scoring contract; change them only together
with the tests that pin them.
"""

import math
from dataclasses import dataclass
from typing import Optional

# =============================================================================
# POSITION WEIGHTS (where a signal appears on the page)
# =============================================================================

POSITION_WEIGHTS = {
    "title": 5.0,
    "hero": 4.0,
    "h2": 3.0,
    "h3": 2.0,
    "h4": 1.5,
    "h5": 1.5,
    "h6": 1.5,
    "first_paragraph": 1.5,
    "body": 1.0,
    "code_comment": 0.5,
}

# =============================================================================
# SOURCE WEIGHTS (how trustworthy a kind of signal is)
# =============================================================================

# Declarations: explicit statements of a label
DECLARATION_WEIGHTS = {
    "frontmatter": 0.8,
    "layout": 0.7,
    "url": 0.5,
}

# Structural and rich components found in the body
COMPONENT_WEIGHTS = {
    "code_block": 0.5,
    "heading": 0.4,
    "table": 0.3,
    "ordered_list": 0.3,
    "chip": 0.3,
    "callout": 0.2,
}

# A single keyword occurrence in prose
KEYWORD_WEIGHT = 0.1

# =============================================================================
# MULTIPLIERS
# =============================================================================

CORROBORATED_MULTIPLIER = 1.2
NEUTRAL_MULTIPLIER = 1.0
CONTRADICTED_MULTIPLIER = 0.8
NEGATED_MULTIPLIER = 0.5

# Evidence assigned to a taxonomy's default label when nothing matched
FALLBACK_EVIDENCE = 0.1

# Declaration sources ranked for tie-breaking (lower wins)
SOURCE_PRIORITY = {
    "frontmatter": 0,
    "layout": 1,
    "url": 2,
    "components": 3,
    "keywords": 4,
    "default": 5,
}


def position_weight(position: str) -> float:
    """
    Weight of a page position. Unknown positions count as body text.

    Args:
        position: Position name (e.g., "title", "h2", "code_comment")
    """
    return POSITION_WEIGHTS.get(position, POSITION_WEIGHTS["body"])


def combine_evidence(*values: float) -> float:
    """
    Combine independent evidence values by Euclidean norm.

    The result is never smaller than the largest input, and adding a source
    can only increase it.

    Args:
        *values: Non-negative evidence values

    Returns:
        sqrt(sum of squares)

    Raises:
        ValueError: If any value is negative
    """
    for value in values:
        if value < 0:
            raise ValueError(f"Evidence must be non-negative, got {value}")
    return math.sqrt(sum(v * v for v in values))


def evidence_to_confidence(evidence: float) -> float:
    """
    Convert evidence to a confidence in [0, 1).

    Strictly increasing and saturating: 0 evidence gives 0 confidence,
    and confidence approaches but never reaches 1.

    Args:
        evidence: Non-negative evidence

    Raises:
        ValueError: If evidence is negative
    """
    if evidence < 0:
        raise ValueError(f"Evidence must be non-negative, got {evidence}")
    return 1.0 - math.exp(-0.5 * evidence)


@dataclass(frozen=True)
class EvidenceBreakdown:
    """
    The evidence behind one label decision.

    Attributes:
        base: Declaration evidence after the validation multiplier
        component: Structural component evidence
        keyword: Keyword evidence
        source: Strongest declaration source ("frontmatter", "layout", "url"),
                or "components"/"keywords" when nothing declared the label,
                or "default" for fallback labels
        multiplier: Validation multiplier applied to the base evidence
    """

    base: float = 0.0
    component: float = 0.0
    keyword: float = 0.0
    source: str = "default"
    multiplier: float = NEUTRAL_MULTIPLIER

    @property
    def total(self) -> float:
        return combine_evidence(self.base, self.component, self.keyword)

    @property
    def confidence(self) -> float:
        return evidence_to_confidence(self.total)

    @property
    def priority(self) -> int:
        return SOURCE_PRIORITY.get(self.source, SOURCE_PRIORITY["default"])

    @classmethod
    def fallback(cls) -> "EvidenceBreakdown":
        """Minimal evidence for a default label."""
        return cls(base=FALLBACK_EVIDENCE, source="default")

    def to_dict(self) -> dict:
        return {
            "base": round(self.base, 4),
            "component": round(self.component, 4),
            "keyword": round(self.keyword, 4),
            "total": round(self.total, 4),
            "multiplier": self.multiplier,
            "source": self.source,
        }


def strongest_source(declarations: dict[str, float]) -> Optional[str]:
    """
    Pick the declaration source with the highest weight.

    Args:
        declarations: Source name -> declaration weight

    Returns:
        Source name, or None when nothing was declared
    """
    if not declarations:
        return None
    return max(declarations, key=lambda s: (declarations[s], -SOURCE_PRIORITY.get(s, 99)))
