"""
Generic evidence scorer for the Detection context.

Scores every label of a taxonomy rules table against one page and selects
the winner. The same functions serve all taxonomies; nothing here knows
what a "tutorial" or a "decision stage" is.

Selection order:
1. An explicit frontmatter declaration naming a known label is decisive.
2. Otherwise the label with the highest confidence wins; exact ties go to
   the label with the higher-priority declaration source
   (frontmatter > layout > url > components > keywords), then to the
   earlier label in the table.
3. With no evidence for any label, the taxonomy default is returned with
   fallback evidence.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from scout.contexts.detection.evidence import (
    COMPONENT_WEIGHTS,
    CONTRADICTED_MULTIPLIER,
    CORROBORATED_MULTIPLIER,
    DECLARATION_WEIGHTS,
    KEYWORD_WEIGHT,
    NEGATED_MULTIPLIER,
    NEUTRAL_MULTIPLIER,
    EvidenceBreakdown,
    position_weight,
    strongest_source,
)
from scout.contexts.detection.negation import is_negated
from scout.contexts.detection.rules import (
    ComponentRule,
    LabelRule,
    TaxonomyRules,
    normalize_label_value,
)
from scout.contexts.intake.page_data_structure import PageDocument
from scout.contexts.intake.page_parser import StructuralSignal, TextSegment

# Matches beyond this count add nothing for a single component rule
MAX_MATCHES_PER_RULE = 3


@dataclass(frozen=True)
class KeywordScan:
    """Result of scanning positioned text for a keyword pattern."""

    evidence: float = 0.0
    mentions: int = 0
    negated_mentions: int = 0

    @property
    def affirmed_mentions(self) -> int:
        return self.mentions - self.negated_mentions


@dataclass
class TaxonomyResult:
    """
    Classification of one page along one taxonomy.

    Attributes:
        taxonomy: Taxonomy name (e.g., "content_type")
        output_key: Published key (e.g., "contentType")
        label: Selected label
        breakdown: Evidence behind the selected label
        candidates: Evidence for every label that had any
        decisive: True when an explicit frontmatter declaration decided the label
    """

    taxonomy: str
    output_key: str
    label: str
    breakdown: EvidenceBreakdown
    candidates: dict[str, EvidenceBreakdown] = field(default_factory=dict)
    decisive: bool = False

    @property
    def confidence(self) -> float:
        return self.breakdown.confidence

    @property
    def is_fallback(self) -> bool:
        return self.breakdown.source == "default"

    def to_dict(self) -> dict:
        """Published form: {label, confidence, source, evidenceBreakdown}."""
        breakdown = self.breakdown.to_dict()
        source = breakdown.pop("source")
        return {
            "label": self.label,
            "confidence": round(self.confidence, 4),
            "source": source,
            "evidenceBreakdown": breakdown,
        }


def scan_keywords(pattern: Optional[re.Pattern], segments: Iterable[TextSegment]) -> KeywordScan:
    """
    Sum keyword evidence over positioned text segments.

    Each occurrence adds KEYWORD_WEIGHT x position weight, halved when a
    negation cue precedes it.

    Args:
        pattern: Compiled keyword pattern (None scores zero)
        segments: Text segments to scan

    Returns:
        KeywordScan with evidence and mention counts
    """
    if pattern is None:
        return KeywordScan()

    evidence = 0.0
    mentions = 0
    negated = 0
    for segment in segments:
        for match in pattern.finditer(segment.text):
            multiplier = NEUTRAL_MULTIPLIER
            if is_negated(segment.text, match.start()):
                multiplier = NEGATED_MULTIPLIER
                negated += 1
            mentions += 1
            evidence += KEYWORD_WEIGHT * position_weight(segment.position) * multiplier

    return KeywordScan(evidence=evidence, mentions=mentions, negated_mentions=negated)


def component_signal_evidence(signal: StructuralSignal) -> float:
    """Evidence of one matched component: kind weight x position weight."""
    return COMPONENT_WEIGHTS.get(signal.kind, 0.0) * position_weight(signal.position)


def score_components(rules: Iterable[ComponentRule], signals: list[StructuralSignal]) -> float:
    """
    Sum evidence of structural components matching a label's expectations.

    Args:
        rules: Expected components for the label
        signals: Structural signals found on the page

    Returns:
        Component evidence (each rule contributes at most MAX_MATCHES_PER_RULE matches)
    """
    total = 0.0
    for rule in rules:
        matched = [s for s in signals if rule.matches(s)][:MAX_MATCHES_PER_RULE]
        total += sum(component_signal_evidence(s) for s in matched)
    return total


def _declared_values(frontmatter: dict[str, Any], fields: Iterable[str]) -> list[Any]:
    """Collect values of the taxonomy's declaration fields (lists are flattened)."""
    values = []
    for field_name in fields:
        value = frontmatter.get(field_name)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            values.extend(v for v in value if v is not None)
        else:
            values.append(value)
    return values


def declaration_sources(
    label: LabelRule, taxonomy: TaxonomyRules, page: PageDocument
) -> dict[str, float]:
    """
    Find every source that explicitly declares a label.

    Args:
        label: Candidate label rules
        taxonomy: Taxonomy the label belongs to
        page: Page being classified

    Returns:
        Source name -> declaration weight (empty when nothing declares it)
    """
    sources = {}

    if any(label.declares(v) for v in _declared_values(page.frontmatter, taxonomy.frontmatter_fields)):
        sources["frontmatter"] = DECLARATION_WEIGHTS["frontmatter"]

    if page.layout and page.layout in label.layouts:
        sources["layout"] = DECLARATION_WEIGHTS["layout"]

    if any(pattern.search(page.url) for pattern in label.url_patterns):
        sources["url"] = DECLARATION_WEIGHTS["url"]

    return sources


def find_declared_label(taxonomy: TaxonomyRules, page: PageDocument) -> Optional[str]:
    """
    Return the label explicitly declared in frontmatter, if any.

    The taxonomy default counts as a known label so pages can opt into it
    (e.g., content_type: general). Unknown values are ignored.
    """
    for value in _declared_values(page.frontmatter, taxonomy.frontmatter_fields):
        for label in taxonomy.labels:
            if label.declares(value):
                return label.name
        if normalize_label_value(value) == normalize_label_value(taxonomy.default_label):
            return taxonomy.default_label
    return None


def score_labels(taxonomy: TaxonomyRules, page: PageDocument) -> dict[str, EvidenceBreakdown]:
    """
    Compute the evidence breakdown for every label with any evidence.

    The validation multiplier on declared labels is 1.2 when the label's own
    component or keyword evidence corroborates the declaration, 0.8 when it
    has none while a competing label does, and 1.0 otherwise.

    Returns:
        Label name -> EvidenceBreakdown, in table order
    """
    raw = {}
    for label in taxonomy.labels:
        declarations = declaration_sources(label, taxonomy, page)
        component = score_components(label.components, page.signals)
        keyword = scan_keywords(label.keyword_pattern, page.get_segments()).evidence
        raw[label.name] = (declarations, component, keyword)

    corroborated = {name for name, (_, c, k) in raw.items() if c > 0 or k > 0}

    breakdowns = {}
    for name, (declarations, component, keyword) in raw.items():
        source = strongest_source(declarations)

        if source is None:
            if component == 0 and keyword == 0:
                continue
            body_source = "components" if component >= keyword else "keywords"
            breakdowns[name] = EvidenceBreakdown(
                component=component, keyword=keyword, source=body_source
            )
            continue

        if name in corroborated:
            multiplier = CORROBORATED_MULTIPLIER
        elif corroborated:
            multiplier = CONTRADICTED_MULTIPLIER
        else:
            multiplier = NEUTRAL_MULTIPLIER

        breakdowns[name] = EvidenceBreakdown(
            base=declarations[source] * multiplier,
            component=component,
            keyword=keyword,
            source=source,
            multiplier=multiplier,
        )

    return breakdowns


def select_label(taxonomy: TaxonomyRules, breakdowns: dict[str, EvidenceBreakdown]) -> Optional[str]:
    """
    Pick the winning label: highest confidence, then source priority, then table order.
    """
    if not breakdowns:
        return None
    order = {name: i for i, name in enumerate(taxonomy.label_names())}
    return min(
        breakdowns,
        key=lambda name: (
            -breakdowns[name].confidence,
            breakdowns[name].priority,
            order.get(name, len(order)),
        ),
    )


def classify_taxonomy(taxonomy: TaxonomyRules, page: PageDocument) -> TaxonomyResult:
    """
    Classify a page along one taxonomy.

    Args:
        taxonomy: Rules table
        page: Page to classify

    Returns:
        TaxonomyResult (never raises for lack of evidence; falls back to the default label)
    """
    breakdowns = score_labels(taxonomy, page)

    declared = find_declared_label(taxonomy, page)
    if declared is not None:
        breakdown = breakdowns.get(declared)
        if breakdown is None:
            # Declared default label: no rules to corroborate it
            breakdown = EvidenceBreakdown(
                base=DECLARATION_WEIGHTS["frontmatter"], source="frontmatter"
            )
        return TaxonomyResult(
            taxonomy=taxonomy.name,
            output_key=taxonomy.output_key,
            label=declared,
            breakdown=breakdown,
            candidates=breakdowns,
            decisive=True,
        )

    winner = select_label(taxonomy, breakdowns)
    if winner is None:
        return fallback_result(taxonomy)

    return TaxonomyResult(
        taxonomy=taxonomy.name,
        output_key=taxonomy.output_key,
        label=winner,
        breakdown=breakdowns[winner],
        candidates=breakdowns,
    )


def fallback_result(taxonomy: TaxonomyRules) -> TaxonomyResult:
    """Default label with minimal evidence."""
    return TaxonomyResult(
        taxonomy=taxonomy.name,
        output_key=taxonomy.output_key,
        label=taxonomy.default_label,
        breakdown=EvidenceBreakdown.fallback(),
    )
