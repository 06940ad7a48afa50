"""
Unit tests for the generic taxonomy scorer and the evidence aggregator.

Covers label selection, declaration handling, validation multipliers,
negation, tie-breaking and fallback behavior.
"""

import math

import pytest

from scout.contexts.detection.aggregator import EvidenceAggregator
from scout.contexts.detection.evidence import EvidenceBreakdown
from scout.contexts.detection.rules import build_taxonomy_rules, compile_keyword_pattern
from scout.contexts.detection.scorer import (
    MAX_MATCHES_PER_RULE,
    classify_taxonomy,
    scan_keywords,
    score_components,
    score_labels,
    select_label,
)
from scout.contexts.intake.page_data_structure import PageDocument
from scout.contexts.intake.page_parser import StructuralSignal, TextSegment

TUTORIAL_PAGE = """---
title: "Build a CLI in Python: a step-by-step tutorial"
description: In this tutorial you will learn how to package a command line tool.
---

## Prerequisites

You need a recent interpreter installed.

## Step 1: Create the project

1. Make a directory
2. Add a pyproject file

```bash
mkdir mycli
```

## Step 2: Write the code

```python
# entry point
def main():
    print("hello")
```
"""

TUTORIAL_BODY = """This tutorial walks step by step through a first deploy.

1. Clone the repo
2. Push it
"""


@pytest.fixture(scope="module")
def aggregator():
    return EvidenceAggregator()


@pytest.fixture(scope="module")
def content_rules(aggregator):
    return aggregator.rules["content_type"]


def page_with(frontmatter_yaml: str, body: str) -> PageDocument:
    return PageDocument.from_text(f"---\n{frontmatter_yaml}\n---\n\n{body}")


@pytest.mark.unit
class TestScanKeywords:
    """Tests for scan_keywords."""

    def test_position_weighting(self):
        pattern = compile_keyword_pattern(["django"])
        segments = [TextSegment("Django in production", "title"), TextSegment("Django", "body")]

        scan = scan_keywords(pattern, segments)

        assert scan.evidence == pytest.approx(0.1 * 5.0 + 0.1 * 1.0)
        assert scan.mentions == 2
        assert scan.negated_mentions == 0

    def test_negation_halves_evidence(self):
        pattern = compile_keyword_pattern(["django"])
        plain = scan_keywords(pattern, [TextSegment("We use Django daily", "body")])
        negated = scan_keywords(pattern, [TextSegment("We are migrating from Django", "body")])

        assert negated.evidence == pytest.approx(plain.evidence * 0.5)
        assert negated.negated_mentions == 1
        assert negated.affirmed_mentions == 0

    def test_no_pattern(self):
        assert scan_keywords(None, [TextSegment("anything", "body")]).evidence == 0.0


@pytest.mark.unit
def test_component_matches_are_capped(content_rules):
    code_rule = next(
        rule for rule in content_rules.get_label("tutorial").components if rule.kind == "code_block"
    )
    signals = [StructuralSignal(kind="code_block", language="python") for _ in range(5)]

    assert score_components([code_rule], signals) == pytest.approx(0.5 * MAX_MATCHES_PER_RULE)


@pytest.mark.unit
class TestSelection:
    """Tests for select_label tie-breaking."""

    def test_highest_confidence_wins(self, content_rules):
        breakdowns = {
            "guide": EvidenceBreakdown(keyword=0.3, source="keywords"),
            "article": EvidenceBreakdown(keyword=0.9, source="keywords"),
        }
        assert select_label(content_rules, breakdowns) == "article"

    def test_tie_goes_to_higher_priority_source(self, content_rules):
        breakdowns = {
            "tutorial": EvidenceBreakdown(keyword=0.5, source="keywords"),
            "article": EvidenceBreakdown(base=0.5, source="url"),
        }
        assert select_label(content_rules, breakdowns) == "article"

    def test_tie_goes_to_earlier_label(self, content_rules):
        breakdowns = {
            "article": EvidenceBreakdown(keyword=0.5, source="keywords"),
            "guide": EvidenceBreakdown(keyword=0.5, source="keywords"),
        }
        assert select_label(content_rules, breakdowns) == "guide"

    def test_nothing_to_select(self, content_rules):
        assert select_label(content_rules, {}) is None


@pytest.mark.unit
class TestClassifyTaxonomy:
    """Tests for classify_taxonomy with the packaged content type rules."""

    def test_tutorial_detected_from_content(self, content_rules):
        result = classify_taxonomy(content_rules, PageDocument.from_text(TUTORIAL_PAGE))

        assert result.label == "tutorial"
        assert not result.decisive
        assert result.breakdown.component > 0
        assert result.breakdown.keyword > 0
        assert result.confidence > result.candidates["documentation"].confidence

    def test_frontmatter_beats_conflicting_url(self, content_rules):
        page = page_with("content_type: tutorial\npermalink: /docs/install/", "Reference for the options.")

        result = classify_taxonomy(content_rules, page)

        assert page.url == "/docs/install/"
        assert result.label == "tutorial"
        assert result.decisive
        assert result.breakdown.source == "frontmatter"
        assert "documentation" in result.candidates

    def test_declaration_alone_is_below_corroborated(self, content_rules):
        bare = classify_taxonomy(content_rules, page_with("content_type: tutorial", "Hello world."))
        corroborated = classify_taxonomy(
            content_rules,
            page_with(
                "content_type: tutorial",
                "In this tutorial you will learn it step by step.\n\n"
                "1. Install\n2. Run\n\n```python\nprint(1)\n```\n",
            ),
        )

        assert bare.label == corroborated.label == "tutorial"
        assert bare.breakdown.multiplier == 1.0
        assert bare.confidence == pytest.approx(1 - math.exp(-0.5 * 0.8))
        assert corroborated.breakdown.multiplier == 1.2
        assert 0 < bare.confidence < corroborated.confidence

    def test_uncorroborated_layout_is_discounted(self, content_rules):
        page = page_with("layout: docs", TUTORIAL_BODY)

        breakdowns = score_labels(content_rules, page)

        assert breakdowns["documentation"].source == "layout"
        assert breakdowns["documentation"].multiplier == 0.8
        assert breakdowns["documentation"].base == pytest.approx(0.7 * 0.8)
        assert breakdowns["tutorial"].source in ("components", "keywords")

    def test_corroborated_layout_is_boosted(self, content_rules):
        page = page_with("layout: tutorial", TUTORIAL_BODY)

        result = classify_taxonomy(content_rules, page)

        assert result.label == "tutorial"
        assert result.breakdown.source == "layout"
        assert result.breakdown.base == pytest.approx(0.7 * 1.2)

    def test_alias_declaration(self, content_rules):
        result = classify_taxonomy(content_rules, page_with("type: case-study", "Plain text."))

        assert result.label == "case_study"
        assert result.decisive

    def test_declared_default_label(self, content_rules):
        result = classify_taxonomy(content_rules, page_with("content_type: general", "Plain text."))

        assert result.label == "general"
        assert result.decisive
        assert result.breakdown.source == "frontmatter"
        assert result.breakdown.base == pytest.approx(0.8)

    def test_unknown_declaration_is_ignored(self, content_rules):
        result = classify_taxonomy(content_rules, page_with("content_type: podcast", ""))

        assert result.label == "general"
        assert not result.decisive
        assert result.is_fallback

    def test_deterministic(self, content_rules):
        first = classify_taxonomy(content_rules, PageDocument.from_text(TUTORIAL_PAGE))
        second = classify_taxonomy(content_rules, PageDocument.from_text(TUTORIAL_PAGE))

        assert first.label == second.label
        assert first.breakdown == second.breakdown


@pytest.mark.unit
class TestCustomRules:
    """Generic scorer on a custom rules table."""

    def test_same_scorer_serves_any_taxonomy(self):
        rules = build_taxonomy_rules(
            {
                "mood": {
                    "output_key": "mood",
                    "default": "neutral",
                    "labels": {
                        "happy": {"keywords": ["great", "love"]},
                        "grumpy": {"keywords": ["broken", "hate"]},
                    },
                }
            }
        )["mood"]
        page = PageDocument.from_text("I hate it when builds are broken. Still love the docs.")

        result = classify_taxonomy(rules, page)

        assert result.label == "grumpy"
        assert result.output_key == "mood"
        assert set(result.candidates) == {"happy", "grumpy"}


@pytest.mark.unit
class TestEvidenceAggregator:
    """Tests for EvidenceAggregator.classify."""

    def test_zero_signals_give_defaults(self, aggregator):
        classification = aggregator.classify(PageDocument.from_text(""))

        assert classification.label("content_type") == "general"
        assert classification.label("technical_level") == "intermediate"
        assert classification.label("journey_stage") == "awareness"
        assert classification.label("lead_type") == "subscriber"
        for result in classification.results.values():
            assert result.breakdown.source == "default"
            assert result.confidence == pytest.approx(1 - math.exp(-0.05))
        assert classification.errors == {}
        assert classification.confidence("content_type") == pytest.approx(1 - math.exp(-0.05))
        assert classification.confidence("mood") == 0.0

    def test_output_schema(self, aggregator):
        output = aggregator.classify(PageDocument.from_text(TUTORIAL_PAGE)).to_dict()

        assert set(output) == {"contentType", "technicalLevel", "journeyStage", "leadType"}
        for entry in output.values():
            assert set(entry) == {"label", "confidence", "source", "evidenceBreakdown"}
            assert 0 < entry["confidence"] < 1
            assert all(isinstance(v, float) for v in entry["evidenceBreakdown"].values())
        assert output["contentType"]["label"] == "tutorial"

    def test_failing_taxonomy_falls_back(self, aggregator, monkeypatch):
        from scout.contexts.detection import aggregator as aggregator_module

        real_classify = aggregator_module.classify_taxonomy

        def flaky(taxonomy, page):
            if taxonomy.name == "journey_stage":
                raise RuntimeError("boom")
            return real_classify(taxonomy, page)

        monkeypatch.setattr(aggregator_module, "classify_taxonomy", flaky)

        classification = aggregator.classify(PageDocument.from_text(TUTORIAL_PAGE))

        assert classification.label("journey_stage") == "awareness"
        assert classification.get("journey_stage").is_fallback
        assert "boom" in classification.errors["journey_stage"]
        assert classification.label("content_type") == "tutorial"

    def test_classify_record(self, aggregator):
        record = {
            "frontmatter": {"title": "Deploying a web app step by step", "content_type": "tutorial"},
            "structuralSignals": [
                {"type": "heading", "text": "Step 1: Install", "level": 2},
                {"type": "code_block", "language": "python"},
                {"type": "table", "headers": ["Option", "Default"]},
            ],
            "bodyText": "First you install it.\n\nThen you run it.",
            "declaredTechStack": ["Python"],
        }

        output = aggregator.classify_record(record)

        assert output["contentType"]["label"] == "tutorial"
        assert output["contentType"]["source"] == "frontmatter"
        assert output["contentType"]["evidenceBreakdown"]["multiplier"] == 1.2
