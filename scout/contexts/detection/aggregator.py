"""
Evidence aggregator for the Detection context.

Runs the generic scorer over every taxonomy rules table and collects the
results into one PageClassification. Classification always produces an
answer: a taxonomy whose scoring raises falls back to its default label.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from scout.contexts.detection.logger import log_taxonomy_failure, log_taxonomy_result
from scout.contexts.detection.rules import TaxonomyRules, load_taxonomy_rules
from scout.contexts.detection.scorer import TaxonomyResult, classify_taxonomy, fallback_result
from scout.contexts.intake.page_data_structure import PageDocument


@dataclass
class PageClassification:
    """
    Classification of one page across all taxonomies.

    Attributes:
        url: Page URL
        results: Taxonomy name -> TaxonomyResult, in rules table order
        errors: Taxonomy name -> error message for taxonomies that fell back
                because scoring raised
    """

    url: str
    results: dict[str, TaxonomyResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    def get(self, taxonomy: str) -> Optional[TaxonomyResult]:
        return self.results.get(taxonomy)

    def label(self, taxonomy: str) -> Optional[str]:
        result = self.results.get(taxonomy)
        return result.label if result else None

    def confidence(self, taxonomy: str) -> float:
        result = self.results.get(taxonomy)
        return result.confidence if result else 0.0

    def to_dict(self) -> dict:
        """Published form keyed by output key (contentType, technicalLevel, ...)."""
        return {result.output_key: result.to_dict() for result in self.results.values()}


class EvidenceAggregator:
    """
    Classifies pages across every configured taxonomy.

    Rules are loaded once at construction. Pass a rules dict to classify
    with custom tables, or a path to load them from a different YAML file.

    Example:
        aggregator = EvidenceAggregator()
        classification = aggregator.classify(PageDocument.from_file(path))
        classification.label("content_type")  # "tutorial"
    """

    def __init__(
        self,
        rules: Optional[dict[str, TaxonomyRules]] = None,
        rules_path: Optional[Union[str, Path]] = None,
    ):
        self.rules = rules if rules is not None else load_taxonomy_rules(rules_path)

    @property
    def taxonomies(self) -> list[str]:
        return list(self.rules)

    def classify_taxonomy(self, taxonomy: str, page: PageDocument) -> TaxonomyResult:
        """
        Classify a page along one named taxonomy.

        Raises:
            KeyError: If the taxonomy is not configured
        """
        return classify_taxonomy(self.rules[taxonomy], page)

    def classify(self, page: PageDocument) -> PageClassification:
        """
        Classify a page across all taxonomies.

        Args:
            page: Parsed page

        Returns:
            PageClassification with one result per taxonomy
        """
        classification = PageClassification(url=page.url)

        for name, taxonomy in self.rules.items():
            try:
                result = classify_taxonomy(taxonomy, page)
            except Exception as e:
                log_taxonomy_failure(page.url, name, e)
                classification.errors[name] = str(e)
                result = fallback_result(taxonomy)
            log_taxonomy_result(page.url, result)
            classification.results[name] = result

        return classification

    def classify_record(self, record: dict) -> dict:
        """
        Classify an extracted document record and return the published form.

        Args:
            record: {frontmatter, structuralSignals, bodyText, declaredTechStack}

        Returns:
            Output key -> {label, confidence, source, evidenceBreakdown}
        """
        return self.classify(PageDocument.from_record(record)).to_dict()

    def fallback_classification(self, url: str) -> PageClassification:
        """Default labels for every taxonomy."""
        return PageClassification(
            url=url,
            results={name: fallback_result(taxonomy) for name, taxonomy in self.rules.items()},
        )
