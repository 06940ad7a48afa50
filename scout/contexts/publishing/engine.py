"""
Context engine for the Publishing context.

Assembles the unified context object a page's templates consume. The
context has four parts:

- static: facts about the site (title, domain, repository type)
- dynamic: facts about this page's location and size (URL, navigation
  variant, word count, reading time)
- semantic: what the page is about (taxonomy classifications, tech stack)
- target: who the page is for (lead type, journey stage, audience level)

Building a context never raises: a failure anywhere in detection is logged
and the page gets the fallback context (default labels everywhere).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from scout.contexts.detection.aggregator import EvidenceAggregator, PageClassification
from scout.contexts.detection.logger import log_tech_report
from scout.contexts.detection.navigation import (
    NavigationRules,
    NavigationVariant,
    load_navigation_rules,
    select_navigation_variant,
)
from scout.contexts.detection.rules import load_taxonomy_rules
from scout.contexts.detection.tech_stack import TechCatalog, TechStackReport, validate_tech_stack
from scout.contexts.intake.page_data_structure import PageDocument
from scout.contexts.publishing.config_resolver import load_engine_config
from scout.contexts.publishing.logger import log_context_failure, log_page_warnings

# Taxonomies surfaced in the target part: (context key, taxonomy name)
TARGET_TAXONOMIES = (
    ("leadType", "lead_type"),
    ("journeyStage", "journey_stage"),
    ("audienceLevel", "technical_level"),
)


@dataclass
class PageContext:
    """
    Unified context for one page.

    Attributes:
        url: Page URL
        classification: Per-taxonomy results
        tech_stack: Tech stack validation
        navigation: Selected navigation variant
        static: Site facts
        dynamic: Location and size facts
        fallback: True when detection failed and defaults were used
        error: Error message when fallback is True
        warnings: Parser warnings for the page
    """

    url: str
    classification: PageClassification
    tech_stack: TechStackReport
    navigation: NavigationVariant
    static: Dict[str, Any] = field(default_factory=dict)
    dynamic: Dict[str, Any] = field(default_factory=dict)
    fallback: bool = False
    error: Optional[str] = None
    warnings: list = field(default_factory=list)

    @property
    def semantic(self) -> Dict[str, Any]:
        return {
            "classification": self.classification.to_dict(),
            "techStack": self.tech_stack.to_dict(),
        }

    @property
    def target(self) -> Dict[str, Any]:
        target = {}
        for key, taxonomy in TARGET_TAXONOMIES:
            result = self.classification.get(taxonomy)
            if result is None:
                continue
            target[key] = result.label
            target[f"{key}Confidence"] = round(result.confidence, 4)
        return target

    def label(self, taxonomy: str) -> Optional[str]:
        return self.classification.label(taxonomy)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "static": self.static,
            "dynamic": self.dynamic,
            "semantic": self.semantic,
            "target": self.target,
            "fallback": self.fallback,
        }
        if self.error:
            data["error"] = self.error
        return data


class ContextEngine:
    """
    Builds page contexts from parsed pages.

    Rules tables are loaded once from the engine config, so one engine can
    classify a whole site.

    Example:
        engine = ContextEngine.for_site(site_root)
        context = engine.build_context(PageDocument.from_file(path, site_root))
        context.label("content_type")
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        aggregator: Optional[EvidenceAggregator] = None,
        catalog: Optional[TechCatalog] = None,
        navigation_rules: Optional[NavigationRules] = None,
    ):
        self.config = config if config is not None else load_engine_config()
        detection = self.config.get("detection", {})

        if aggregator is None:
            aggregator = EvidenceAggregator(
                rules=load_taxonomy_rules(detection.get("taxonomies_path"))
            )
        self.aggregator = aggregator
        self.catalog = catalog if catalog is not None else TechCatalog.load(
            detection.get("tech_catalog_path")
        )
        self.navigation_rules = (
            navigation_rules
            if navigation_rules is not None
            else load_navigation_rules(detection.get("navigation_path"))
        )
        self.discovery_threshold = detection.get("discovery_threshold", 0.15)

    @classmethod
    def for_site(cls, site_root: Path, overrides: Optional[Dict[str, Any]] = None) -> "ContextEngine":
        """Create an engine configured for a Jekyll site root."""
        return cls(config=load_engine_config(site_root=site_root, overrides=overrides))

    @property
    def site(self) -> Dict[str, Any]:
        return self.config.get("site", {})

    def static_context(self) -> Dict[str, Any]:
        return {
            "title": self.site.get("title", ""),
            "description": self.site.get("description", ""),
            "url": self.site.get("url", ""),
            "domain": self.site.get("domain", ""),
            "repositoryType": self.site.get("repository_type", ""),
        }

    def dynamic_context(self, page: PageDocument, navigation: NavigationVariant) -> Dict[str, Any]:
        return {
            "url": page.url,
            "sourcePath": str(page.source_path) if page.source_path else None,
            "title": page.title,
            "layout": page.layout,
            "navigation": navigation.to_dict(),
            "wordCount": page.word_count,
            "readingTimeMinutes": page.reading_time_minutes,
        }

    def build_context(self, page: PageDocument) -> PageContext:
        """
        Build the unified context for a page.

        Args:
            page: Parsed page

        Returns:
            PageContext (the fallback context if detection fails)
        """
        log_page_warnings(page.url, page.warnings)

        try:
            classification = self.aggregator.classify(page)
            tech_stack = validate_tech_stack(page, self.catalog, self.discovery_threshold)
            log_tech_report(page.url, tech_stack)
            navigation = select_navigation_variant(page.url, self.site, self.navigation_rules)
            dynamic = self.dynamic_context(page, navigation)
        except Exception as e:
            log_context_failure(page.url, e)
            return self.fallback_context(page.url, error=e, warnings=page.warnings)

        return PageContext(
            url=page.url,
            classification=classification,
            tech_stack=tech_stack,
            navigation=navigation,
            static=self.static_context(),
            dynamic=dynamic,
            warnings=list(page.warnings),
        )

    def fallback_context(
        self, url: str, error: Optional[Exception] = None, warnings: Optional[list] = None
    ) -> PageContext:
        """Context with default labels everywhere, used when detection fails."""
        navigation = NavigationVariant(
            variant=self.navigation_rules.default_variant, rule="default"
        )
        return PageContext(
            url=url,
            classification=self.aggregator.fallback_classification(url),
            tech_stack=TechStackReport(),
            navigation=navigation,
            static=self.static_context(),
            dynamic={
                "url": url,
                "sourcePath": None,
                "title": "",
                "layout": None,
                "navigation": navigation.to_dict(),
                "wordCount": 0,
                "readingTimeMinutes": 1,
            },
            fallback=True,
            error=f"{type(error).__name__}: {error}" if error else None,
            warnings=list(warnings or []),
        )
