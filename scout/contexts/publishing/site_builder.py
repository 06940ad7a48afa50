"""
Site classification runs for the Publishing context.

Classifies every page of a Jekyll site, writes the context data file that
templates read (site.data.scout_context[page.url]), logs run events, and
optionally renders a markdown summary report.
"""

import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from scout import __version__
from scout.contexts.intake.page_urls import DEFAULT_PERMALINK_STYLE
from scout.contexts.intake.site_archive import SiteArchive
from scout.contexts.publishing.engine import ContextEngine, PageContext
from scout.contexts.publishing.logger import _log_info, _log_warning, log_site_summary
from scout.utils.event_logging import log_pipeline_event
from scout.utils.timestamp import now

TEMPLATES_PATH = Path(__file__).resolve().parent / "templates"
REPORT_TEMPLATE = "site_report.md.jinja"

EVENT_SOURCE = "publishing"


@dataclass
class SiteClassification:
    """
    Result of classifying a whole site.

    Attributes:
        site_root: Jekyll source root
        contexts: One PageContext per published URL, in path order
        duplicate_urls: URLs produced by more than one page (first page wins)
        data_path: Written data file (None when not written)
        report_path: Written report (None when not written)
    """

    site_root: Path
    contexts: List[PageContext] = field(default_factory=list)
    duplicate_urls: List[str] = field(default_factory=list)
    data_path: Optional[Path] = None
    report_path: Optional[Path] = None

    @property
    def fallback_urls(self) -> List[str]:
        return [c.url for c in self.contexts if c.fallback]

    def get(self, url: str) -> Optional[PageContext]:
        for context in self.contexts:
            if context.url == url:
                return context
        return None

    def taxonomies(self) -> List[str]:
        names: List[str] = []
        for context in self.contexts:
            for name in context.classification.results:
                if name not in names:
                    names.append(name)
        return names

    def label_distribution(self, taxonomy: str) -> Counter:
        """Count pages per label for one taxonomy."""
        return Counter(
            c.label(taxonomy) for c in self.contexts if c.label(taxonomy) is not None
        )

    def low_confidence(self, threshold: float) -> List[Dict[str, Any]]:
        """Taxonomy decisions below a confidence threshold, lowest first."""
        rows = []
        for context in self.contexts:
            for name, result in context.classification.results.items():
                if result.confidence < threshold:
                    rows.append(
                        {
                            "url": context.url,
                            "taxonomy": name,
                            "label": result.label,
                            "confidence": result.confidence,
                        }
                    )
        return sorted(rows, key=lambda r: (r["confidence"], r["url"], r["taxonomy"]))

    def contradicted_tech(self) -> List[Dict[str, Any]]:
        return [
            {"url": c.url, "name": t.name}
            for c in self.contexts
            for t in c.tech_stack.contradicted
        ]

    def to_data(self) -> Dict[str, Any]:
        """Data file content: page URL -> context."""
        return {context.url: context.to_dict() for context in self.contexts}


def write_context_data(result: SiteClassification, data_path: Path) -> Path:
    """Write the context data file (JSON, keys sorted for stable diffs)."""
    data_path.parent.mkdir(parents=True, exist_ok=True)
    with open(data_path, "w", encoding="utf-8") as f:
        json.dump(result.to_data(), f, indent=2, sort_keys=True, ensure_ascii=False)
        f.write("\n")
    return data_path


def render_site_report(result: SiteClassification, low_confidence_threshold: float = 0.3) -> str:
    """
    Render the markdown summary report for a site run.

    Args:
        result: Site classification
        low_confidence_threshold: Decisions below this confidence are listed

    Returns:
        Report markdown
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_PATH)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["percent"] = lambda value: f"{value * 100:.1f}%"
    template = env.get_template(REPORT_TEMPLATE)

    distributions = {
        name: result.label_distribution(name).most_common() for name in result.taxonomies()
    }
    return template.render(
        site_root=str(result.site_root),
        generated_at=now(),
        version=__version__,
        page_count=len(result.contexts),
        distributions=distributions,
        threshold=low_confidence_threshold,
        low_confidence=result.low_confidence(low_confidence_threshold),
        contradicted=result.contradicted_tech(),
        fallback_urls=result.fallback_urls,
        duplicate_urls=result.duplicate_urls,
    )


def classify_site(
    site_root: Path,
    engine: Optional[ContextEngine] = None,
    data_path: Optional[Path] = None,
    report_path: Optional[Path] = None,
    write: bool = True,
    events_file: Optional[Path] = None,
) -> SiteClassification:
    """
    Classify every page of a Jekyll site and publish the results.

    Args:
        site_root: Jekyll source root
        engine: Context engine (defaults to one configured from the site's _scout.yml)
        data_path: Data file path (defaults to publishing.data_file under the site root)
        report_path: Report path (defaults to publishing.report_file; None skips the report)
        write: Write the data file and report (False only classifies)
        events_file: Event log override (defaults to SCOUT_EVENTS_FILE)

    Returns:
        SiteClassification

    Raises:
        FileNotFoundError: If the site root does not exist
    """
    start_time = time.time()
    site_root = Path(site_root)
    engine = engine if engine is not None else ContextEngine.for_site(site_root)
    publishing = engine.config.get("publishing", {})

    archive = SiteArchive(
        site_root,
        include_drafts=bool(publishing.get("include_drafts", False)),
        permalink_style=engine.site.get("permalink") or DEFAULT_PERMALINK_STYLE,
    )
    pages = archive.load()
    _log_info(f"Loaded {len(pages)} pages from {site_root}")

    result = SiteClassification(site_root=site_root)
    seen_urls = set()
    for page in pages:
        if page.url in seen_urls:
            _log_warning(f"Duplicate URL {page.url} from {page.source_path}; keeping first page")
            result.duplicate_urls.append(page.url)
            continue
        seen_urls.add(page.url)

        context = engine.build_context(page)
        result.contexts.append(context)
        log_pipeline_event(
            event_type="page_classified",
            page_url=context.url,
            source=EVENT_SOURCE,
            events_file=events_file,
            labels={
                r.output_key: r.label
                for r in context.classification.results.values()
            },
            fallback=context.fallback,
        )

    if write:
        if data_path is None:
            data_path = site_root / publishing.get("data_file", "_data/scout_context.json")
        result.data_path = write_context_data(result, Path(data_path))

        if report_path is None and publishing.get("report_file"):
            report_path = site_root / publishing["report_file"]
        if report_path is not None:
            report = render_site_report(
                result, float(publishing.get("low_confidence_threshold", 0.3))
            )
            report_path = Path(report_path)
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(report, encoding="utf-8")
            result.report_path = report_path

    log_pipeline_event(
        event_type="site_classified",
        page_url="*",
        source=EVENT_SOURCE,
        events_file=events_file,
        site_root=str(site_root),
        pages=len(result.contexts),
        fallbacks=len(result.fallback_urls),
        data_file=str(result.data_path) if result.data_path else None,
    )
    log_site_summary(result, time.time() - start_time)

    return result
