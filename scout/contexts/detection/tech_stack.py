"""
Technology stack validation for the Detection context.

Checks the technologies a page declares in tech_stack / tools_stack against
how the page actually uses them (code block languages, headings, chips and
prose mentions), with the same evidence model and negation penalty as the
taxonomy scorer. The set of known technologies is a catalog loaded from
configuration, so sites can bring their own.

Statuses:
- verified: declared and corroborated by non-negated usage
- unverified: declared but never used or mentioned
- contradicted: declared but only mentioned negatively ("migrating from X")
- discovered: not declared, but used with enough confidence
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from dotenv import load_dotenv
from omegaconf import OmegaConf

from scout.contexts.detection.evidence import (
    COMPONENT_WEIGHTS,
    CONTRADICTED_MULTIPLIER,
    CORROBORATED_MULTIPLIER,
    DECLARATION_WEIGHTS,
    NEGATED_MULTIPLIER,
    EvidenceBreakdown,
    combine_evidence,
    evidence_to_confidence,
    position_weight,
)
from scout.contexts.detection.exceptions import RulesConfigError
from scout.contexts.detection.rules import CONFIGS_PATH
from scout.contexts.detection.scorer import MAX_MATCHES_PER_RULE, KeywordScan, scan_keywords
from scout.contexts.intake.page_data_structure import PageDocument

load_dotenv()
TECH_CATALOG_PATH = Path(
    os.getenv("SCOUT_TECH_CATALOG_PATH", str(CONFIGS_PATH / "tech_catalog.yaml"))
)

# Minimum usage confidence for an undeclared technology to be reported
DISCOVERY_THRESHOLD = 0.15

TECH_CATEGORIES = ("language", "framework", "dev_tool", "infrastructure")
UNKNOWN_CATEGORY = "unknown"


def compile_tech_pattern(
    name: str, aliases: Iterable[str] = (), case_sensitive: bool = False
) -> re.Pattern:
    """
    Compile the mention pattern for a technology.

    Boundaries treat ".", "+" and "#" as part of a name, so "C" does not
    match inside "C++" or "C#", and "js" does not match inside "Node.js".

    Args:
        name: Canonical technology name
        aliases: Other names (always matched case-insensitively)
        case_sensitive: Match the canonical name case-sensitively

    Returns:
        Compiled pattern
    """
    name_part = re.escape(name).replace(r"\ ", r"\s+")
    if case_sensitive:
        name_part = f"(?-i:{name_part})"

    terms = sorted({a.strip() for a in aliases if a and a.strip()}, key=len, reverse=True)
    alternation = "|".join(
        [name_part] + [re.escape(t).replace(r"\ ", r"\s+") for t in terms]
    )
    return re.compile(rf"(?<![\w.+#])(?:{alternation})(?![\w+#])", re.IGNORECASE)


def normalize_tech_name(name: str) -> str:
    return re.sub(r"\s+", " ", str(name).strip().lower())


@dataclass(frozen=True)
class Technology:
    """
    Catalog entry for one technology.

    Attributes:
        name: Canonical name (e.g., "Python")
        aliases: Other names that refer to it
        languages: Code fence languages that count as usage (lowercase)
        category: language, framework, dev_tool, infrastructure or unknown
        case_sensitive: Whether the canonical name is matched case-sensitively
    """

    name: str
    aliases: tuple = ()
    languages: frozenset = frozenset()
    category: str = UNKNOWN_CATEGORY
    case_sensitive: bool = False
    pattern: Optional[re.Pattern] = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        name: str,
        aliases: Iterable[str] = (),
        languages: Iterable[str] = (),
        category: str = UNKNOWN_CATEGORY,
        case_sensitive: bool = False,
    ) -> "Technology":
        aliases = tuple(str(a) for a in aliases)
        return cls(
            name=name,
            aliases=aliases,
            languages=frozenset(str(lang).lower() for lang in languages),
            category=category,
            case_sensitive=case_sensitive,
            pattern=compile_tech_pattern(name, aliases, case_sensitive),
        )

    @classmethod
    def unknown(cls, name: str) -> "Technology":
        """Ad-hoc entry for a declared technology missing from the catalog."""
        return cls.create(name, languages=[name])

    def names(self) -> list[str]:
        return [self.name, *self.aliases]


class TechCatalog:
    """
    Set of known technologies, looked up by name or alias.

    Example:
        catalog = TechCatalog.load()
        catalog.lookup("golang").name  # "Go"
    """

    def __init__(self, technologies: Iterable[Technology]):
        self.technologies: list[Technology] = []
        self._index: dict[str, Technology] = {}
        for tech in technologies:
            self.add(tech)

    def __len__(self) -> int:
        return len(self.technologies)

    def __iter__(self):
        return iter(self.technologies)

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def add(self, tech: Technology) -> None:
        key = normalize_tech_name(tech.name)
        if key in self._index:
            raise RulesConfigError(f"Duplicate technology '{tech.name}'", key=tech.name)
        self.technologies.append(tech)
        for name in tech.names():
            self._index.setdefault(normalize_tech_name(name), tech)

    def lookup(self, name: str) -> Optional[Technology]:
        return self._index.get(normalize_tech_name(name))

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "TechCatalog":
        """Build a catalog from bare names (no aliases or languages beyond the name)."""
        unique = {}
        for name in names:
            unique.setdefault(normalize_tech_name(name), str(name).strip())
        return cls(Technology.unknown(name) for name in unique.values())

    @classmethod
    def from_config(cls, raw: Any, source=None) -> "TechCatalog":
        """
        Build a catalog from a plain dict (as loaded from YAML).

        Raises:
            RulesConfigError: If an entry is malformed
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("technologies"), list):
            raise RulesConfigError("Tech catalog needs a 'technologies' list", source, "technologies")

        technologies = []
        for i, entry in enumerate(raw["technologies"]):
            key = f"technologies[{i}]"
            if not isinstance(entry, dict) or not entry.get("name"):
                raise RulesConfigError("Technology entry needs a 'name'", source, key)

            category = entry.get("category", UNKNOWN_CATEGORY)
            if category not in TECH_CATEGORIES:
                raise RulesConfigError(
                    f"Unknown category '{category}'. Known categories: {list(TECH_CATEGORIES)}",
                    source,
                    f"{key}.category",
                )
            technologies.append(
                Technology.create(
                    name=str(entry["name"]),
                    aliases=entry.get("aliases") or (),
                    languages=entry.get("languages") or (),
                    category=category,
                    case_sensitive=bool(entry.get("case_sensitive", False)),
                )
            )

        try:
            return cls(technologies)
        except RulesConfigError as e:
            raise RulesConfigError(e.message, source, e.key) from e

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "TechCatalog":
        """
        Load the catalog from YAML.

        Args:
            config_path: Path to catalog YAML (defaults to SCOUT_TECH_CATALOG_PATH)
        """
        config_path = Path(config_path) if config_path is not None else TECH_CATALOG_PATH
        raw = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
        return cls.from_config(raw, source=config_path)


@dataclass
class TechValidation:
    """Validation result for one technology on one page."""

    name: str
    status: str
    breakdown: EvidenceBreakdown
    category: str = UNKNOWN_CATEGORY
    in_catalog: bool = True
    declared: bool = True
    mentions: int = 0
    negated_mentions: int = 0

    @property
    def confidence(self) -> float:
        return self.breakdown.confidence

    def to_dict(self) -> dict:
        breakdown = self.breakdown.to_dict()
        breakdown.pop("source")
        return {
            "name": self.name,
            "status": self.status,
            "confidence": round(self.confidence, 4),
            "category": self.category,
            "inCatalog": self.in_catalog,
            "mentions": self.mentions,
            "negatedMentions": self.negated_mentions,
            "evidenceBreakdown": breakdown,
        }


@dataclass
class TechStackReport:
    """Tech stack validation for one page: declared technologies plus discoveries."""

    technologies: list[TechValidation] = field(default_factory=list)
    discovered: list[TechValidation] = field(default_factory=list)

    def _with_status(self, status: str) -> list[TechValidation]:
        return [t for t in self.technologies if t.status == status]

    @property
    def verified(self) -> list[TechValidation]:
        return self._with_status("verified")

    @property
    def unverified(self) -> list[TechValidation]:
        return self._with_status("unverified")

    @property
    def contradicted(self) -> list[TechValidation]:
        return self._with_status("contradicted")

    def get(self, name: str) -> Optional[TechValidation]:
        key = normalize_tech_name(name)
        for validation in self.technologies + self.discovered:
            if normalize_tech_name(validation.name) == key:
                return validation
        return None

    def status_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for validation in self.technologies + self.discovered:
            counts[validation.status] = counts.get(validation.status, 0) + 1
        return counts

    def to_dict(self) -> dict:
        return {
            "declared": [t.to_dict() for t in self.technologies],
            "discovered": [t.to_dict() for t in self.discovered],
        }


def score_tech_components(tech: Technology, page: PageDocument) -> float:
    """
    Usage evidence from structure: matching code blocks, headings and chips.

    Each kind counts at most MAX_MATCHES_PER_RULE matches.
    """
    code_blocks = [
        s for s in page.get_signals("code_block") if s.language and s.language in tech.languages
    ]
    headings = [s for s in page.get_signals("heading") if tech.pattern.search(s.text)]
    chips = [s for s in page.get_signals("chip") if tech.pattern.search(s.text)]

    total = 0.0
    for matched in (code_blocks, headings, chips):
        for signal in matched[:MAX_MATCHES_PER_RULE]:
            total += COMPONENT_WEIGHTS[signal.kind] * position_weight(signal.position)
    return total


def _usage(tech: Technology, page: PageDocument) -> tuple[float, KeywordScan]:
    component = score_tech_components(tech, page)
    scan = scan_keywords(tech.pattern, page.get_segments())
    return component, scan


def validate_declared(tech: Technology, page: PageDocument, in_catalog: bool = True) -> TechValidation:
    """
    Validate one declared technology against the page.

    base = 0.8 x multiplier, where the multiplier is 1.2 with non-negated
    usage, 0.5 when every mention is negated, and 0.8 with no usage at all.
    """
    component, scan = _usage(tech, page)

    if component > 0 or scan.affirmed_mentions > 0:
        status, multiplier = "verified", CORROBORATED_MULTIPLIER
    elif scan.negated_mentions > 0:
        status, multiplier = "contradicted", NEGATED_MULTIPLIER
    else:
        status, multiplier = "unverified", CONTRADICTED_MULTIPLIER

    breakdown = EvidenceBreakdown(
        base=DECLARATION_WEIGHTS["frontmatter"] * multiplier,
        component=component,
        keyword=scan.evidence,
        source="frontmatter",
        multiplier=multiplier,
    )
    return TechValidation(
        name=tech.name,
        status=status,
        breakdown=breakdown,
        category=tech.category,
        in_catalog=in_catalog,
        mentions=scan.mentions,
        negated_mentions=scan.negated_mentions,
    )


def discover_technology(
    tech: Technology, page: PageDocument, threshold: float = DISCOVERY_THRESHOLD
) -> Optional[TechValidation]:
    """
    Report an undeclared technology when its usage confidence reaches the threshold.

    Pages that only mention a technology negatively never discover it.
    """
    component, scan = _usage(tech, page)
    if component == 0 and scan.affirmed_mentions == 0:
        return None
    if evidence_to_confidence(combine_evidence(component, scan.evidence)) < threshold:
        return None

    source = "components" if component >= scan.evidence else "keywords"
    return TechValidation(
        name=tech.name,
        status="discovered",
        breakdown=EvidenceBreakdown(component=component, keyword=scan.evidence, source=source),
        category=tech.category,
        declared=False,
        mentions=scan.mentions,
        negated_mentions=scan.negated_mentions,
    )


def validate_tech_stack(
    page: PageDocument,
    catalog: Optional[TechCatalog] = None,
    discovery_threshold: Optional[float] = DISCOVERY_THRESHOLD,
) -> TechStackReport:
    """
    Validate a page's declared tech stack and discover undeclared usage.

    Args:
        page: Parsed page
        catalog: Known technologies (defaults to the packaged catalog)
        discovery_threshold: Minimum confidence for discovered technologies
                             (None disables discovery)

    Returns:
        TechStackReport
    """
    catalog = catalog if catalog is not None else TechCatalog.load()
    report = TechStackReport()

    declared_keys = set()
    for name in page.declared_tech_stack:
        tech = catalog.lookup(name)
        in_catalog = tech is not None
        if tech is None:
            tech = Technology.unknown(name)
        if normalize_tech_name(tech.name) in declared_keys:
            continue
        declared_keys.add(normalize_tech_name(tech.name))
        report.technologies.append(validate_declared(tech, page, in_catalog=in_catalog))

    if discovery_threshold is not None:
        for tech in catalog:
            if normalize_tech_name(tech.name) in declared_keys:
                continue
            discovered = discover_technology(tech, page, discovery_threshold)
            if discovered is not None:
                report.discovered.append(discovered)

    return report
