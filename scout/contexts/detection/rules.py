"""
Taxonomy rules tables for the Detection context.

Each taxonomy (content type, technical level, journey stage, lead type) is a
table of candidate labels. A label lists what counts as evidence for it:
frontmatter aliases, layouts, URL patterns, keywords and expected structural
components. One generic scorer (scorer.py) evaluates every table, so adding a
taxonomy or a label is a config change, not a code change.

Tables live in configs/taxonomies.yaml (override with SCOUT_TAXONOMIES_PATH).
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from dotenv import load_dotenv
from omegaconf import OmegaConf

from scout.contexts.detection.evidence import COMPONENT_WEIGHTS
from scout.contexts.detection.exceptions import RulesConfigError
from scout.contexts.intake.page_parser import StructuralSignal

load_dotenv()
CONFIGS_PATH = Path(__file__).resolve().parents[2] / "configs"
TAXONOMIES_PATH = Path(os.getenv("SCOUT_TAXONOMIES_PATH", str(CONFIGS_PATH / "taxonomies.yaml")))


def compile_keyword_pattern(keywords, case_sensitive: bool = False) -> Optional[re.Pattern]:
    """
    Compile keywords into one alternation matched on word boundaries.

    Longer keywords are tried first so "machine learning" wins over
    "learning". Internal spaces match any run of whitespace.

    Args:
        keywords: Iterable of keyword strings
        case_sensitive: Match case exactly (for short names like "Go" or "R")

    Returns:
        Compiled pattern, or None when there are no keywords
    """
    unique = sorted({k.strip() for k in keywords if k and k.strip()}, key=len, reverse=True)
    if not unique:
        return None
    alternation = "|".join(re.escape(k).replace(r"\ ", r"\s+") for k in unique)
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(rf"(?<![\w])(?:{alternation})(?![\w])", flags)


def normalize_label_value(value: Any) -> str:
    """Normalize a declared label value: lowercase, spaces/hyphens to underscores."""
    return re.sub(r"[\s-]+", "_", str(value).strip().lower())


@dataclass(frozen=True)
class ComponentRule:
    """
    Expected structural component for a label.

    Attributes:
        kind: Signal kind (heading, code_block, table, ordered_list, chip, callout)
        pattern: Regex applied to the signal text (heading text, table
                 headers, chip name, callout type); None matches any text
        languages: Code block languages accepted (code_block only; empty = any)
    """

    kind: str
    pattern: Optional[re.Pattern] = None
    languages: frozenset = frozenset()

    def matches(self, signal: StructuralSignal) -> bool:
        if signal.kind != self.kind:
            return False
        if self.languages and (signal.language or "") not in self.languages:
            return False
        if self.pattern is not None and not self.pattern.search(signal.text):
            return False
        return True


@dataclass(frozen=True)
class LabelRule:
    """Evidence definition for one candidate label of a taxonomy."""

    name: str
    aliases: frozenset = frozenset()
    layouts: frozenset = frozenset()
    url_patterns: tuple = ()
    keywords: tuple = ()
    components: tuple = ()
    keyword_pattern: Optional[re.Pattern] = field(default=None, compare=False)

    def declares(self, value: Any) -> bool:
        """Check whether a frontmatter value names this label."""
        return normalize_label_value(value) in self.aliases


@dataclass(frozen=True)
class TaxonomyRules:
    """
    Rules table for one taxonomy.

    Attributes:
        name: Taxonomy name (e.g., "content_type")
        output_key: Key used in published output (e.g., "contentType")
        frontmatter_fields: Fields that explicitly declare a label
        default_label: Label returned when no signal matches
        labels: Candidate labels in priority order
    """

    name: str
    output_key: str
    frontmatter_fields: tuple
    default_label: str
    labels: tuple

    def get_label(self, name: str) -> Optional[LabelRule]:
        for label in self.labels:
            if label.name == name:
                return label
        return None

    def label_names(self) -> list[str]:
        return [label.name for label in self.labels]


def _as_list(value: Any, key: str, source) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise RulesConfigError(f"Expected a list, got {type(value).__name__}", source, key)


def _compile(pattern: str, key: str, source) -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise RulesConfigError(f"Invalid regex {pattern!r}: {e}", source, key) from e


def build_component_rule(raw: Any, key: str, source=None) -> ComponentRule:
    """
    Build a ComponentRule from its config entry.

    Accepts a bare kind string ("code_block") or a mapping with
    kind / pattern / languages.
    """
    if isinstance(raw, str):
        raw = {"kind": raw}
    if not isinstance(raw, dict) or "kind" not in raw:
        raise RulesConfigError("Component rule needs a 'kind'", source, key)

    kind = raw["kind"]
    if kind not in COMPONENT_WEIGHTS:
        raise RulesConfigError(
            f"Unknown component kind '{kind}'. Known kinds: {sorted(COMPONENT_WEIGHTS)}",
            source,
            key,
        )

    pattern = _compile(raw["pattern"], f"{key}.pattern", source) if raw.get("pattern") else None
    languages = frozenset(
        str(lang).lower() for lang in _as_list(raw.get("languages"), f"{key}.languages", source)
    )
    return ComponentRule(kind=kind, pattern=pattern, languages=languages)


def build_label_rule(name: str, raw: Optional[dict], key: str, source=None) -> LabelRule:
    """Build a LabelRule from its config entry."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise RulesConfigError("Label entry must be a mapping", source, key)

    aliases = {normalize_label_value(name)}
    aliases.update(
        normalize_label_value(a) for a in _as_list(raw.get("aliases"), f"{key}.aliases", source)
    )
    keywords = tuple(str(k) for k in _as_list(raw.get("keywords"), f"{key}.keywords", source))

    return LabelRule(
        name=name,
        aliases=frozenset(aliases),
        layouts=frozenset(
            str(layout).lower() for layout in _as_list(raw.get("layouts"), f"{key}.layouts", source)
        ),
        url_patterns=tuple(
            _compile(p, f"{key}.url_patterns", source)
            for p in _as_list(raw.get("url_patterns"), f"{key}.url_patterns", source)
        ),
        keywords=keywords,
        components=tuple(
            build_component_rule(c, f"{key}.components[{i}]", source)
            for i, c in enumerate(_as_list(raw.get("components"), f"{key}.components", source))
        ),
        keyword_pattern=compile_keyword_pattern(keywords),
    )


def build_taxonomy_rules(raw: dict, source=None) -> dict[str, TaxonomyRules]:
    """
    Build rules tables from a plain dict (as loaded from YAML).

    Args:
        raw: Mapping of taxonomy name -> taxonomy config
        source: Config path used in error messages

    Returns:
        Dict of taxonomy name -> TaxonomyRules, in config order

    Raises:
        RulesConfigError: If any entry is malformed
    """
    if not isinstance(raw, dict) or not raw:
        raise RulesConfigError("Taxonomy config must be a non-empty mapping", source)

    taxonomies = {}
    for name, config in raw.items():
        if not isinstance(config, dict):
            raise RulesConfigError("Taxonomy entry must be a mapping", source, name)

        default_label = config.get("default")
        if not default_label:
            raise RulesConfigError("Taxonomy needs a 'default' label", source, f"{name}.default")

        labels_raw = config.get("labels")
        if not isinstance(labels_raw, dict) or not labels_raw:
            raise RulesConfigError("Taxonomy needs a 'labels' mapping", source, f"{name}.labels")

        taxonomies[name] = TaxonomyRules(
            name=name,
            output_key=config.get("output_key", name),
            frontmatter_fields=tuple(
                _as_list(config.get("frontmatter_fields", [name]), f"{name}.frontmatter_fields", source)
            ),
            default_label=str(default_label),
            labels=tuple(
                build_label_rule(label, label_config, f"{name}.labels.{label}", source)
                for label, label_config in labels_raw.items()
            ),
        )

    return taxonomies


def load_taxonomy_rules(config_path: Optional[Union[str, Path]] = None) -> dict[str, TaxonomyRules]:
    """
    Load taxonomy rules tables from YAML.

    Args:
        config_path: Path to taxonomies YAML (defaults to SCOUT_TAXONOMIES_PATH)

    Returns:
        Dict of taxonomy name -> TaxonomyRules
    """
    config_path = Path(config_path) if config_path is not None else TAXONOMIES_PATH
    raw = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
    return build_taxonomy_rules(raw, source=config_path)
