"""
Navigation variant selection for the Detection context.

Picks which navigation a page renders (sponsor, docs, project, blog or the
default domain navigation) by walking an ordered rule table. No evidence
weighting: the first matching rule wins.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

from dotenv import load_dotenv
from omegaconf import OmegaConf

from scout.contexts.detection.exceptions import RulesConfigError
from scout.contexts.detection.rules import CONFIGS_PATH

load_dotenv()
NAVIGATION_PATH = Path(os.getenv("SCOUT_NAVIGATION_PATH", str(CONFIGS_PATH / "navigation.yaml")))

DEFAULT_VARIANT = "domain"


@dataclass(frozen=True)
class NavigationRule:
    """One row of the navigation rule table."""

    name: str
    variant: str
    path_pattern: Optional[re.Pattern] = None
    repository_types: frozenset = frozenset()
    host_pattern: Optional[re.Pattern] = None

    @property
    def has_site_conditions(self) -> bool:
        return bool(self.repository_types) or self.host_pattern is not None

    def match(self, path: str, repository_type: str, host: str) -> Optional[re.Match]:
        """
        Check the rule against a page.

        Returns:
            The path match (or a match of the empty string when the rule has
            no path condition), or None when the rule does not apply
        """
        if self.path_pattern is not None:
            path_match = self.path_pattern.search(path)
            if path_match is None:
                return None
        else:
            path_match = re.match("", path)

        if self.has_site_conditions:
            site_matches = repository_type in self.repository_types or (
                self.host_pattern is not None and bool(self.host_pattern.search(host))
            )
            if not site_matches:
                return None

        return path_match


@dataclass(frozen=True)
class NavigationVariant:
    """Selected navigation for a page."""

    variant: str
    rule: str
    project_slug: Optional[str] = None

    def to_dict(self) -> dict:
        return {"variant": self.variant, "rule": self.rule, "projectSlug": self.project_slug}


@dataclass(frozen=True)
class NavigationRules:
    rules: tuple
    default_variant: str = DEFAULT_VARIANT


def _compile(pattern: str, key: str, source) -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise RulesConfigError(f"Invalid regex {pattern!r}: {e}", source, key) from e


def build_navigation_rules(raw: Any, source=None) -> NavigationRules:
    """
    Build the navigation rule table from a plain dict (as loaded from YAML).

    Raises:
        RulesConfigError: If a rule is malformed
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("rules"), list):
        raise RulesConfigError("Navigation config needs a 'rules' list", source, "rules")

    rules = []
    for i, entry in enumerate(raw["rules"]):
        key = f"rules[{i}]"
        if not isinstance(entry, dict) or not entry.get("variant"):
            raise RulesConfigError("Navigation rule needs a 'variant'", source, key)

        repository_types = entry.get("repository_types") or []
        if isinstance(repository_types, str):
            repository_types = [repository_types]

        rules.append(
            NavigationRule(
                name=str(entry.get("name", entry["variant"])),
                variant=str(entry["variant"]),
                path_pattern=(
                    _compile(entry["path_pattern"], f"{key}.path_pattern", source)
                    if entry.get("path_pattern")
                    else None
                ),
                repository_types=frozenset(str(t).lower() for t in repository_types),
                host_pattern=(
                    _compile(entry["host_pattern"], f"{key}.host_pattern", source)
                    if entry.get("host_pattern")
                    else None
                ),
            )
        )

    return NavigationRules(
        rules=tuple(rules), default_variant=str(raw.get("default_variant", DEFAULT_VARIANT))
    )


def load_navigation_rules(config_path: Optional[Union[str, Path]] = None) -> NavigationRules:
    """
    Load the navigation rule table from YAML.

    Args:
        config_path: Path to navigation YAML (defaults to SCOUT_NAVIGATION_PATH)
    """
    config_path = Path(config_path) if config_path is not None else NAVIGATION_PATH
    raw = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
    return build_navigation_rules(raw, source=config_path)


def site_host(site_context: dict) -> str:
    """Host of the site, from `host` or the scheme-qualified `url`/`domain`."""
    host = site_context.get("host")
    if host:
        return str(host).lower()
    for key in ("url", "domain"):
        value = site_context.get(key)
        if value:
            value = str(value)
            parsed = urlparse(value if "//" in value else f"//{value}")
            return (parsed.hostname or "").lower()
    return ""


def select_navigation_variant(
    url: str,
    site_context: Optional[dict] = None,
    rules: Optional[NavigationRules] = None,
) -> NavigationVariant:
    """
    Select the navigation variant for a page.

    Args:
        url: Page URL or path (e.g., "/projects/scout/")
        site_context: Site facts: repository_type, host or url/domain
        rules: Rule table (defaults to SCOUT_NAVIGATION_PATH)

    Returns:
        NavigationVariant from the first matching rule, else the default variant
    """
    rules = rules if rules is not None else load_navigation_rules()
    site_context = site_context or {}

    path = urlparse(url).path or "/"
    repository_type = str(site_context.get("repository_type") or "").lower()
    host = site_host(site_context)

    for rule in rules.rules:
        match = rule.match(path, repository_type, host)
        if match is None:
            continue
        slug = match.groupdict().get("slug")
        return NavigationVariant(variant=rule.variant, rule=rule.name, project_slug=slug)

    return NavigationVariant(variant=rules.default_variant, rule="default")
