"""
Engine configuration resolution.

Layers configuration the way presets are layered: later sources override
earlier ones.

    1. Packaged defaults (configs/engine.yaml, or SCOUT_ENGINE_CONFIG_PATH)
    2. Site facts from Jekyll _config.yml (title, description, url)
    3. Site overrides from _scout.yml at the site root
    4. Explicit overrides passed by the caller (e.g., CLI flags)

Examples:
    >>> config = load_engine_config(site_root=Path("~/sites/example"))
    >>> config["site"]["repository_type"]
    'domain'
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
CONFIGS_PATH = Path(__file__).resolve().parents[2] / "configs"
ENGINE_CONFIG_PATH = Path(os.getenv("SCOUT_ENGINE_CONFIG_PATH", str(CONFIGS_PATH / "engine.yaml")))

SITE_CONFIG_FILENAME = "_scout.yml"
JEKYLL_CONFIG_FILENAME = "_config.yml"

# Jekyll _config.yml keys copied into the site section
JEKYLL_SITE_KEYS = ("title", "description", "url", "permalink")

# Detection paths that resolve relative to the site root
SITE_RELATIVE_PATHS = ("taxonomies_path", "tech_catalog_path", "navigation_path")


def load_jekyll_site_facts(site_root: Path) -> Dict[str, Any]:
    """
    Read site title, description, url and permalink style from Jekyll _config.yml.

    Jekyll configs are plain YAML that may contain Liquid-like values, so
    they are read with PyYAML rather than OmegaConf.

    Args:
        site_root: Jekyll source root

    Returns:
        Dict with whichever of title/description/url/permalink are set (empty if no config)
    """
    config_file = Path(site_root) / JEKYLL_CONFIG_FILENAME
    if not config_file.exists():
        return {}

    data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        return {}

    return {key: str(data[key]) for key in JEKYLL_SITE_KEYS if data.get(key)}


def load_engine_config(
    site_root: Optional[Path] = None,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Resolve the engine configuration for a site.

    Args:
        site_root: Jekyll source root (None uses packaged defaults only)
        config_path: Defaults file (defaults to SCOUT_ENGINE_CONFIG_PATH)
        overrides: Nested dict applied last (e.g., {"publishing": {"report_file": "r.md"}})

    Returns:
        Plain dict with site, detection and publishing sections
    """
    if config_path is None:
        config_path = ENGINE_CONFIG_PATH

    layers = [OmegaConf.load(config_path)]

    if site_root is not None:
        site_root = Path(site_root)
        jekyll_facts = load_jekyll_site_facts(site_root)
        if jekyll_facts:
            layers.append(OmegaConf.create({"site": jekyll_facts}))

        site_config = site_root / SITE_CONFIG_FILENAME
        if site_config.exists():
            layers.append(OmegaConf.load(site_config))

    if overrides:
        layers.append(OmegaConf.create(overrides))

    config = OmegaConf.to_container(OmegaConf.merge(*layers), resolve=True)

    if not config["site"].get("domain") and config["site"].get("url"):
        config["site"]["domain"] = config["site"]["url"].split("//")[-1].split("/")[0]

    if site_root is not None:
        detection = config["detection"]
        for key in SITE_RELATIVE_PATHS:
            if detection.get(key) and not Path(detection[key]).is_absolute():
                detection[key] = str(site_root / detection[key])

    return config
