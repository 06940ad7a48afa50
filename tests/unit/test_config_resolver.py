"""
Unit tests for engine configuration resolution.

Tests the layering of packaged defaults, Jekyll _config.yml facts, the
site's _scout.yml and caller overrides.
"""

import pytest

from scout.contexts.publishing.config_resolver import load_engine_config, load_jekyll_site_facts


@pytest.fixture
def site_root(tmp_path):
    (tmp_path / "_config.yml").write_text(
        "title: Example Site\n"
        "description: Notes on tooling\n"
        "url: https://example.in/blog\n"
        "plugins: [jekyll-feed]\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.mark.unit
class TestLoadJekyllSiteFacts:
    """Tests for load_jekyll_site_facts."""

    def test_reads_title_description_url(self, site_root):
        assert load_jekyll_site_facts(site_root) == {
            "title": "Example Site",
            "description": "Notes on tooling",
            "url": "https://example.in/blog",
        }

    def test_missing_config(self, tmp_path):
        assert load_jekyll_site_facts(tmp_path) == {}

    def test_reads_permalink_style(self, tmp_path):
        (tmp_path / "_config.yml").write_text("permalink: pretty\n", encoding="utf-8")

        assert load_jekyll_site_facts(tmp_path) == {"permalink": "pretty"}

    def test_non_mapping_config(self, tmp_path):
        (tmp_path / "_config.yml").write_text("- just\n- a list\n", encoding="utf-8")

        assert load_jekyll_site_facts(tmp_path) == {}


@pytest.mark.unit
class TestLoadEngineConfig:
    """Tests for load_engine_config."""

    def test_packaged_defaults(self):
        config = load_engine_config()

        assert config["site"]["repository_type"] == "domain"
        assert config["site"]["permalink"] == "date"
        assert config["detection"]["discovery_threshold"] == 0.15
        assert config["publishing"]["data_file"] == "_data/scout_context.json"
        assert config["publishing"]["report_file"] is None

    def test_jekyll_facts_fill_site_and_domain(self, site_root):
        config = load_engine_config(site_root=site_root)

        assert config["site"]["title"] == "Example Site"
        assert config["site"]["domain"] == "example.in"

    def test_site_overrides_and_relative_paths(self, site_root):
        (site_root / "_scout.yml").write_text(
            "site:\n"
            "  title: Overridden\n"
            "  repository_type: blog\n"
            "detection:\n"
            "  tech_catalog_path: config/catalog.yaml\n"
            "publishing:\n"
            "  report_file: reports/scout.md\n",
            encoding="utf-8",
        )

        config = load_engine_config(site_root=site_root)

        assert config["site"]["title"] == "Overridden"
        assert config["site"]["description"] == "Notes on tooling"
        assert config["site"]["repository_type"] == "blog"
        assert config["detection"]["tech_catalog_path"] == str(site_root / "config/catalog.yaml")
        assert config["detection"]["taxonomies_path"] is None
        assert config["publishing"]["report_file"] == "reports/scout.md"

    def test_caller_overrides_win(self, site_root):
        (site_root / "_scout.yml").write_text("publishing:\n  include_drafts: false\n")

        config = load_engine_config(
            site_root=site_root, overrides={"publishing": {"include_drafts": True}}
        )

        assert config["publishing"]["include_drafts"] is True

    def test_explicit_domain_is_kept(self, site_root):
        config = load_engine_config(site_root=site_root, overrides={"site": {"domain": "cdn.example.in"}})

        assert config["site"]["domain"] == "cdn.example.in"
