"""Unit tests for page URL derivation."""

from datetime import date

import pytest

from scout.contexts.intake.page_urls import (
    derive_page_url,
    normalize_url,
    page_suffix,
    post_categories,
    relative_to_site,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "relative_path,expected",
    [
        ("_posts/2025-01-02-hello-world.md", "/2025/01/02/hello-world.html"),
        ("_drafts/2025-03-04-wip.md", "/2025/03/04/wip.html"),
        ("_drafts/untitled.md", "/untitled.html"),
        ("_docs/setup/install.md", "/docs/setup/install.html"),
        ("projects/hena/index.md", "/projects/hena/"),
        ("about.md", "/about.html"),
        ("index.md", "/"),
        ("docs/README.md", "/docs/"),
    ],
)
def test_default_date_style(relative_path, expected):
    assert derive_page_url(relative_path) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "relative_path,expected",
    [
        ("_posts/2025-01-02-hello-world.md", "/2025/01/02/hello-world/"),
        ("_drafts/2025-03-04-wip.md", "/2025/03/04/wip/"),
        ("_drafts/untitled.md", "/untitled/"),
        ("_docs/setup/install.md", "/docs/setup/install/"),
        ("projects/hena/index.md", "/projects/hena/"),
        ("about.md", "/about/"),
        ("index.md", "/"),
        ("docs/README.md", "/docs/"),
    ],
)
def test_pretty_style(relative_path, expected):
    assert derive_page_url(relative_path, permalink_style="pretty") == expected


@pytest.mark.unit
class TestPermalinkStyles:
    """Site permalink styles other than the default."""

    def test_none_drops_the_date(self):
        assert derive_page_url("_posts/2025-01-02-hello.md", permalink_style="none") == "/hello.html"
        assert derive_page_url("about.md", permalink_style="none") == "/about.html"

    def test_ordinal_uses_day_of_year(self):
        url = derive_page_url("_posts/2025-02-03-hello.md", permalink_style="ordinal")

        assert url == "/2025/034/hello.html"

    def test_custom_template(self):
        style = "/blog/:year/:title/"

        assert derive_page_url("_posts/2025-01-02-hello.md", permalink_style=style) == "/blog/2025/hello/"
        assert derive_page_url("about.md", permalink_style=style) == "/about/"

    def test_categories_prefix_posts(self):
        frontmatter = {"categories": ["Dev Tools", "python"]}

        assert (
            derive_page_url("_posts/2025-01-02-hello.md", frontmatter)
            == "/dev-tools/python/2025/01/02/hello.html"
        )

    def test_frontmatter_date_and_slug_override_filename(self):
        frontmatter = {"date": date(2024, 12, 31), "slug": "renamed"}

        assert (
            derive_page_url("_posts/2025-01-02-hello.md", frontmatter, "pretty")
            == "/2024/12/31/renamed/"
        )

    def test_unknown_style_raises(self):
        with pytest.raises(ValueError, match="Unknown permalink style"):
            derive_page_url("about.md", permalink_style="fancy")


@pytest.mark.unit
class TestPermalink:
    """Frontmatter permalinks override path-derived URLs."""

    def test_permalink_wins(self):
        assert derive_page_url("_posts/2025-01-02-x.md", {"permalink": "/custom/"}) == "/custom/"

    def test_permalink_without_leading_slash(self):
        assert derive_page_url("about.md", {"permalink": "me"}) == "/me"

    def test_blank_permalink_is_ignored(self):
        assert derive_page_url("about.md", {"permalink": "  "}, "pretty") == "/about/"


@pytest.mark.unit
@pytest.mark.parametrize(
    "style,expected",
    [("date", ".html"), ("pretty", "/"), ("none", ".html"), ("/:title", ""), (None, ".html")],
)
def test_page_suffix(style, expected):
    assert page_suffix(style) == expected


@pytest.mark.unit
def test_post_categories_merge_directories_and_frontmatter():
    assert post_categories({"category": "Notes"}, ["blog"]) == ["blog", "notes"]
    assert post_categories({"categories": "a b a"}, []) == ["a", "b"]
    assert post_categories({}, []) == []


@pytest.mark.unit
class TestRelativeToSite:
    """Tests for relative_to_site."""

    def test_page_inside_site(self, tmp_path):
        page = tmp_path / "_posts" / "2025-01-02-x.md"

        assert relative_to_site(page, tmp_path).as_posix() == "_posts/2025-01-02-x.md"

    def test_page_outside_site_raises(self, tmp_path):
        with pytest.raises(ValueError, match="not inside site root"):
            relative_to_site(tmp_path / "elsewhere" / "page.md", tmp_path / "site")


@pytest.mark.unit
def test_normalize_url_collapses_slashes_and_keeps_trailing():
    assert normalize_url("docs//install/") == "/docs/install/"
    assert normalize_url("/about") == "/about"
