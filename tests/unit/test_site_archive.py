"""Unit tests for the site archive loader."""

import pytest

from scout.contexts.intake.site_archive import SiteArchive


def write(root, relative, text="---\ntitle: Page\n---\nBody\n"):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path):
    for relative in [
        "index.md",
        "about.markdown",
        "README.md",
        "_posts/2025-01-02-hello.md",
        "_drafts/wip.md",
        "_docs/install.md",
        "_includes/snippet.md",
        "_site/index.md",
        "node_modules/pkg/readme.md",
        ".github/notes.md",
        "docs/README.md",
        "assets/style.css",
    ]:
        write(tmp_path, relative)
    return tmp_path


def relative_paths(archive):
    return [p.relative_to(archive.site_root).as_posix() for p in archive.iter_page_paths()]


@pytest.mark.unit
class TestSiteArchive:
    """Tests for SiteArchive."""

    def test_skips_unpublished_paths(self, site):
        archive = SiteArchive(site)

        assert relative_paths(archive) == [
            "_docs/install.md",
            "_posts/2025-01-02-hello.md",
            "about.markdown",
            "docs/README.md",
            "index.md",
        ]

    def test_drafts_can_be_included(self, site):
        archive = SiteArchive(site, include_drafts=True)

        assert "_drafts/wip.md" in relative_paths(archive)

    def test_load_derives_urls_with_default_style(self, site):
        urls = [page.url for page in SiteArchive(site).load()]

        assert urls == [
            "/docs/install.html",
            "/2025/01/02/hello.html",
            "/about.html",
            "/docs/",
            "/",
        ]

    def test_load_follows_permalink_style(self, site):
        urls = [page.url for page in SiteArchive(site, permalink_style="pretty").load()]

        assert urls == ["/docs/install/", "/2025/01/02/hello/", "/about/", "/docs/", "/"]

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(SiteArchive(tmp_path / "missing").iter_page_paths())
