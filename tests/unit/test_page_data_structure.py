"""
Unit tests for PageDocument.

Covers tech stack declarations, reading time, title fallback and the
record-based factory.
"""

import pytest

from scout.contexts.intake.page_data_structure import PageDocument, flatten_stack_declaration


@pytest.mark.unit
class TestFlattenStackDeclaration:
    """Tests for the accepted tech_stack shapes."""

    def test_list(self):
        assert flatten_stack_declaration(["Python", "Django"]) == ["Python", "Django"]

    def test_comma_separated_string(self):
        assert flatten_stack_declaration("Python, Django ,") == ["Python", "Django"]

    def test_project_mapping(self):
        value = {
            "languages": ["Python"],
            "dependencies": [{"name": "requests", "version": "2.31"}, {"version": "1.0"}],
        }

        assert flatten_stack_declaration(value) == ["Python", "requests"]

    def test_none_and_scalars(self):
        assert flatten_stack_declaration(None) == []
        assert flatten_stack_declaration(3) == ["3"]


@pytest.mark.unit
class TestPageDocument:
    """Tests for PageDocument accessors."""

    def test_declared_stack_deduplicates_across_fields(self):
        page = PageDocument.from_text(
            "---\ntech_stack: [Python, Docker]\ntools_stack: [python, Make]\n---\nBody\n"
        )

        assert page.declared_tech_stack == ["Python", "Docker", "Make"]

    def test_title_falls_back_to_h1(self):
        page = PageDocument.from_text("# Heading Title\n\nText\n")

        assert page.title == "Heading Title"

    def test_frontmatter_title_wins(self):
        page = PageDocument.from_text("---\ntitle: Real Title\n---\n# Other\n")

        assert page.title == "Real Title"

    def test_layout_is_lowercased(self):
        page = PageDocument.from_text("---\nlayout: Tutorial\n---\nBody\n")

        assert page.layout == "tutorial"

    def test_word_count_excludes_title(self):
        page = PageDocument.from_text("---\ntitle: Many title words here\n---\n" + "word " * 450)

        assert page.word_count == 450
        assert page.reading_time_minutes == 2

    def test_reading_time_is_at_least_one_minute(self):
        page = PageDocument.from_text("")

        assert page.word_count == 0
        assert page.reading_time_minutes == 1

    def test_get_signals_and_segments_filters(self):
        page = PageDocument.from_text(
            "---\ntitle: T\n---\n## Setup\n\n```bash\nls\n```\n\nSome text.\n"
        )

        assert [s.kind for s in page.get_signals()] == ["heading", "code_block"]
        assert [s.language for s in page.get_signals("code_block")] == ["bash"]
        assert [s.text for s in page.get_segments({"title", "h2"})] == ["T", "Setup"]


@pytest.mark.unit
class TestFromText:
    """Tests for PageDocument.from_text."""

    def test_malformed_frontmatter_warns(self):
        with pytest.warns(UserWarning, match="Malformed frontmatter"):
            page = PageDocument.from_text("---\ntitle: [oops\n---\nBody text\n")

        assert page.frontmatter == {}
        assert page.warnings
        assert page.body_text == "Body text"

    def test_url_from_permalink(self):
        page = PageDocument.from_text("---\npermalink: /hello/\n---\nHi\n")

        assert page.url == "/hello/"

    def test_url_from_source_path(self):
        page = PageDocument.from_text("Hi\n", source_path="about.md")

        assert page.url == "/about.html"

    def test_explicit_url(self):
        page = PageDocument.from_text("Hi\n", url="/x/")

        assert page.url == "/x/"


@pytest.mark.unit
class TestFromFile:
    """Tests for PageDocument.from_file."""

    @pytest.fixture
    def post(self, tmp_path):
        path = tmp_path / "site" / "_posts" / "2025-01-02-hello.md"
        path.parent.mkdir(parents=True)
        path.write_text("---\ntitle: Hello\n---\nHi\n", encoding="utf-8")
        return path

    def test_url_follows_permalink_style(self, post, tmp_path):
        site_root = tmp_path / "site"

        assert PageDocument.from_file(post, site_root).url == "/2025/01/02/hello.html"
        assert (
            PageDocument.from_file(post, site_root, permalink_style="pretty").url
            == "/2025/01/02/hello/"
        )

    def test_page_outside_site_root_raises(self, post, tmp_path):
        with pytest.raises(ValueError, match="not inside site root"):
            PageDocument.from_file(post, site_root=tmp_path / "other")


@pytest.mark.unit
class TestFromRecord:
    """Tests for PageDocument.from_record."""

    def test_builds_signals_and_segments(self):
        page = PageDocument.from_record(
            {
                "frontmatter": {"title": "Install", "layout": "docs"},
                "structuralSignals": [
                    {"type": "heading", "text": "Setup", "level": 2},
                    {"type": "code_block", "language": "Bash"},
                    {"type": "table", "headers": ["Option", "Default"]},
                ],
                "bodyText": "First para.\n\nSecond para.",
                "declaredTechStack": ["Bash"],
                "url": "/docs/install/",
            }
        )

        assert [s.kind for s in page.signals] == ["heading", "code_block", "table"]
        assert page.signals[0].position == "h2"
        assert page.signals[1].language == "bash"
        assert page.signals[2].text == "Option Default"
        assert [(s.text, s.position) for s in page.segments] == [
            ("Install", "title"),
            ("Setup", "h2"),
            ("First para.", "first_paragraph"),
            ("Second para.", "body"),
        ]
        assert page.declared_tech_stack == ["Bash"]
        assert page.url == "/docs/install/"

    def test_frontmatter_stack_wins_over_record_stack(self):
        page = PageDocument.from_record(
            {
                "frontmatter": {"tech_stack": ["Python"], "permalink": "/p/"},
                "declaredTechStack": ["Bash"],
            }
        )

        assert page.declared_tech_stack == ["Python"]
        assert page.url == "/p/"

    def test_untyped_signals_are_skipped(self):
        page = PageDocument.from_record({"structuralSignals": [{"text": "no type"}]})

        assert page.signals == []
        assert page.url == "/"
