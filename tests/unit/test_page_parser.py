"""
Unit tests for page parsing.

Tests frontmatter splitting, structural extraction and positioned text
segments in scout.contexts.intake.page_parser.
"""

import pytest

from scout.contexts.intake.page_parser import (
    extract_structure,
    frontmatter_segments,
    parse_page_text,
    split_frontmatter,
)


def kinds(signals):
    return [s.kind for s in signals]


@pytest.mark.unit
class TestSplitFrontmatter:
    """Tests for split_frontmatter."""

    def test_valid_block(self):
        frontmatter, body, warnings = split_frontmatter("---\ntitle: Hello\ntags: [a, b]\n---\nBody\n")

        assert frontmatter == {"title": "Hello", "tags": ["a", "b"]}
        assert body == "Body\n"
        assert warnings == []

    def test_no_frontmatter(self):
        frontmatter, body, warnings = split_frontmatter("# Just markdown\n")

        assert frontmatter == {}
        assert body == "# Just markdown\n"
        assert warnings == []

    def test_empty_block(self):
        frontmatter, body, warnings = split_frontmatter("---\n---\nBody")

        assert frontmatter == {}
        assert body == "Body"
        assert warnings == []

    def test_malformed_yaml_warns(self):
        frontmatter, body, warnings = split_frontmatter("---\ntitle: [unclosed\n---\nBody")

        assert frontmatter == {}
        assert body == "Body"
        assert len(warnings) == 1
        assert "Malformed frontmatter" in warnings[0]

    def test_non_mapping_warns(self):
        frontmatter, _, warnings = split_frontmatter("---\n- a\n- b\n---\nBody")

        assert frontmatter == {}
        assert "expected a mapping" in warnings[0]

    def test_unclosed_block_warns(self):
        frontmatter, body, warnings = split_frontmatter("---\ntitle: Hello\nBody")

        assert frontmatter == {}
        assert body.startswith("---")
        assert "never closed" in warnings[0]


@pytest.mark.unit
class TestExtractStructure:
    """Tests for extract_structure."""

    def test_headings_get_positions(self):
        signals, segments, _ = extract_structure("# Big Title\n\n## Setup\n\n### Details **now**\n")

        assert [(s.text, s.position, s.level) for s in signals] == [
            ("Big Title", "hero", 1),
            ("Setup", "h2", 2),
            ("Details now", "h3", 3),
        ]
        assert [s.position for s in segments] == ["hero", "h2", "h3"]

    def test_code_fence_language_and_comments(self):
        body = "```python\n#!/usr/bin/env python\n# load the data\nx = 1\n```\n"

        signals, segments, warnings = extract_structure(body)

        assert kinds(signals) == ["code_block"]
        assert signals[0].language == "python"
        assert [(s.text, s.position) for s in segments] == [("load the data", "code_comment")]
        assert warnings == []

    def test_code_fence_contents_are_not_headings(self):
        signals, _, _ = extract_structure("```bash\n# not a heading\n```\n\n## Real\n")

        assert kinds(signals) == ["code_block", "heading"]

    def test_unclosed_fence_warns(self):
        signals, _, warnings = extract_structure("Intro\n\n```python\nprint(1)\n")

        assert kinds(signals) == ["code_block"]
        assert warnings == ["Unclosed code fence opened at line 3"]

    def test_highlight_block(self):
        signals, _, _ = extract_structure("{% highlight ruby %}\nputs 1\n{% endhighlight %}\n")

        assert kinds(signals) == ["code_block"]
        assert signals[0].language == "ruby"

    def test_table_headers(self):
        body = "| Option | Default |\n|---|:---:|\n| data_file | out.json |\n"

        signals, segments, _ = extract_structure(body)

        assert kinds(signals) == ["table"]
        assert signals[0].headers == ("Option", "Default")
        assert signals[0].text == "Option Default"
        assert segments[0].text == "Option Default data_file out.json"

    def test_ordered_list_counts_once(self):
        body = "1. First\n2. Second\n   continued\n3. Third\n\nText\n\n1. Again\n"

        signals, _, _ = extract_structure(body)

        assert kinds(signals) == ["ordered_list", "ordered_list"]

    def test_chip_and_callout_includes(self):
        body = (
            '{% include chip.html name="Python" url="/tags/python/" %}\n\n'
            "{% include callout.html type=\"Warning\" content='Back up first' %}\n\n"
            '{% include footer.html %}\n'
        )

        signals, segments, _ = extract_structure(body)

        assert [(s.kind, s.text) for s in signals] == [("chip", "Python"), ("callout", "warning")]
        assert [s.text for s in segments] == ["Back up first"]

    def test_paragraph_positions(self):
        body = "First *paragraph* with a [link](https://example.com).\n\nSecond one.\n"

        _, segments, _ = extract_structure(body)

        assert [(s.text, s.position) for s in segments] == [
            ("First paragraph with a link.", "first_paragraph"),
            ("Second one.", "body"),
        ]

    def test_liquid_output_is_stripped(self):
        _, segments, _ = extract_structure("Hello {{ site.title }} readers\n")

        assert segments[0].text == "Hello readers"


@pytest.mark.unit
def test_frontmatter_segments():
    segments = frontmatter_segments(
        {"title": "A *Guide*", "description": "What it covers", "tags": ["x"], "excerpt": 3}
    )

    assert [(s.text, s.position) for s in segments] == [
        ("A Guide", "title"),
        ("What it covers", "hero"),
    ]


@pytest.mark.unit
def test_parse_page_text_normalizes_before_parsing():
    text = "---\r\ntitle: Don\u2019t panic\r\n---\r\n\r\nWe don\u2019t use Django.\r\n"

    parsed = parse_page_text(text)

    assert parsed.frontmatter == {"title": "Don't panic"}
    assert parsed.raw_text == text
    assert [s.text for s in parsed.segments] == ["Don't panic", "We don't use Django."]
