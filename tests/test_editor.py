"""Tests for Markdown rendering and the rendered-editor round trip."""

from github_repo_explorer.editor import (
    html_to_markdown,
    markdown_to_html,
    render_markdown_text,
)


class TestRenderMarkdown:
    """Tests for render_markdown_text."""

    def test_basic_markdown(self):
        html = render_markdown_text("# Title\n\nSome *emphasis*.")

        assert "<h1>Title</h1>" in html
        assert "<em>emphasis</em>" in html

    def test_fenced_code_and_tables(self):
        text = "```\ncode here\n```\n\n| a | b |\n|---|---|\n| 1 | 2 |\n"
        html = render_markdown_text(text)

        assert "<code>code here" in html
        assert "<table>" in html

    def test_empty_text(self):
        assert render_markdown_text("") == ""

    def test_safe_escapes_raw_html(self):
        html = render_markdown_text("Hi <script>alert(1)</script>", safe=True)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_unsafe_keeps_raw_html(self):
        html = render_markdown_text("Hi <b>there</b>")

        assert "<b>there</b>" in html


class TestRoundTrip:
    """Tests for the lossy source -> rendered -> source conversion."""

    def test_simple_document_survives(self):
        source = "# Title\n\nHello *world*.\n"

        assert html_to_markdown(markdown_to_html(source)) == source

    def test_list_uses_dash_bullets(self):
        result = html_to_markdown("<ul><li>one</li><li>two</li></ul>")

        assert result == "- one\n- two\n"

    def test_setext_heading_becomes_atx(self):
        """The round trip is not the identity."""
        source = "Guide\n=====\n\nRead the docs.\n"

        result = html_to_markdown(markdown_to_html(source))

        assert result != source
        assert result.startswith("# Guide")

    def test_second_round_trip_is_stable(self):
        source = "Guide\n=====\n\nSome **bold** and a [link](http://x.test).\n\n* a\n* b\n"

        once = html_to_markdown(markdown_to_html(source))
        twice = html_to_markdown(markdown_to_html(once))

        assert twice == once

    def test_empty_html(self):
        assert html_to_markdown("") == ""
        assert html_to_markdown("   ") == ""

    def test_no_runs_of_blank_lines(self):
        result = html_to_markdown("<p>a</p><br><br><br><p>b</p>")

        assert "\n\n\n" not in result
