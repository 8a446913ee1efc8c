"""Markdown rendering and the rendered-editor round trip.

``markdown_to_html`` is the source -> rendered transform, ``html_to_markdown``
the lossy rendered -> source one. A source/rendered/source round trip is
not the identity (setext headings come back as ATX headings, underscores
get escaped), but a second round trip reproduces the first one's output.
"""

import re

import markdown
from markdown.extensions import Extension
from markdownify import ATX, markdownify

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]

_BLANK_LINES = re.compile(r"\n{3,}")


class EscapeHtmlExtension(Extension):
    """Treat raw HTML in Markdown source as text instead of passing it through."""

    def extendMarkdown(self, md):
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")


def render_markdown_text(text: str, safe: bool = False) -> str:
    """Render markdown text to HTML.

    Args:
        text: Markdown source.
        safe: Escape raw HTML blocks and tags, for previewing untrusted content.
    """
    if not text:
        return ""
    extensions: list = list(MARKDOWN_EXTENSIONS)
    if safe:
        extensions.append(EscapeHtmlExtension())
    return markdown.markdown(text, extensions=extensions)


def markdown_to_html(text: str) -> str:
    """Render the draft for the rendered (WYSIWYG) editor."""
    return render_markdown_text(text)


def html_to_markdown(html: str) -> str:
    """Convert rendered-editor HTML back to Markdown source."""
    if not html or not html.strip():
        return ""
    text = markdownify(html, heading_style=ATX, bullets="-")
    lines = [line.rstrip() for line in text.splitlines()]
    text = _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip("\n")
    return text + "\n"
