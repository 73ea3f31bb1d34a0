"""Content renderers for Folio.

This module turns an article body into HTML. Each renderer handles one
markup dialect; the registry maps a dialect name to its renderer.

Rendering never fails the build: markup a renderer cannot handle degrades
to escaped literal text.

Key classes:
- Heading: A heading collected for the table of contents.
- RenderResult: (html, toc) pair returned by the registry.
- MarkdownRenderer: Renders Markdown to HTML with syntax highlighting.
- HTMLRenderer: Passes through HTML content.
- TextRenderer: Renders plain text as an escaped, preformatted block.
- RendererRegistry: Dialect -> renderer lookup with a literal-text fallback.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .html_utils import escape_html

_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class Heading:
    """Represents a heading extracted from markdown content for TOC generation.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: The plain text content of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


class RenderResult(NamedTuple):
    """Rendered HTML and the headings collected for the table of contents."""

    html: str
    toc: list[Heading]


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text, possibly containing inline HTML.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = _TAG_RE.sub("", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-") or "section"


def _rewrite_image_path(src: str) -> str:
    """Point relative image sources at the copied assets directory."""
    if src.startswith(("http://", "https://", "//", "/", "data:")):
        return src
    if src.startswith("./"):
        src = src[2:]
    return f"/assets/images/{src}"


class _HighlightRenderer(mistune.HTMLRenderer):
    """Markdown renderer adding heading anchors, image rewriting and Pygments.

    Attributes:
        headings: Headings collected while rendering, in document order.
    """

    def __init__(self):
        super().__init__(escape=False)
        self.headings: list[Heading] = []
        self._heading_id_counts: dict[str, int] = {}
        self._issued_ids: set[str] = set()

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        heading_id = base_id
        count = self._heading_id_counts.get(base_id, 0)
        # A suffixed id may collide with a later literal heading (A, A, A-1).
        while heading_id in self._issued_ids:
            count += 1
            heading_id = f"{base_id}-{count}"
        self._heading_id_counts[base_id] = count
        self._issued_ids.add(heading_id)

        plain = _TAG_RE.sub("", text).strip()
        self.headings.append(Heading(id=heading_id, text=plain, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def image(self, text: str, url: str, title: str | None = None) -> str:
        return super().image(text, _rewrite_image_path(url or ""), title)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a fenced block, highlighted when the language is known.

        Unknown languages fall back to an escaped ``<pre><code>`` block.
        """
        language = info.split()[0] if info and info.strip() else ""
        if language:
            try:
                lexer = get_lexer_by_name(language, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(cssclass="highlight")
                return highlight(code, lexer, formatter)
        lang_class = f' class="language-{escape_html(language)}"' if language else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"


class TextRenderer:
    """Renders text literally: escaped and preformatted.

    Also serves as the fallback for dialects and markup nothing else handles.
    """

    @property
    def dialect(self) -> str:
        return "text"

    def render(self, content: str) -> tuple[str, list[Heading]]:
        return f'<pre class="literal">{escape_html(content)}</pre>\n', []


class MarkdownRenderer:
    """Renders Markdown content to HTML.

    Uses mistune with tables, strikethrough, footnotes and autolinks, and
    collects headings for the table of contents.
    """

    plugins = ["strikethrough", "footnotes", "table", "url"]

    @property
    def dialect(self) -> str:
        return "markdown"

    def render(self, content: str) -> tuple[str, list[Heading]]:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.

        Returns:
            Tuple of (rendered HTML, list of Heading objects).
        """
        renderer = _HighlightRenderer()
        markdown = mistune.create_markdown(renderer=renderer, plugins=self.plugins)
        try:
            html = markdown(content)
        except Exception:
            # A parser failure must not fail the build; show the source instead.
            return TextRenderer().render(content)
        return html, renderer.headings


class HTMLRenderer:
    """Passes through HTML content unchanged."""

    @property
    def dialect(self) -> str:
        return "html"

    def render(self, content: str) -> tuple[str, list[Heading]]:
        return content, []


class RendererRegistry:
    """Registry mapping dialect names to renderers.

    New dialects can be registered without modifying existing renderers.
    Unknown dialects resolve to the literal text renderer.
    """

    def __init__(self):
        self._renderers: dict[str, object] = {}
        self._fallback = TextRenderer()
        self.register(MarkdownRenderer())
        self.register(HTMLRenderer())
        self.register(self._fallback)

    def register(self, renderer) -> None:
        """Register a renderer under its dialect name.

        Args:
            renderer: A ContentRenderer implementation.
        """
        self._renderers[renderer.dialect] = renderer

    def get_renderer(self, dialect: str | None):
        """Get the renderer for a dialect, or the literal text fallback."""
        if dialect is None:
            return self._fallback
        return self._renderers.get(dialect.lower(), self._fallback)

    def render(self, body: str, dialect: str | None) -> RenderResult:
        """Render a body in the given dialect.

        Args:
            body: Article body.
            dialect: Markup dialect name such as "markdown".

        Returns:
            RenderResult with the HTML and headings.
        """
        html, toc = self.get_renderer(dialect).render(body)
        return RenderResult(html, toc)


# Default renderer registry instance
default_renderer_registry = RendererRegistry()


def render(body: str, dialect: str | None) -> RenderResult:
    """Render a body with the default registry."""
    return default_renderer_registry.render(body, dialect)
