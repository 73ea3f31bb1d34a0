"""Template rendering engine for Folio.

This module uses Jinja2 to render article pages and listing pages.
Templates are looked up in the project's ``templates/`` directory first and
in the built-in ``folio/layouts`` directory second, so a project can
override any single layout by dropping a file with the same name.

Key class:
- TemplateEngine: Handles template rendering and provides context to templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape
from pygments.formatters import HtmlFormatter

from .assembler import SiteIndex
from .content import Article
from .frontmatter import Difficulty
from .html_utils import join_root_url
from .renderers import Heading
from .utils import slugify

LAYOUTS_DIR = Path(__file__).parent / "layouts"

__all__ = ["LAYOUTS_DIR", "TemplateEngine", "render_toc"]


def render_toc(article: Article, min_level: int = 2) -> Markup:
    """Render a table of contents as nested HTML from article headings.

    The article title is usually the only level-1 heading, so headings
    above ``min_level`` are left out by default.

    Args:
        article: Article whose headings to render.
        min_level: Shallowest heading level to include.

    Returns:
        Markup-safe nested ``<ul>`` list, or empty Markup without headings.
    """
    headings = [h for h in article.toc if h.level >= min_level]
    return _render_toc_from_headings(headings)


def _render_toc_from_headings(headings: list[Heading]) -> Markup:
    if not headings:
        return Markup("")

    html_parts: list[str] = []
    level_stack: list[int] = []

    for heading in headings:
        level = heading.level
        while level_stack and level_stack[-1] > level:
            level_stack.pop()
            html_parts.append("</li></ul>")
        if level_stack and level_stack[-1] == level:
            html_parts.append("</li>")
        else:
            html_parts.append("<ul>")
            level_stack.append(level)
        html_parts.append(f'<li><a href="#{escape(heading.id)}">{escape(heading.text)}</a>')

    while level_stack:
        level_stack.pop()
        html_parts.append("</li></ul>")

    return Markup("".join(html_parts))


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        templates_dir: Project directory holding layout overrides.
        data: Global site data.
        root_url: Optional base URL applied by ``url_for``.
        env: Jinja2 environment.
        site: The assembled site index, once set.
    """

    def __init__(
        self,
        templates_dir: Path | None,
        data: dict[str, Any],
        root_url: str | None = None,
    ):
        self.templates_dir = templates_dir
        self.data = data
        self.root_url = root_url or ""
        loaders = []
        if templates_dir is not None and templates_dir.is_dir():
            loaders.append(FileSystemLoader(str(templates_dir)))
        loaders.append(FileSystemLoader(str(LAYOUTS_DIR)))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.site: SiteIndex | None = None
        self._install_globals()

    def _install_globals(self) -> None:
        """Install global variables and functions in the Jinja environment."""
        self.env.globals["data"] = self.data
        self.env.globals["url_for"] = self.url_for
        self.env.globals["pygments_css"] = self._pygments_css
        self.env.globals["render_toc"] = render_toc
        self.env.globals["difficulty_levels"] = list(Difficulty)
        self.env.filters["slugify"] = slugify
        self.env.filters["date"] = _format_date

    @staticmethod
    def _pygments_css() -> Markup:
        """Return Pygments CSS styles for the .highlight class."""
        return Markup(HtmlFormatter().get_style_defs(".highlight"))

    def update_index(self, site: SiteIndex) -> None:
        """Expose the assembled site to every template.

        Args:
            site: Assembled site index.
        """
        self.site = site
        self.env.globals["site"] = site
        self.env.globals["articles"] = site.articles
        self.env.globals["tags"] = site.tags
        self.env.globals["difficulties"] = site.difficulties

    def url_for(self, path: str) -> str:
        """Generate a URL for a path, applying root_url if configured.

        Args:
            path: Site path such as "/articles/flows/".

        Returns:
            Absolute URL when a root_url is set, otherwise a root-relative path.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        normalized = path if path.startswith("/") else f"/{path}"
        return join_root_url(self.root_url, normalized)

    def render_article(self, article: Article) -> str:
        """Render an article page.

        The layout is ``article.html.jinja`` unless the article's front
        matter names another one with ``layout``.
        """
        layout = str(article.frontmatter.get("layout") or "article")
        related = self.site.related_to(article) if self.site else []
        return self.render(
            f"{layout}.html.jinja",
            article=article,
            related=related,
            page_title=article.title,
            page_content=Markup(article.content),
        )

    def render(self, template_name: str, **context: Any) -> str:
        """Render a named template with extra context.

        Args:
            template_name: Template file name, e.g. "index.html.jinja".
            **context: Variables for the template.

        Returns:
            Rendered string.
        """
        template = self.env.get_template(template_name)
        return template.render(**context)

    def render_string(self, template: str, context: dict[str, Any]) -> str:
        """Render a template string."""
        return self.env.from_string(template).render(**context)


def _format_date(value, fmt: str = "%b %d, %Y") -> str:
    if value is None:
        return ""
    return value.strftime(fmt)
