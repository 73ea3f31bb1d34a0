"""Site building functionality for Folio.

This module contains the core logic for building the static site: it loads
configuration and data, processes articles, assembles the site index,
renders every page and writes the output directory.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from folio.yaml.
- load_data: Loads site data from YAML files in the data directory.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateError, TemplateNotFound, TemplateSyntaxError

from .assembler import SiteAssembler, SiteIndex
from .collections import ArticleCollection
from .content import ContentProcessor
from .errors import BrokenReference, ContentError
from .feeds import create_default_feed_registry
from .html_utils import absolutize_html_urls
from .templates import TemplateEngine
from .utils import ensure_clean_dir, slugify

CONFIG_FILENAME = "folio.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content",
    "output_dir": "output",
    "templates_dir": "templates",
    "assets_dir": "assets",
    "port": 4000,
    "ws_port": None,
    "root_url": "",
    "strict": False,
}


class BuildError(Exception):
    """Error while rendering a page, with the file that triggered it.

    Attributes:
        source_path: Path to the article or template that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        site: Assembled site index (articles, tags, related links).
        output_dir: Directory where the site was built.
        data: Global site data dictionary.
        errors: Content files that were rejected.
        pages: URL paths of every page written.
        feeds: Feed filenames written.
    """

    site: SiteIndex
    output_dir: Path
    data: dict[str, Any]
    errors: list[ContentError] = field(default_factory=list)
    pages: list[str] = field(default_factory=list)
    feeds: list[str] = field(default_factory=list)

    @property
    def articles(self) -> ArticleCollection:
        return self.site.articles

    @property
    def warnings(self) -> list[BrokenReference]:
        return self.site.warnings


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from folio.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def load_data(project_root: Path) -> dict[str, Any]:
    """Load site data from YAML files in the data directory.

    ``site.yaml`` is merged at the top level; every other file is stored
    under its stem (``portfolio.yaml`` -> ``data["portfolio"]``).

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing merged data from all YAML files.
    """
    data_dir = project_root / "data"
    data: dict[str, Any] = {}
    if not data_dir.exists():
        return data
    for path in sorted(data_dir.glob("*.yaml")):
        with open(path, encoding="utf-8") as f:
            payload = yaml.safe_load(f)
        if payload is None:
            continue
        if path.name == "site.yaml":
            if isinstance(payload, dict):
                data.update(payload)
            continue
        data[path.stem] = payload
    return data


def load_articles(
    project_root: Path, include_drafts: bool = False
) -> tuple[SiteIndex, list[ContentError]]:
    """Load, parse and assemble every article of a project.

    Raises:
        ContentNotFoundError: If the content directory is missing.
    """
    config = load_config(project_root)
    content_dir = project_root / config.get("content_dir", "content")
    result = ContentProcessor(content_dir).load(include_drafts=include_drafts)
    site = SiteAssembler(result.articles).assemble()
    return site, result.errors


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    root_url: str | None = None,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Articles whose files are unreadable or malformed are left out and
    reported in ``BuildResult.errors``; every other page is still written.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft articles (starting with _).
        root_url: Optional base URL to absolutize links with.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.

    Returns:
        BuildResult with the site index, output directory, data and errors.

    Raises:
        ContentNotFoundError: If the content directory is missing.
        BuildError: If a page template fails to render.
    """
    config = load_config(project_root)
    if root_url is not None:
        config["root_url"] = root_url
    resolved_root = str(config.get("root_url") or "")

    site, errors = load_articles(project_root, include_drafts=include_drafts)

    output_dir = output_dir_override or (project_root / config.get("output_dir", "output"))
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    data = load_data(project_root)
    if resolved_root:
        data.setdefault("url", resolved_root)

    templates_dir = project_root / config.get("templates_dir", "templates")
    engine = TemplateEngine(templates_dir, data, root_url=resolved_root)
    engine.update_index(site)

    result = BuildResult(site=site, output_dir=output_dir, data=data, errors=errors)
    for url, template, context, source in _page_plan(site, templates_dir):
        try:
            if template is None:
                rendered = engine.render_article(context["article"])
            else:
                rendered = engine.render(template, **context)
        except TemplateSyntaxError as exc:
            raise BuildError(
                Path(exc.filename) if exc.filename else source,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except TemplateNotFound as exc:
            raise BuildError(source, f"Template not found: {exc.name}", exc) from exc
        except (TemplateError, TypeError, AttributeError, ValueError) as exc:
            raise BuildError(source, _format_error_message(exc), exc) from exc
        if resolved_root:
            rendered = absolutize_html_urls(rendered, resolved_root)
        _write_page(output_dir, url, rendered)
        result.pages.append(url)

    _copy_assets(project_root / config.get("assets_dir", "assets"), output_dir / "assets")
    result.feeds = create_default_feed_registry().generate_all(
        output_dir, site.articles, data
    )
    return result


def _page_plan(site: SiteIndex, templates_dir: Path):
    """Yield (url, template, context, source) for every page of the site.

    Article pages have template None and are rendered with their own layout.
    """
    for article in site.articles:
        yield article.url, None, {"article": article}, article.source_path

    yield "/", "index.html.jinja", {"listing": site.articles}, templates_dir / "index.html.jinja"
    yield "/tags/", "tags.html.jinja", {"page_title": "Tags"}, templates_dir / "tags.html.jinja"
    for tag, tagged in site.tags.items():
        yield (
            f"/tags/{slugify(tag)}/",
            "tag.html.jinja",
            {"tag": tag, "listing": tagged, "page_title": f"#{tag}"},
            templates_dir / "tag.html.jinja",
        )
    for level, listed in site.difficulties.items():
        yield (
            f"/difficulty/{level.value}/",
            "difficulty.html.jinja",
            {"level": level, "listing": listed, "page_title": level.label},
            templates_dir / "difficulty.html.jinja",
        )
    yield (
        "/portfolio/",
        "portfolio.html.jinja",
        {"page_title": "Portfolio"},
        templates_dir / "portfolio.html.jinja",
    )
    yield "/404.html", "404.html.jinja", {"page_title": "Not found"}, templates_dir / "404.html.jinja"


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    return f"{error_type}: {exc}"


def _write_page(output_dir: Path, url: str, rendered: str) -> None:
    """Write a rendered page; directory URLs get an index.html."""
    url_path = url.strip("/")
    if url_path.endswith(".html"):
        target = output_dir / url_path
    else:
        target = output_dir / url_path / "index.html"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(rendered, encoding="utf-8")


def _copy_assets(assets_dir: Path, target: Path) -> None:
    """Copy static assets verbatim into the output directory."""
    if not assets_dir.is_dir():
        return
    shutil.copytree(assets_dir, target, dirs_exist_ok=True)
