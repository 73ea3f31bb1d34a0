"""Feed generation for Folio.

This module generates machine-readable files from the article set:
``sitemap.xml`` and ``rss.xml`` for search engines and feed readers, and
``catalog.json`` with every article's metadata for client-side search or
other tools.

Classes:
    FeedGenerator: Abstract base class for feed generators.
    SitemapGenerator: Generates sitemap.xml files.
    RSSGenerator: Generates RSS 2.0 feed files.
    CatalogGenerator: Generates the JSON article catalog.
    FeedRegistry: Registry for managing feed generators.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime, time, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .html_utils import escape_html, join_root_url

if TYPE_CHECKING:
    from .content import Article


class FeedGenerator(ABC):
    """Abstract base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(
        self,
        articles: Sequence[Article],
        data: dict[str, Any],
    ) -> str | None:
        """Generate feed content from articles.

        Args:
            articles: Articles in site order (newest first).
            data: Site data dictionary containing configuration like base URL.

        Returns:
            Feed content, or None if the feed cannot be generated
            (e.g., missing required configuration).
        """
        ...

    def write(
        self,
        output_dir: Path,
        articles: Sequence[Article],
        data: dict[str, Any],
    ) -> bool:
        """Generate and write the feed to the output directory.

        Returns:
            True if the feed was written, False if skipped.
        """
        content = self.generate(articles, data)
        if content is None:
            return False
        (output_dir / self.filename).write_text(content, encoding="utf-8")
        return True


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml listing the home page and every article.

    Requires 'url' in site data to generate absolute URLs.
    """

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(
        self,
        articles: Sequence[Article],
        data: dict[str, Any],
    ) -> str | None:
        base_url = str(data.get("url", "")).rstrip("/")
        if not base_url:
            return None

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            f"  <url><loc>{escape_html(join_root_url(base_url, '/'))}</loc></url>",
        ]
        for article in articles:
            loc = escape_html(join_root_url(base_url, article.url))
            if article.published_date is not None:
                lastmod = article.published_date.isoformat()
                lines.append(f"  <url><loc>{loc}</loc><lastmod>{lastmod}</lastmod></url>")
            else:
                lines.append(f"  <url><loc>{loc}</loc></url>")
        lines.append("</urlset>")
        return "\n".join(lines)


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed of dated articles, newest first.

    Requires 'url' in site data. Uses 'title' and 'description' from site
    data for the channel, and 'feed_limit' (default 20) for its length.
    """

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(
        self,
        articles: Sequence[Article],
        data: dict[str, Any],
    ) -> str | None:
        base_url = str(data.get("url", "")).rstrip("/")
        if not base_url:
            return None
        title = escape_html(str(data.get("title", "Folio")))
        description = escape_html(str(data.get("description", "")))
        limit = int(data.get("feed_limit", 20))

        dated = [a for a in articles if a.published_date is not None][:limit]
        items = []
        for article in dated:
            link = escape_html(join_root_url(base_url, article.url))
            pub_date = format_datetime(
                datetime.combine(article.published_date, time(), tzinfo=timezone.utc)
            )
            categories = "".join(
                f"<category>{escape_html(tag)}</category>" for tag in dict.fromkeys(article.tags)
            )
            items.append(
                f"<item><title>{escape_html(article.title)}</title><link>{link}</link>"
                f'<guid isPermaLink="true">{link}</guid>'
                f"<description>{escape_html(article.summary)}</description>"
                f"{categories}<pubDate>{pub_date}</pubDate></item>"
            )

        last_build = dated[0].published_date if dated else None
        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{title}</title>",
            f"<link>{escape_html(base_url)}/</link>",
            f"<description>{description}</description>",
        ]
        if last_build is not None:
            build_date = format_datetime(
                datetime.combine(last_build, time(), tzinfo=timezone.utc)
            )
            rss.append(f"<lastBuildDate>{build_date}</lastBuildDate>")
        rss.extend(items)
        rss.append("</channel></rss>")
        return "\n".join(rss)


class CatalogGenerator(FeedGenerator):
    """Generates catalog.json with the metadata of every article.

    Always written; URLs are root-relative unless a site 'url' is set.
    """

    @property
    def filename(self) -> str:
        return "catalog.json"

    def generate(
        self,
        articles: Sequence[Article],
        data: dict[str, Any],
    ) -> str | None:
        base_url = str(data.get("url", "")).rstrip("/")
        entries = []
        for article in articles:
            entries.append(
                {
                    "id": article.id,
                    "title": article.title,
                    "tldr": article.tldr,
                    "tags": list(article.tags),
                    "difficulty": article.difficulty.value,
                    "readTimeMinutes": article.read_time_minutes,
                    "publishedDate": (
                        article.published_date.isoformat() if article.published_date else None
                    ),
                    "relatedTopics": list(article.related_topics),
                    "url": join_root_url(base_url, article.url),
                }
            )
        return json.dumps({"articles": entries}, indent=2, ensure_ascii=False) + "\n"


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(
        self,
        output_dir: Path,
        articles: Iterable[Article],
        data: dict[str, Any],
    ) -> list[str]:
        """Generate all registered feeds.

        Returns:
            List of filenames that were generated.
        """
        article_list = list(articles)
        generated = []
        for generator in self._generators:
            if generator.write(output_dir, article_list, data):
                generated.append(generator.filename)
        return generated


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with the sitemap, RSS and catalog generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    registry.register(CatalogGenerator())
    return registry
