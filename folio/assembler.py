"""Site assembly for Folio.

Given every parsed article, the assembler builds the listings the site is
made of and resolves related-topic references into cross-links. It runs as
a single step after all articles have been built.

Key classes:
- SiteIndex: The assembled, deterministically ordered view of the site.
- SiteAssembler: Builds a SiteIndex from a set of articles.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .collections import ArticleCollection, TagCollection
from .content import Article
from .errors import BrokenReference
from .frontmatter import Difficulty
from .utils import slugify


@dataclass
class SiteIndex:
    """Everything the page renderer needs about the set of articles.

    Attributes:
        articles: All articles, newest first, ties broken by id.
        tags: Tag -> articles, tags in case-insensitive order.
        difficulties: Difficulty -> articles, in level order; every level
            is present even when empty.
        related: Article id -> resolved related articles.
        warnings: Related-topic references that did not resolve.
    """

    articles: ArticleCollection
    tags: TagCollection
    difficulties: dict[Difficulty, ArticleCollection]
    related: dict[str, list[Article]] = field(default_factory=dict)
    warnings: list[BrokenReference] = field(default_factory=list)

    def related_to(self, article: Article) -> list[Article]:
        return self.related.get(article.id, [])


class SiteAssembler:
    """Builds the tag and difficulty listings and resolves cross-links.

    Ordering never depends on input order: the same set of articles always
    yields the same SiteIndex.
    """

    def __init__(self, articles: Iterable[Article]):
        self.articles = ArticleCollection(articles)

    def assemble(self) -> SiteIndex:
        """Assemble the site index.

        Returns:
            SiteIndex with listings, resolved links and broken-link warnings.
        """
        related, warnings = self._resolve_related()
        return SiteIndex(
            articles=self.articles,
            tags=self._tags_index(),
            difficulties={
                level: self.articles.with_difficulty(level) for level in Difficulty
            },
            related=related,
            warnings=warnings,
        )

    def _tags_index(self) -> TagCollection:
        """Group articles by tag page.

        Tags sharing a URL slug (``Kotlin``, ``kotlin``) share one page, named
        after the first spelling seen in article order.
        """
        tags: dict[str, list[Article]] = {}
        names: dict[str, str] = {}
        for article in self.articles:
            for tag in article.tags:
                listed = tags.setdefault(names.setdefault(slugify(tag), tag), [])
                # An article repeating a tag is listed once.
                if not listed or listed[-1] is not article:
                    listed.append(article)
        return TagCollection(tags)

    def _resolve_related(self) -> tuple[dict[str, list[Article]], list[BrokenReference]]:
        by_id = {article.id: article for article in self.articles}
        related: dict[str, list[Article]] = {}
        warnings: list[BrokenReference] = []
        for article in sorted(self.articles, key=lambda a: a.id):
            links: list[Article] = []
            for target_id in dict.fromkeys(article.related_topics):
                target = by_id.get(target_id)
                if target is None:
                    warnings.append(
                        BrokenReference(
                            source_path=article.source_path,
                            article_id=article.id,
                            target_id=target_id,
                        )
                    )
                    continue
                links.append(target)
            related[article.id] = links
        return related, warnings


def assemble_site(articles: Iterable[Article]) -> SiteIndex:
    """Shortcut for ``SiteAssembler(articles).assemble()``."""
    return SiteAssembler(articles).assemble()
