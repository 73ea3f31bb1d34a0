from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .content import Article
from .frontmatter import Difficulty


def article_sort_key(article: Article) -> tuple:
    """Newest first, undated last, ties broken by id ascending."""
    if article.published_date is None:
        return (1, 0, article.id)
    return (0, -article.published_date.toordinal(), article.id)


def tag_sort_key(tag: str) -> tuple[str, str]:
    return (tag.casefold(), tag)


class ArticleCollection(Sequence[Article]):
    """Ordered, read-only list of Articles for templates and code.

    Articles are always kept in ``article_sort_key`` order, so every view
    derived from a collection is deterministic.
    """

    def __init__(self, articles: Iterable[Article]):
        self._articles = sorted(articles, key=article_sort_key)

    def __iter__(self) -> Iterator[Article]:
        return iter(self._articles)

    def __len__(self) -> int:
        return len(self._articles)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return ArticleCollection(self._articles[item])
        return self._articles[item]

    def get(self, article_id: str) -> Article | None:
        for article in self._articles:
            if article.id == article_id:
                return article
        return None

    def with_tag(self, tag: str) -> ArticleCollection:
        return ArticleCollection(a for a in self._articles if tag in a.tags)

    def with_difficulty(self, difficulty: Difficulty | str) -> ArticleCollection:
        level = Difficulty(difficulty) if isinstance(difficulty, str) else difficulty
        return ArticleCollection(a for a in self._articles if a.difficulty is level)

    def drafts(self) -> ArticleCollection:
        return ArticleCollection(a for a in self._articles if a.draft)

    def published(self) -> ArticleCollection:
        return ArticleCollection(a for a in self._articles if not a.draft)

    def latest(self, count: int = 5) -> ArticleCollection:
        return ArticleCollection(self._articles[:count])

    def ids(self) -> list[str]:
        return [a.id for a in self._articles]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"ArticleCollection({len(self._articles)} articles)"


class TagCollection(Mapping[str, ArticleCollection]):
    """Mapping of tag name to ArticleCollection, iterated in tag order."""

    def __init__(self, mapping: Mapping[str, Iterable[Article]]):
        self._mapping = {
            tag: ArticleCollection(mapping[tag]) for tag in sorted(mapping, key=tag_sort_key)
        }

    def __getitem__(self, key: str) -> ArticleCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
