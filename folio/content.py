"""Content processing for Folio.

This module discovers article files, parses their front matter, renders
their bodies and creates the immutable Article records the rest of the
build works with.

Key classes:
- Article: Frozen dataclass for a parsed and rendered article.
- RawDocument: A file's path and raw text, before parsing.
- FileContentLoader: Discovers and reads content files (NotFound / IOError).
- ArticleBuilder: Turns a RawDocument into an Article.
- ContentProcessor: Facade running loader and builder over a content root,
  collecting per-file errors instead of stopping at the first one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from .errors import (
    ContentError,
    ContentNotFoundError,
    ContentReadError,
    DuplicateArticleError,
)
from .frontmatter import ArticleMetadata, Difficulty, FrontMatterParser
from .protocols import ContentLoader, DocumentBuilder, MetadataParser
from .renderers import Heading, RendererRegistry, default_renderer_registry
from .utils import dialect_for_path, estimate_read_time, first_paragraph, is_internal_path, slugify


@dataclass(frozen=True)
class Article:
    """A parsed and rendered article.

    Attributes:
        id: Unique identifier from front matter.
        title: Human-readable title.
        tldr: Short summary; empty when the author gave none.
        tags: Ordered tags.
        difficulty: Article level.
        read_time_minutes: Declared or estimated reading time.
        published_date: Optional publication date.
        related_topics: Ordered ids of related articles, as declared.
        body: Raw body markup.
        content: Rendered HTML.
        source_path: Path to the source file.
        slug: URL-friendly form of the id.
        url: URL path of the article page.
        dialect: Markup dialect the body was rendered as.
        draft: Whether the source file is a draft (underscore prefix).
        toc: Headings for the table of contents.
        frontmatter: Raw front-matter mapping, unknown keys included.
    """

    id: str
    title: str
    tldr: str
    tags: tuple[str, ...]
    difficulty: Difficulty
    read_time_minutes: int
    published_date: date | None
    related_topics: tuple[str, ...]
    body: str
    content: str
    source_path: Path
    slug: str
    url: str
    dialect: str
    draft: bool = False
    toc: tuple[Heading, ...] = ()
    frontmatter: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def metadata(self) -> ArticleMetadata:
        """The structured front-matter record for this article."""
        return ArticleMetadata(
            id=self.id,
            title=self.title,
            tldr=self.tldr,
            tags=self.tags,
            difficulty=self.difficulty,
            read_time_minutes=self.read_time_minutes,
            published_date=self.published_date,
            related_topics=self.related_topics,
        )

    @property
    def summary(self) -> str:
        """The tldr, or the body's first paragraph when there is none."""
        return self.tldr or first_paragraph(self.body)


@dataclass(frozen=True)
class RawDocument:
    """A content file's path and raw text."""

    path: Path
    text: str


@dataclass
class LoadResult:
    """Documents read from a content root plus the files that failed."""

    documents: list[RawDocument] = field(default_factory=list)
    errors: list[ContentError] = field(default_factory=list)


@dataclass
class ContentResult:
    """Articles built from a content root plus every per-file error.

    Attributes:
        articles: Successfully built articles, in path order.
        errors: IOError, MalformedMetadata and DuplicateId errors.
    """

    articles: list[Article] = field(default_factory=list)
    errors: list[ContentError] = field(default_factory=list)


class FileContentLoader:
    """Discovers and reads content files under a content root.

    Directories starting with ``_`` or ``.`` are skipped. Files starting
    with ``_`` are drafts and only included on request.

    Attributes:
        content_dir: Directory containing article files.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List content files in a stable order.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            Sorted list of paths to content files.

        Raises:
            ContentNotFoundError: If the content root is missing.
        """
        if not self.content_dir.is_dir():
            raise ContentNotFoundError(
                self.content_dir, "content directory does not exist"
            )
        files: list[Path] = []
        for path in self.content_dir.rglob("*"):
            if path.is_dir():
                continue
            rel = path.relative_to(self.content_dir)
            if is_internal_path(rel) or rel.name.startswith("."):
                continue
            if rel.name.startswith("_") and not include_drafts:
                continue
            if dialect_for_path(path) is not None:
                files.append(path)
        return sorted(files)

    def load(self, include_drafts: bool = False) -> LoadResult:
        """Read every content file; unreadable files become errors.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            LoadResult with the readable documents and the read errors.
        """
        result = LoadResult()
        for path in self.iter_files(include_drafts):
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                result.errors.append(
                    ContentReadError(path, f"could not read file: {exc}", exc)
                )
                continue
            result.documents.append(RawDocument(path=path, text=text))
        return result


class ArticleBuilder:
    """Builds Article objects from raw documents.

    Attributes:
        parser: Front-matter parser.
        renderer_registry: Registry of body renderers.
    """

    def __init__(
        self,
        parser: MetadataParser | None = None,
        renderer_registry: RendererRegistry | None = None,
    ):
        self.parser = parser or FrontMatterParser()
        self.renderer_registry = renderer_registry or default_renderer_registry

    def build(self, document: RawDocument) -> Article:
        """Parse and render one document.

        Raises:
            MalformedMetadataError: If the front matter is invalid.
        """
        parsed = self.parser.parse(document.text, document.path)
        meta = parsed.metadata
        dialect = str(parsed.frontmatter.get("format") or dialect_for_path(document.path) or "text")
        html, toc = self.renderer_registry.render(parsed.body, dialect)
        read_time = meta.read_time_minutes
        if read_time is None:
            read_time = estimate_read_time(parsed.body)
        slug = slugify(meta.id)

        return Article(
            id=meta.id,
            title=meta.title,
            tldr=meta.tldr,
            tags=meta.tags,
            difficulty=meta.difficulty,
            read_time_minutes=read_time,
            published_date=meta.published_date,
            related_topics=meta.related_topics,
            body=parsed.body,
            content=html,
            source_path=document.path,
            slug=slug,
            url=f"/articles/{slug}/",
            dialect=dialect.lower(),
            draft=document.path.name.startswith("_"),
            toc=tuple(toc),
            frontmatter=parsed.frontmatter,
        )


class ContentProcessor:
    """Loads, parses and renders every article under a content root.

    A bad file never stops the others: its error is collected and the
    remaining files are still processed.

    Attributes:
        content_dir: Directory containing article files.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: ContentLoader | None = None,
        article_builder: DocumentBuilder | None = None,
    ):
        self.content_dir = content_dir
        self._content_loader = content_loader or FileContentLoader(content_dir)
        self._article_builder = article_builder or ArticleBuilder()

    def load(self, include_drafts: bool = False) -> ContentResult:
        """Build all articles, collecting per-file errors.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            ContentResult with articles and errors.

        Raises:
            ContentNotFoundError: If the content root is missing.
        """
        loaded = self._content_loader.load(include_drafts)
        result = ContentResult(errors=list(loaded.errors))
        claimed_ids: dict[str, Path] = {}
        claimed_slugs: dict[str, Path] = {}
        for document in loaded.documents:
            try:
                article = self._article_builder.build(document)
            except ContentError as exc:
                result.errors.append(exc)
                continue
            if article.id in claimed_ids:
                result.errors.append(
                    DuplicateArticleError(
                        document.path,
                        f"id '{article.id}' is already used by {claimed_ids[article.id]}",
                    )
                )
                continue
            if article.slug in claimed_slugs:
                result.errors.append(
                    DuplicateArticleError(
                        document.path,
                        f"id '{article.id}' maps to URL {article.url} already used by "
                        f"{claimed_slugs[article.slug]}",
                    )
                )
                continue
            claimed_ids[article.id] = document.path
            claimed_slugs[article.slug] = document.path
            result.articles.append(article)
        result.errors.sort(key=lambda err: str(err.source_path))
        return result
