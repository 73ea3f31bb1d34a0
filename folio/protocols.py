"""Protocol definitions for Folio.

These are the seams the content pipeline is built on. Alternative
implementations (a different markup dialect, a loader reading from an
archive, a stricter parser) only need to satisfy the matching protocol.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import Article, LoadResult, RawDocument
    from .frontmatter import ParsedDocument
    from .renderers import Heading


@runtime_checkable
class ContentRenderer(Protocol):
    """Renders article bodies written in one markup dialect."""

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Return the dialect name (e.g. 'markdown', 'html', 'text')."""
        ...

    @abstractmethod
    def render(self, content: str) -> tuple[str, list[Heading]]:
        """Render content to HTML.

        Args:
            content: Body to render.

        Returns:
            Tuple of (rendered HTML, list of headings for TOC).
        """
        ...


@runtime_checkable
class MetadataParser(Protocol):
    """Splits a content file into validated metadata and body."""

    @abstractmethod
    def parse(self, text: str, path: Path) -> ParsedDocument:
        """Parse raw text.

        Raises:
            MalformedMetadataError: If the metadata block is invalid.
        """
        ...


@runtime_checkable
class ContentLoader(Protocol):
    """Discovers and reads content files."""

    @abstractmethod
    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        ...

    @abstractmethod
    def load(self, include_drafts: bool = False) -> LoadResult:
        ...


@runtime_checkable
class DocumentBuilder(Protocol):
    """Turns one raw document into an Article."""

    @abstractmethod
    def build(self, document: RawDocument) -> Article:
        ...
