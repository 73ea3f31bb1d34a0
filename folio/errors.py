"""Error kinds reported while loading and assembling content.

Every error carries the path of the offending file so the CLI can point the
author at it. Only ContentNotFoundError is fatal for a whole build; the other
errors reject a single file and are collected so that all bad files are
reported in one pass.

Classes:
    ContentError: Base class for per-file content errors.
    ContentNotFoundError: The content root does not exist (NotFound).
    ContentReadError: A content file could not be read (IOError).
    MalformedMetadataError: The front matter is missing or invalid.
    DuplicateArticleError: Two files declare the same article id.
    BrokenReference: Warning record for a dangling related-topic id.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ContentError(Exception):
    """Error tied to a single content file.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception, when one was caught.
    """

    kind = "ContentError"

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


class ContentNotFoundError(ContentError):
    """The content root is missing or is not a directory."""

    kind = "NotFound"


class ContentReadError(ContentError):
    """A content file exists but could not be read or decoded."""

    kind = "IOError"


class MalformedMetadataError(ContentError):
    """The metadata block is absent, ill-formed, or lacks required fields."""

    kind = "MalformedMetadata"


class DuplicateArticleError(ContentError):
    """A file declares an id already claimed by another file."""

    kind = "DuplicateId"


@dataclass(frozen=True)
class BrokenReference:
    """A related-topic reference pointing at an id no article declares.

    Attributes:
        source_path: File of the article holding the reference.
        article_id: Id of the article holding the reference.
        target_id: The related-topic id that could not be resolved.
    """

    source_path: Path
    article_id: str
    target_id: str

    kind = "BrokenReference"

    @property
    def message(self) -> str:
        return f"related topic '{self.target_id}' of '{self.article_id}' does not exist"

    def __str__(self) -> str:
        return f"{self.source_path}: {self.message}"
