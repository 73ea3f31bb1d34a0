"""Front-matter parsing for Folio.

Every article file starts with a YAML metadata block between two ``---``
lines, followed by the body::

    ---
    id: coroutine-scopes
    title: Understanding Coroutine Scopes
    tldr: Structured concurrency in five minutes.
    tags: [kotlin, coroutines]
    difficulty: intermediate
    readTimeMinutes: 7
    publishedDate: 2024-03-02
    relatedTopics: [flows-101, dispatchers]
    ---
    # Understanding Coroutine Scopes
    ...

Key pieces:
- Difficulty: Enum of the three article levels.
- ArticleMetadata: The validated, immutable metadata record.
- split_front_matter / parse_front_matter: Text -> (metadata, body).
- serialize_front_matter: Metadata -> block text (parse round-trips).
- FrontMatterParser: Class wrapper used by the article builder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .errors import MalformedMetadataError

FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


class Difficulty(Enum):
    """Article difficulty, declared in ascending order."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class ArticleMetadata:
    """Structured metadata parsed from an article's front matter.

    Attributes:
        id: Unique article identifier.
        title: Human-readable title.
        tldr: Short summary shown in listings.
        tags: Ordered tags; duplicates are kept.
        difficulty: Article level.
        read_time_minutes: Declared reading time, None when not declared.
        published_date: Optional publication date.
        related_topics: Ordered ids of related articles.
    """

    id: str
    title: str
    tldr: str = ""
    tags: tuple[str, ...] = ()
    difficulty: Difficulty = Difficulty.BEGINNER
    read_time_minutes: int | None = None
    published_date: date | None = None
    related_topics: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedDocument:
    """Result of parsing one content file.

    Attributes:
        metadata: The validated metadata record.
        body: Everything after the metadata block.
        frontmatter: Raw mapping from the block, unknown keys included.
    """

    metadata: ArticleMetadata
    body: str
    frontmatter: dict[str, Any]


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split raw text into its metadata block and body.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (block text or None when there is no block, body).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end() :]


def parse_front_matter(text: str, path: Path) -> ParsedDocument:
    """Parse a content file into metadata and body.

    Unknown keys are ignored for the record but kept in ``frontmatter``.

    Args:
        text: Raw file content.
        path: Path of the file, used for error reporting.

    Returns:
        ParsedDocument for the file.

    Raises:
        MalformedMetadataError: If the block is missing or ill-formed, or a
            required or typed field is invalid.
    """
    block, body = split_front_matter(text)
    if block is None:
        raise MalformedMetadataError(path, "missing front matter block")
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise MalformedMetadataError(
            path, f"front matter is not valid YAML: {_yaml_problem(exc)}", exc
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedMetadataError(path, "front matter must be a mapping of keys to values")

    metadata = ArticleMetadata(
        id=_required_text(data, "id", path),
        title=_required_text(data, "title", path),
        tldr=_optional_text(data, "tldr", path),
        tags=_string_list(data, "tags", path),
        difficulty=_difficulty(data, path),
        read_time_minutes=_read_time(data, path),
        published_date=_published_date(data, path),
        related_topics=_string_list(data, "relatedTopics", path, "related_topics"),
    )
    return ParsedDocument(metadata=metadata, body=body, frontmatter=data)


def serialize_front_matter(metadata: ArticleMetadata) -> str:
    """Write a metadata record back as a front-matter block.

    Empty optional fields are omitted, so parsing the output yields an
    equal record.

    Args:
        metadata: Record to serialize.

    Returns:
        Block text including both ``---`` delimiters and a trailing newline.
    """
    payload: dict[str, Any] = {"id": metadata.id, "title": metadata.title}
    if metadata.tldr:
        payload["tldr"] = metadata.tldr
    if metadata.tags:
        payload["tags"] = list(metadata.tags)
    payload["difficulty"] = metadata.difficulty.value
    if metadata.read_time_minutes is not None:
        payload["readTimeMinutes"] = metadata.read_time_minutes
    if metadata.published_date is not None:
        payload["publishedDate"] = metadata.published_date
    if metadata.related_topics:
        payload["relatedTopics"] = list(metadata.related_topics)
    dumped = yaml.safe_dump(
        payload, sort_keys=False, allow_unicode=True, default_flow_style=False
    )
    return f"---\n{dumped}---\n"


class FrontMatterParser:
    """Parses front matter for the article builder.

    Kept as a class so builders can be handed an alternative parser.
    """

    def parse(self, text: str, path: Path) -> ParsedDocument:
        return parse_front_matter(text, path)


def _yaml_problem(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    problem = getattr(exc, "problem", None) or str(exc)
    if mark is not None:
        return f"{problem} (block line {mark.line + 1})"
    return problem


def _lookup(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _required_text(data: dict[str, Any], key: str, path: Path) -> str:
    value = _lookup(data, key)
    if value is None:
        raise MalformedMetadataError(path, f"missing required field '{key}'")
    if isinstance(value, (dict, list)):
        raise MalformedMetadataError(path, f"field '{key}' must be a single value")
    text = str(value).strip()
    if not text:
        raise MalformedMetadataError(path, f"required field '{key}' is empty")
    return text


def _optional_text(data: dict[str, Any], key: str, path: Path) -> str:
    value = _lookup(data, key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise MalformedMetadataError(path, f"field '{key}' must be a single value")
    return str(value).strip()


def _string_list(data: dict[str, Any], key: str, path: Path, *aliases: str) -> tuple[str, ...]:
    """Read a list field given either as a YAML list or a comma-separated string."""
    value = _lookup(data, key, *aliases)
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = []
        for item in value:
            if isinstance(item, (dict, list)) or item is None:
                raise MalformedMetadataError(
                    path, f"field '{key}' must be a list of plain values"
                )
            items.append(str(item))
    else:
        raise MalformedMetadataError(path, f"field '{key}' must be a list")
    return tuple(item.strip() for item in items if item.strip())


def _difficulty(data: dict[str, Any], path: Path) -> Difficulty:
    value = _lookup(data, "difficulty")
    if value is None:
        return Difficulty.BEGINNER
    try:
        return Difficulty(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(d.value for d in Difficulty)
        raise MalformedMetadataError(
            path, f"invalid difficulty '{value}'; expected one of: {allowed}"
        ) from None


def _read_time(data: dict[str, Any], path: Path) -> int | None:
    value = _lookup(data, "readTimeMinutes", "read_time_minutes")
    if value is None:
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedMetadataError(
            path, f"readTimeMinutes must be a non-negative integer, got {value!r}"
        )
    return value


def _published_date(data: dict[str, Any], path: Path) -> date | None:
    value = _lookup(data, "publishedDate", "published_date")
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise MalformedMetadataError(
        path, f"publishedDate must be an ISO date (YYYY-MM-DD), got {value!r}"
    )
