"""Utility functions for Folio.

This module contains small helpers used throughout the Folio codebase:
string processing, path handling and content measurements.

Key functions:
    slugify: Convert ids, tags and filenames to URL slugs.
    estimate_read_time: Estimate reading time from a body's word count.
    first_paragraph: Extract a plain-text summary from a body.
    dialect_for_path: Map a file suffix to a markup dialect.
    is_internal_path: Check for hidden or underscore-prefixed components.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import math
import re
import shutil
from pathlib import Path

WORDS_PER_MINUTE = 200

# Markup dialect per file suffix; anything else is not content.
DIALECTS = {
    ".md": "markdown",
    ".markdown": "markdown",
    ".html": "html",
    ".htm": "html",
    ".txt": "text",
}

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")


def slugify(name: str) -> str:
    """Convert a name to a URL slug, dropping a YYYY-MM-DD- prefix.

    Args:
        name: Article id, tag or filename stem.

    Returns:
        URL-friendly slug, "index" when nothing usable remains.

    Examples:
        >>> slugify("2024-01-15-Kotlin Flows")
        'kotlin-flows'

        >>> slugify("C++")
        'c'
    """
    cleaned = _DATE_PREFIX_RE.sub("", name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def estimate_read_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimate reading time in whole minutes, never less than one.

    Args:
        text: Body text (markup included).
        words_per_minute: Reading speed.

    Returns:
        Estimated minutes.
    """
    words = len(re.findall(r"\w+", text))
    return max(1, math.ceil(words / words_per_minute))


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first paragraph from text.

    Skips headings, fenced code and images, strips HTML tags,
    collapses whitespace and truncates to the specified limit.

    Args:
        text: Text content to extract from.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to limit characters.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "```", "![", "---")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        collapsed = " ".join(para.split())
        if collapsed:
            return collapsed[:limit]
    return ""


def dialect_for_path(path: Path) -> str | None:
    """Return the markup dialect for a content file, or None."""
    return DIALECTS.get(path.suffix.lower())


def is_internal_path(path: Path) -> bool:
    """Check if a relative path has a hidden or underscore-prefixed directory.

    Args:
        path: Path relative to the content root.

    Returns:
        True if any parent component starts with "." or "_".
    """
    return any(part.startswith((".", "_")) for part in path.parts[:-1])


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
