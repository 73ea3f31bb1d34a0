"""Content validation for Folio.

``check`` runs the loading, parsing and assembly steps of a build without
writing anything, and reports every rejected file and every related-topic
reference that does not resolve.

Key pieces:
- CheckReport: Errors and warnings found, plus the resulting exit code.
- check_site: Validate a project's content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .build import load_articles
from .errors import BrokenReference, ContentError


@dataclass
class CheckReport:
    """Outcome of validating a project's content.

    Attributes:
        article_count: Number of articles that parsed successfully.
        errors: Rejected files (IOError, MalformedMetadata, DuplicateId).
        warnings: Broken related-topic references.
        strict: Whether warnings count as failures.
    """

    article_count: int
    errors: list[ContentError] = field(default_factory=list)
    warnings: list[BrokenReference] = field(default_factory=list)
    strict: bool = False

    @property
    def ok(self) -> bool:
        if self.errors:
            return False
        return not (self.strict and self.warnings)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def check_site(
    project_root: Path, strict: bool = False, include_drafts: bool = False
) -> CheckReport:
    """Validate metadata and cross-links of every article in a project.

    Args:
        project_root: Root directory of the project.
        strict: Treat broken references as failures.
        include_drafts: Whether to validate draft articles too.

    Returns:
        CheckReport listing every problem found in one pass.

    Raises:
        ContentNotFoundError: If the content directory is missing.
    """
    site, errors = load_articles(project_root, include_drafts=include_drafts)
    return CheckReport(
        article_count=len(site.articles),
        errors=errors,
        warnings=list(site.warnings),
        strict=strict,
    )
