"""Command-line interface for Folio.

This module defines the CLI commands using the Click framework.

Commands:
- new: Scaffold a new Folio project.
- build: Build the site into the output directory.
- serve: Run development server with live reload.
- check: Validate article metadata and related-topic links.
- article: Create a new article file interactively.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from datetime import date
from pathlib import Path

import click
import questionary

from . import __version__
from .errors import ContentError, ContentNotFoundError
from .frontmatter import ArticleMetadata, Difficulty, serialize_front_matter
from .utils import slugify

# Files copied into every new project
_SCAFFOLD_DIR = Path(__file__).parent / "scaffold"


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio static site generator."""


@cli.command()
@click.argument("name")
def new(name: str):
    """Scaffold a new Folio project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New Folio site created at {target}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft articles")
@click.option("--strict", is_flag=True, help="Fail on broken related-topic links")
@click.option("--root-url", default=None, help="Base URL when hosting under a sub-path")
def build(drafts: bool, strict: bool, root_url: str | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site, load_config

    strict = strict or bool(load_config(project_root).get("strict", False))
    try:
        result = build_site(project_root, include_drafts=drafts, root_url=root_url)
    except ContentNotFoundError as exc:
        raise click.ClickException(f"No content directory found at {exc.source_path}") from None
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {_rel(exc.source_path, project_root)}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None

    _report(result.errors, result.warnings, project_root)
    click.echo(
        f"Built {len(result.articles)} articles ({len(result.pages)} pages) "
        f"into {result.output_dir}"
    )
    if result.errors or (strict and result.warnings):
        raise SystemExit(1)


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft articles")
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port to run the dev server (overrides folio.yaml)",
)
@click.option(
    "--ws-port",
    type=int,
    required=False,
    help="Port for the live reload websocket server (overrides folio.yaml ws_port)",
)
def serve(drafts: bool, port: int | None, ws_port: int | None):
    """Run dev server with live reload."""
    project_root = Path.cwd()
    from .server import DevServer

    server = DevServer(project_root, http_port=port, ws_port=ws_port)
    server.start(include_drafts=drafts)


@cli.command()
@click.option("--strict", is_flag=True, help="Treat broken related-topic links as errors")
@click.option("--drafts", is_flag=True, help="Include draft articles")
def check(strict: bool, drafts: bool):
    """Validate article metadata and related-topic links."""
    project_root = Path.cwd()
    from .build import load_config
    from .check import check_site

    strict = strict or bool(load_config(project_root).get("strict", False))
    try:
        report = check_site(project_root, strict=strict, include_drafts=drafts)
    except ContentNotFoundError as exc:
        raise click.ClickException(f"No content directory found at {exc.source_path}") from None

    _report(report.errors, report.warnings, project_root)
    summary = (
        f"Checked {report.article_count} articles: "
        f"{len(report.errors)} errors, {len(report.warnings)} broken links"
    )
    if report.ok:
        click.echo(click.style(summary, fg="green"))
    else:
        click.echo(click.style(summary, fg="red", bold=True), err=True)
    raise SystemExit(report.exit_code)


@cli.command()
def article():
    """Create a new article file interactively."""
    project_root = Path.cwd()
    from .build import load_articles, load_config

    config = load_config(project_root)
    content_dir = project_root / config.get("content_dir", "content")
    try:
        site, _ = load_articles(project_root, include_drafts=True)
    except ContentNotFoundError:
        raise click.ClickException(
            f"No {content_dir.name}/ directory found. Run this command from a Folio project root."
        ) from None
    existing_ids = set(site.articles.ids())

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    article_id = questionary.text(
        "Article id:",
        default=slugify(title),
        validate=lambda x: len(x.strip()) > 0 or "Id cannot be empty",
        style=_questionary_style(),
    ).ask()
    if article_id is None:
        raise click.Abort()
    article_id = article_id.strip()
    if article_id in existing_ids:
        raise click.ClickException(f"An article with id '{article_id}' already exists")

    difficulty = questionary.select(
        "Difficulty:",
        choices=[level.value for level in Difficulty],
        style=_questionary_style(),
    ).ask()
    if difficulty is None:
        raise click.Abort()

    tags = questionary.text(
        "Tags (comma separated):",
        style=_questionary_style(),
    ).ask()
    if tags is None:
        raise click.Abort()

    related: list[str] = []
    if existing_ids:
        related = questionary.checkbox(
            "Related topics:",
            choices=sorted(existing_ids),
            style=_questionary_style(),
        ).ask()
        if related is None:
            raise click.Abort()

    publish = questionary.confirm(
        "Publish with today's date? (adds a YYYY-MM-DD- prefix)",
        default=True,
        style=_questionary_style(),
    ).ask()
    if publish is None:
        raise click.Abort()

    today = date.today()
    stem = slugify(article_id)
    filename = f"{today.isoformat()}-{stem}.md" if publish else f"{stem}.md"
    target_path = content_dir / filename
    if target_path.exists():
        raise click.ClickException(f"File already exists: {_rel(target_path, project_root)}")

    metadata = ArticleMetadata(
        id=article_id,
        title=title,
        tags=tuple(t.strip() for t in tags.split(",") if t.strip()),
        difficulty=Difficulty(difficulty),
        published_date=today if publish else None,
        related_topics=tuple(related),
    )
    target_path.write_text(
        f"{serialize_front_matter(metadata)}\n# {title}\n\n", encoding="utf-8"
    )
    click.echo(f"Created {_rel(target_path, project_root)}")


def _report(errors: list[ContentError], warnings: list, project_root: Path) -> None:
    """Print rejected files and broken links, one per entry."""
    for error in errors:
        click.echo(
            click.style(f"{error.kind}: ", fg="red", bold=True)
            + f"{_rel(error.source_path, project_root)}: {error.message}",
            err=True,
        )
    for warning in warnings:
        click.echo(
            click.style(f"{warning.kind}: ", fg="yellow", bold=True)
            + f"{_rel(warning.source_path, project_root)}: {warning.message}",
            err=True,
        )


def _rel(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _scaffold(root: Path) -> None:
    """Create the directory structure and files for a new Folio project."""
    for src_path in _SCAFFOLD_DIR.rglob("*"):
        if src_path.is_dir() or src_path.name == "__pycache__":
            continue
        dest_path = root / src_path.relative_to(_SCAFFOLD_DIR)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dest_path)
    (root / "templates").mkdir(parents=True, exist_ok=True)
    _try_git_init(root)


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("FOLIO_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        click.echo("git init failed; run it manually if you want version control.")
