from pathlib import Path

import pytest

from folio.check import CheckReport, check_site
from folio.errors import ContentNotFoundError


def write_article(content: Path, name: str, article_id: str, related: str = "[]") -> None:
    content.mkdir(parents=True, exist_ok=True)
    (content / name).write_text(
        f"---\nid: {article_id}\ntitle: {article_id}\nrelatedTopics: {related}\n---\nBody\n",
        encoding="utf-8",
    )


def test_mutually_related_articles_pass(tmp_path):
    write_article(tmp_path / "content", "a.md", "a", "[b]")
    write_article(tmp_path / "content", "b.md", "b", "[a]")
    report = check_site(tmp_path, strict=True)
    assert report.article_count == 2
    assert report.errors == []
    assert report.warnings == []
    assert report.ok
    assert report.exit_code == 0


def test_broken_links_fail_only_in_strict_mode(tmp_path):
    write_article(tmp_path / "content", "a.md", "a", "[missing]")

    lenient = check_site(tmp_path)
    assert [w.target_id for w in lenient.warnings] == ["missing"]
    assert lenient.exit_code == 0

    strict = check_site(tmp_path, strict=True)
    assert not strict.ok
    assert strict.exit_code == 1


def test_malformed_file_is_reported_alongside_valid_ones(tmp_path):
    content = tmp_path / "content"
    write_article(content, "good.md", "good")
    (content / "bad.md").write_text("---\ntitle: Bad\n---\n", encoding="utf-8")

    report = check_site(tmp_path)
    assert report.article_count == 1
    assert [(e.source_path, e.kind) for e in report.errors] == [
        (content / "bad.md", "MalformedMetadata")
    ]
    assert report.exit_code == 1


def test_missing_content_dir_raises(tmp_path):
    with pytest.raises(ContentNotFoundError):
        check_site(tmp_path)


def test_report_defaults():
    assert CheckReport(article_count=0).ok
