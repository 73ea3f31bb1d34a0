import json
from pathlib import Path

import pytest
from jinja2 import TemplateSyntaxError

from folio.build import BuildError, build_site, load_config, load_data
from folio.errors import ContentNotFoundError


def write_article(path: Path, article_id: str, body: str = "Hello.\n", **fields) -> Path:
    lines = ["---", f"id: {article_id}", f"title: {fields.pop('title', article_id.title())}"]
    for key, value in fields.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
    return path


def create_project(root: Path) -> Path:
    content = root / "content"
    write_article(
        content / "2024-03-02-scopes.md",
        "coroutine-scopes",
        body="# Scopes\n\n## Launching\n\n![diagram](scopes.png)\n",
        tags="[kotlin, coroutines]",
        difficulty="intermediate",
        publishedDate="2024-03-02",
        relatedTopics="[flows-101]",
    )
    write_article(
        content / "2024-02-10-flows.md",
        "flows-101",
        tags="[kotlin]",
        publishedDate="2024-02-10",
        relatedTopics="[coroutine-scopes]",
    )
    (root / "data").mkdir()
    (root / "data" / "site.yaml").write_text("title: Notes\n", encoding="utf-8")
    (root / "data" / "portfolio.yaml").write_text(
        "projects:\n  - name: Lintel\n", encoding="utf-8"
    )
    (root / "assets" / "images").mkdir(parents=True)
    (root / "assets" / "images" / "scopes.png").write_bytes(b"png")
    return root


def test_load_config_defaults_and_overrides(tmp_path):
    assert load_config(tmp_path)["content_dir"] == "content"
    (tmp_path / "folio.yaml").write_text("output_dir: public\nstrict: true\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config["output_dir"] == "public"
    assert config["strict"] is True
    assert config["port"] == 4000


def test_load_data_merges_site_and_keys_other_files(tmp_path):
    assert load_data(tmp_path) == {}
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "site.yaml").write_text("title: Notes\nurl: https://me.dev\n", encoding="utf-8")
    (data_dir / "portfolio.yaml").write_text("title: Work\n", encoding="utf-8")
    (data_dir / "empty.yaml").write_text("", encoding="utf-8")
    assert load_data(tmp_path) == {
        "title": "Notes",
        "url": "https://me.dev",
        "portfolio": {"title": "Work"},
    }


def test_build_writes_every_page(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project)
    out = project / "output"

    assert result.output_dir == out
    assert result.errors == []
    assert result.warnings == []
    assert result.articles.ids() == ["coroutine-scopes", "flows-101"]
    for page in [
        "articles/coroutine-scopes/index.html",
        "articles/flows-101/index.html",
        "index.html",
        "tags/index.html",
        "tags/kotlin/index.html",
        "tags/coroutines/index.html",
        "difficulty/beginner/index.html",
        "difficulty/intermediate/index.html",
        "difficulty/advanced/index.html",
        "portfolio/index.html",
        "404.html",
        "catalog.json",
        "assets/images/scopes.png",
    ]:
        assert (out / page).exists(), page
    assert result.pages[0] == "/articles/coroutine-scopes/"
    assert result.feeds == ["catalog.json"]

    scopes = (out / "articles" / "coroutine-scopes" / "index.html").read_text(encoding="utf-8")
    assert '<h2 id="launching">Launching</h2>' in scopes
    assert 'src="/assets/images/scopes.png"' in scopes
    assert 'href="/articles/flows-101/"' in scopes
    assert "Lintel" in (out / "portfolio" / "index.html").read_text(encoding="utf-8")


def test_build_with_root_url_absolutizes_links_and_writes_feeds(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project, root_url="https://me.github.io/blog")
    out = project / "output"

    index = (out / "index.html").read_text(encoding="utf-8")
    assert 'href="https://me.github.io/blog/articles/coroutine-scopes/"' in index
    assert 'href="/' not in index
    assert result.data["url"] == "https://me.github.io/blog"
    assert result.feeds == ["sitemap.xml", "rss.xml", "catalog.json"]
    catalog = json.loads((out / "catalog.json").read_text(encoding="utf-8"))
    assert catalog["articles"][0]["url"] == "https://me.github.io/blog/articles/coroutine-scopes/"


def test_build_skips_bad_files_and_reports_them(tmp_path):
    project = create_project(tmp_path)
    (project / "content" / "broken.md").write_text("---\ntitle: No id\n---\n", encoding="utf-8")
    write_article(project / "content" / "dangling.md", "dangling", relatedTopics="[nowhere]")

    result = build_site(project)

    assert [(e.source_path.name, e.kind) for e in result.errors] == [
        ("broken.md", "MalformedMetadata")
    ]
    assert [w.target_id for w in result.warnings] == ["nowhere"]
    assert (project / "output" / "articles" / "dangling" / "index.html").exists()
    assert (project / "output" / "articles" / "coroutine-scopes" / "index.html").exists()


def test_build_drafts_only_on_request(tmp_path):
    project = create_project(tmp_path)
    write_article(project / "content" / "_next.md", "next-up")
    assert "next-up" not in build_site(project).articles.ids()
    assert "next-up" in build_site(project, include_drafts=True).articles.ids()


def test_build_missing_content_dir_is_fatal_and_keeps_output(tmp_path):
    out = tmp_path / "output"
    out.mkdir()
    (out / "keep.html").write_text("old", encoding="utf-8")
    with pytest.raises(ContentNotFoundError):
        build_site(tmp_path)
    assert (out / "keep.html").exists()


def test_build_template_syntax_error_names_template(tmp_path):
    project = create_project(tmp_path)
    templates = project / "templates"
    templates.mkdir()
    (templates / "index.html.jinja").write_text("{% if %}", encoding="utf-8")

    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == templates / "index.html.jinja"
    assert "Template syntax error" in excinfo.value.message
    assert isinstance(excinfo.value.original_error, TemplateSyntaxError)


def test_build_missing_layout_is_reported(tmp_path):
    project = create_project(tmp_path)
    write_article(project / "content" / "talk.md", "talk", layout="slides")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == project / "content" / "talk.md"
    assert "slides.html.jinja" in excinfo.value.message


def test_build_respects_output_override(tmp_path):
    project = create_project(tmp_path)
    staging = tmp_path / "staging"
    result = build_site(project, output_dir_override=staging)
    assert result.output_dir == staging
    assert (staging / "index.html").exists()
    assert not (project / "output").exists()


def test_build_merges_tags_that_share_a_page(tmp_path):
    content = tmp_path / "content"
    write_article(content / "a.md", "a", tags="[Kotlin]", publishedDate="2024-02-01")
    write_article(content / "b.md", "b", tags="[kotlin]", publishedDate="2024-01-01")

    result = build_site(tmp_path)

    assert result.pages.count("/tags/kotlin/") == 1
    assert len(result.pages) == len(set(result.pages))
    tag_page = (tmp_path / "output" / "tags" / "kotlin" / "index.html").read_text(encoding="utf-8")
    assert 'href="/articles/a/"' in tag_page
    assert 'href="/articles/b/"' in tag_page
    assert "<h1>#Kotlin</h1>" in tag_page
