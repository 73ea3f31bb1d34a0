from datetime import date
from pathlib import Path

from markupsafe import Markup

from folio.assembler import assemble_site
from folio.content import Article
from folio.frontmatter import Difficulty
from folio.renderers import Heading
from folio.templates import TemplateEngine, render_toc


def make_article(article_id, **overrides):
    fields = dict(
        id=article_id,
        title=article_id.title(),
        tldr="",
        tags=(),
        difficulty=Difficulty.BEGINNER,
        read_time_minutes=4,
        published_date=None,
        related_topics=(),
        body="Body.",
        content="<p>Body.</p>",
        source_path=Path(f"content/{article_id}.md"),
        slug=article_id,
        url=f"/articles/{article_id}/",
        dialect="markdown",
    )
    fields.update(overrides)
    return Article(**fields)


def test_render_toc_nests_levels():
    article = make_article(
        "toc",
        toc=(
            Heading("title", "Title", 1),
            Heading("setup", "Setup", 2),
            Heading("install", "Install <pip>", 3),
            Heading("usage", "Usage", 2),
        ),
    )
    toc = render_toc(article)
    assert isinstance(toc, Markup)
    assert str(toc) == (
        '<ul><li><a href="#setup">Setup</a>'
        '<ul><li><a href="#install">Install &lt;pip&gt;</a></li></ul>'
        '</li><li><a href="#usage">Usage</a></li></ul>'
    )
    assert render_toc(make_article("empty")) == Markup("")


def test_url_for_applies_root_url():
    engine = TemplateEngine(None, {}, root_url="https://me.github.io/blog/")
    assert engine.url_for("/tags/") == "https://me.github.io/blog/tags/"
    assert engine.url_for("tags/") == "https://me.github.io/blog/tags/"
    assert engine.url_for("https://example.com/x") == "https://example.com/x"
    assert TemplateEngine(None, {}).url_for("/tags/") == "/tags/"


def test_render_article_includes_metadata_and_related_links():
    scopes = make_article(
        "scopes",
        title="Scopes & Jobs",
        tldr="Every coroutine has a scope.",
        tags=("kotlin", "Coroutines"),
        difficulty=Difficulty.INTERMEDIATE,
        published_date=date(2024, 3, 2),
        related_topics=("flows",),
        toc=(Heading("launching", "Launching", 2),),
    )
    flows = make_article("flows", related_topics=("scopes",))
    engine = TemplateEngine(None, {"title": "My Notes"})
    engine.update_index(assemble_site([scopes, flows]))

    html = engine.render_article(scopes)

    assert "<title>Scopes &amp; Jobs | My Notes</title>" in html
    assert "<p>Body.</p>" in html
    assert "Mar 02, 2024" in html
    assert "Intermediate" in html
    assert "4 min read" in html
    assert "Every coroutine has a scope." in html
    assert 'href="/tags/coroutines/"' in html
    assert 'href="#launching"' in html
    assert '<a href="/articles/flows/">Flows</a>' in html


def test_project_templates_override_layouts(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "article.html.jinja").write_text(
        "custom {{ article.id }} {{ related | length }}", encoding="utf-8"
    )
    (templates / "talk.html.jinja").write_text("talk {{ article.title }}", encoding="utf-8")
    engine = TemplateEngine(templates, {})
    engine.update_index(assemble_site([make_article("a")]))

    assert engine.render_article(make_article("a")) == "custom a 0"
    talk = make_article("b", frontmatter={"layout": "talk"})
    assert engine.render_article(talk) == "talk B"
    # untouched layouts still come from the package
    assert "<h1>Page not found</h1>" in engine.render("404.html.jinja")


def test_index_lists_articles_and_levels():
    articles = [
        make_article("a", published_date=date(2024, 1, 1), difficulty=Difficulty.ADVANCED),
        make_article("b"),
    ]
    site = assemble_site(articles)
    engine = TemplateEngine(None, {"title": "Notes", "description": "Things I learned"})
    engine.update_index(site)

    html = engine.render("index.html.jinja", listing=site.articles)

    assert html.index('href="/articles/a/"') < html.index('href="/articles/b/"')
    assert "Things I learned" in html
    assert '<a href="/difficulty/advanced/">Advanced</a> (1)' in html


def test_portfolio_page_renders_projects():
    data = {
        "portfolio": {
            "title": "Things I built",
            "projects": [{"name": "Lintel", "url": "https://example.com", "stack": ["Kotlin"]}],
        }
    }
    engine = TemplateEngine(None, data)
    engine.update_index(assemble_site([]))
    html = engine.render("portfolio.html.jinja", page_title="Portfolio")
    assert "<h1>Things I built</h1>" in html
    assert '<a href="https://example.com">Lintel</a>' in html
    assert "<li>Kotlin</li>" in html


def test_render_string_has_filters():
    engine = TemplateEngine(None, {})
    assert engine.render_string("{{ name | slugify }}", {"name": "Kotlin Flows"}) == "kotlin-flows"
    assert engine.render_string("{{ d | date('%Y') }}", {"d": date(2024, 1, 2)}) == "2024"
