import itertools
from datetime import date
from pathlib import Path

from folio.assembler import SiteAssembler, assemble_site
from folio.content import Article
from folio.errors import BrokenReference
from folio.frontmatter import Difficulty


def make_article(article_id, related=(), published=None, tags=(), difficulty=Difficulty.BEGINNER):
    return Article(
        id=article_id,
        title=article_id.title(),
        tldr="",
        tags=tuple(tags),
        difficulty=difficulty,
        read_time_minutes=1,
        published_date=published,
        related_topics=tuple(related),
        body="",
        content="",
        source_path=Path(f"content/{article_id}.md"),
        slug=article_id,
        url=f"/articles/{article_id}/",
        dialect="markdown",
    )


def test_mutual_references_resolve_without_warnings():
    a = make_article("a", related=["b"])
    b = make_article("b", related=["a"])
    site = assemble_site([a, b])
    assert site.warnings == []
    assert site.related_to(a) == [b]
    assert site.related_to(b) == [a]


def test_broken_references_become_warnings():
    a = make_article("a", related=["missing", "b", "gone"])
    b = make_article("b")
    site = assemble_site([b, a])
    assert site.related_to(a) == [b]
    assert site.warnings == [
        BrokenReference(Path("content/a.md"), "a", "missing"),
        BrokenReference(Path("content/a.md"), "a", "gone"),
    ]
    assert site.warnings[0].kind == "BrokenReference"
    assert str(site.warnings[0]) == (
        "content/a.md: related topic 'missing' of 'a' does not exist"
    )


def test_duplicate_and_self_references():
    a = make_article("a", related=["b", "b", "a"])
    b = make_article("b")
    site = assemble_site([a, b])
    assert [x.id for x in site.related_to(a)] == ["b", "a"]
    assert site.warnings == []


def test_unknown_article_has_no_related():
    site = assemble_site([make_article("a")])
    assert site.related_to(make_article("other")) == []


def test_assembly_is_deterministic_for_any_input_order():
    articles = [
        make_article("c", related=["x"], published=date(2024, 1, 1), tags=["Kotlin"]),
        make_article("a", related=["y"], published=date(2024, 1, 1), tags=["kotlin", "flow"]),
        make_article("b", published=date(2024, 2, 1), tags=["flow"], difficulty=Difficulty.ADVANCED),
    ]
    baseline = SiteAssembler(articles).assemble()
    assert baseline.articles.ids() == ["b", "a", "c"]
    assert list(baseline.tags) == ["flow", "kotlin"]
    assert baseline.tags["kotlin"].ids() == ["a", "c"]
    assert [w.target_id for w in baseline.warnings] == ["y", "x"]

    for permutation in itertools.permutations(articles):
        site = SiteAssembler(permutation).assemble()
        assert site.articles.ids() == baseline.articles.ids()
        assert list(site.tags) == list(baseline.tags)
        assert {t: v.ids() for t, v in site.tags.items()} == {
            t: v.ids() for t, v in baseline.tags.items()
        }
        assert site.warnings == baseline.warnings


def test_tag_and_difficulty_listings():
    a = make_article("a", tags=["kotlin", "kotlin"], difficulty=Difficulty.INTERMEDIATE)
    b = make_article("b", tags=["kotlin"])
    site = assemble_site([a, b])
    assert site.tags["kotlin"].ids() == ["a", "b"]
    assert list(site.difficulties) == list(Difficulty)
    assert site.difficulties[Difficulty.INTERMEDIATE].ids() == ["a"]
    assert site.difficulties[Difficulty.ADVANCED].ids() == []


def test_tags_with_same_slug_share_one_listing():
    newer = make_article("newer", published=date(2024, 5, 1), tags=["Kotlin", "kotlin"])
    older = make_article("older", published=date(2024, 1, 1), tags=["kotlin"])
    other = make_article("other", published=date(2023, 1, 1), tags=["C++", "C"])
    site = assemble_site([older, other, newer])
    assert list(site.tags) == ["C++", "Kotlin"]
    assert site.tags["Kotlin"].ids() == ["newer", "older"]
    assert site.tags["C++"].ids() == ["other"]
    assert newer.tags == ("Kotlin", "kotlin")
