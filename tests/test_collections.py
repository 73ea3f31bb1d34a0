import itertools
from datetime import date
from pathlib import Path

from folio.collections import ArticleCollection, TagCollection, article_sort_key
from folio.content import Article
from folio.frontmatter import Difficulty


def make_article(article_id, published=None, tags=(), difficulty=Difficulty.BEGINNER, draft=False):
    return Article(
        id=article_id,
        title=article_id.title(),
        tldr="",
        tags=tuple(tags),
        difficulty=difficulty,
        read_time_minutes=1,
        published_date=published,
        related_topics=(),
        body="",
        content="",
        source_path=Path(f"content/{article_id}.md"),
        slug=article_id,
        url=f"/articles/{article_id}/",
        dialect="markdown",
        draft=draft,
    )


ARTICLES = [
    make_article("undated-b"),
    make_article("old", date(2023, 1, 1), tags=["kotlin"]),
    make_article("new-b", date(2024, 5, 1), tags=["Android"], difficulty=Difficulty.ADVANCED),
    make_article("new-a", date(2024, 5, 1), tags=["kotlin", "compose"], draft=True),
    make_article("undated-a", tags=["compose"]),
]


def test_articles_sorted_newest_first_with_id_tiebreak_and_undated_last():
    collection = ArticleCollection(ARTICLES)
    assert collection.ids() == ["new-a", "new-b", "old", "undated-a", "undated-b"]


def test_order_does_not_depend_on_input_order():
    expected = ArticleCollection(ARTICLES).ids()
    for permutation in itertools.permutations(ARTICLES):
        assert ArticleCollection(permutation).ids() == expected


def test_sort_key_places_undated_after_dated():
    assert article_sort_key(make_article("z", date(1970, 1, 1))) < article_sort_key(
        make_article("a")
    )


def test_collection_filters():
    collection = ArticleCollection(ARTICLES)
    assert collection.with_tag("kotlin").ids() == ["new-a", "old"]
    assert collection.with_difficulty("advanced").ids() == ["new-b"]
    assert collection.with_difficulty(Difficulty.BEGINNER).ids() == [
        "new-a",
        "old",
        "undated-a",
        "undated-b",
    ]
    assert collection.drafts().ids() == ["new-a"]
    assert "new-a" not in collection.published().ids()
    assert collection.latest(2).ids() == ["new-a", "new-b"]


def test_collection_lookup_and_slicing():
    collection = ArticleCollection(ARTICLES)
    assert collection.get("old").published_date == date(2023, 1, 1)
    assert collection.get("missing") is None
    assert collection[0].id == "new-a"
    assert isinstance(collection[1:3], ArticleCollection)
    assert collection[1:3].ids() == ["new-b", "old"]
    assert len(collection) == 5


def test_tag_collection_orders_tags_case_insensitively():
    tags = TagCollection(
        {
            "kotlin": [ARTICLES[1]],
            "compose": [ARTICLES[4], ARTICLES[3]],
            "Android": [ARTICLES[2]],
        }
    )
    assert list(tags) == ["Android", "compose", "kotlin"]
    assert tags["compose"].ids() == ["new-a", "undated-a"]
    assert len(tags) == 3
