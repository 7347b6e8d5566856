import pytest

from core.models import (
    Article, Comment, CommentAuthor, Sentiment, article_from_json, comment_from_json,
)


def _article_json(**kwargs):
    defaults = {
        "id": 1,
        "title": "Deep Sea",
        "category": "Science",
        "author": "Jane Doe",
        "image": "https://example.com/a.jpg",
        "content": "Body text.",
        "summary": None,
        "comments": [],
    }
    defaults.update(kwargs)
    return defaults


# ── Sentiment ─────────────────────────────────────────────────

class TestSentiment:
    @pytest.mark.parametrize("raw,expected", [
        ("POSITIVE", Sentiment.POSITIVE),
        ("negative", Sentiment.NEGATIVE),
        (" Neutral ", Sentiment.NEUTRAL),
        (None, Sentiment.NEUTRAL),
        ("ANGRY", Sentiment.NEUTRAL),
        (3, Sentiment.NEUTRAL),
    ])
    def test_parse(self, raw, expected):
        assert Sentiment.parse(raw) is expected


# ── comment_from_json ─────────────────────────────────────────

class TestCommentFromJson:
    def test_full_comment(self):
        c = comment_from_json({
            "id": 7, "text": "great read", "sentiment": "POSITIVE",
            "user": {"id": 1, "name": "Sara"},
        })
        assert c == Comment(id=7, text="great read",
                            author=CommentAuthor(id=1, name="Sara"),
                            sentiment=Sentiment.POSITIVE)

    def test_missing_user_and_sentiment(self):
        c = comment_from_json({"id": 3, "text": "hmm"})
        assert c.author is None
        assert c.sentiment is Sentiment.NEUTRAL

    def test_user_without_name(self):
        c = comment_from_json({"id": 3, "text": "x", "user": {"id": 5}})
        assert c.author == CommentAuthor(id=5, name=None)

    def test_requires_id(self):
        with pytest.raises(ValueError):
            comment_from_json({"text": "no id"})

    def test_requires_object(self):
        with pytest.raises(ValueError):
            comment_from_json(["not", "a", "dict"])

    def test_rejects_unhashable_id(self):
        with pytest.raises(ValueError):
            comment_from_json({"id": {"v": 7}, "text": "x"})


# ── article_from_json ─────────────────────────────────────────

class TestArticleFromJson:
    def test_basic_conversion(self):
        a = article_from_json(_article_json())
        assert a.id == 1
        assert a.title == "Deep Sea"
        assert a.summary == ""
        assert a.comments == ()

    def test_missing_text_fields_become_empty(self):
        a = article_from_json({"id": "abc"})
        assert a == Article(id="abc", title="", category="", author="",
                            image="", content="")

    def test_nested_comments_keep_order(self):
        a = article_from_json(_article_json(comments=[
            {"id": 1, "text": "first", "sentiment": "NEGATIVE"},
            {"id": 2, "text": "second"},
        ]))
        assert [c.text for c in a.comments] == ["first", "second"]
        assert a.comments[0].sentiment is Sentiment.NEGATIVE

    def test_summary_from_server_is_kept(self):
        a = article_from_json(_article_json(summary="cached"))
        assert a.summary == "cached"

    def test_requires_id(self):
        with pytest.raises(ValueError):
            article_from_json(_article_json(id=None))

    def test_comments_must_be_list(self):
        with pytest.raises(ValueError):
            article_from_json(_article_json(comments="nope"))

    @pytest.mark.parametrize("bad_id", [[1], {"id": 1}, [1, [2]]])
    def test_rejects_unhashable_id(self, bad_id):
        with pytest.raises(ValueError):
            article_from_json(_article_json(id=bad_id))
