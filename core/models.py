from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Tuple


class Sentiment(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def parse(cls, value: Any) -> "Sentiment":
        """Unknown or missing labels read as NEUTRAL."""
        if value is None:
            return cls.NEUTRAL
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.NEUTRAL


@dataclass(frozen=True)
class CommentAuthor:
    id: Optional[Hashable]
    name: Optional[str] = None


@dataclass(frozen=True)
class Comment:
    id: Hashable  # assigned by the service
    text: str
    author: Optional[CommentAuthor] = None
    sentiment: Sentiment = Sentiment.NEUTRAL


@dataclass(frozen=True)
class Article:
    id: Hashable
    title: str
    category: str
    author: str
    image: str
    content: str
    summary: str = ""
    comments: Tuple[Comment, ...] = ()


def _text(data: Dict[str, Any], key: str) -> str:
    v = data.get(key)
    return "" if v is None else str(v)


def _record_id(data: Dict[str, Any], what: str) -> Hashable:
    rid = data.get("id")
    if rid is None:
        raise ValueError(f"{what} without id")
    try:
        hash(rid)
    except TypeError:
        raise ValueError(f"{what} id must be a scalar, got {type(rid).__name__}")
    return rid


def comment_from_json(data: Dict[str, Any]) -> Comment:
    if not isinstance(data, dict):
        raise ValueError(f"comment must be an object, got {type(data).__name__}")
    comment_id = _record_id(data, "comment")

    author = None
    user = data.get("user")
    if isinstance(user, dict):
        name = user.get("name")
        author = CommentAuthor(id=user.get("id"), name=str(name) if name else None)

    return Comment(
        id=comment_id,
        text=_text(data, "text"),
        author=author,
        sentiment=Sentiment.parse(data.get("sentiment")),
    )


def article_from_json(data: Dict[str, Any]) -> Article:
    if not isinstance(data, dict):
        raise ValueError(f"article must be an object, got {type(data).__name__}")
    article_id = _record_id(data, "article")

    raw_comments = data.get("comments") or []
    if not isinstance(raw_comments, list):
        raise ValueError(f"article {article_id}: comments must be a list")

    return Article(
        id=article_id,
        title=_text(data, "title"),
        category=_text(data, "category"),
        author=_text(data, "author"),
        image=_text(data, "image"),
        content=_text(data, "content"),
        summary=_text(data, "summary"),
        comments=tuple(comment_from_json(c) for c in raw_comments),
    )
