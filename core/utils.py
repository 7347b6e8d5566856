import re
import html
from typing import Optional

from bs4 import BeautifulSoup

from core.config import ANONYMOUS_AUTHOR_LABEL, PLACEHOLDER_IMAGE_URL
from core.models import Comment


def truncate_text(text: str, limit: int) -> str:
    text = text or ""
    if len(text) > limit:
        return text[: max(0, limit - 3)] + "..."
    return text


def strip_html_to_text(raw_html: str) -> str:
    raw_html = raw_html or ""
    text = BeautifulSoup(raw_html, "html.parser").get_text("\n")
    text = html.unescape(text)
    text = re.sub(r"\n{3,}", "\n\n", text).strip()
    return text


def speech_text(raw: Optional[str]) -> str:
    """Flatten article text into a single clean run of words for the speech device."""
    text = strip_html_to_text(raw or "")
    return re.sub(r"\s+", " ", text).strip()


def comment_author_name(comment: Comment) -> str:
    if comment.author and comment.author.name:
        return comment.author.name
    return ANONYMOUS_AUTHOR_LABEL


def comment_author_initial(comment: Comment) -> str:
    if comment.author and comment.author.name:
        return comment.author.name[0]
    return "?"


def image_or_placeholder(image: Optional[str]) -> str:
    return image or PLACEHOLDER_IMAGE_URL


def rate_to_edge_tts(rate: float) -> str:
    """0.9 -> '-10%', 1.25 -> '+25%'."""
    pct = int(round((rate - 1.0) * 100))
    return f"{pct:+d}%"
