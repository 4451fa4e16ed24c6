"""Plain-text helpers for post content."""

from __future__ import annotations

import html
import math
import re

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 160


def extract_text_from_html(markup: str) -> str:
    """Strip scripts, styles and tags from ``markup`` and collapse whitespace."""
    if not markup:
        return ""
    text = _SCRIPT_RE.sub("", markup)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text).replace("\xa0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def count_words(text: str) -> int:
    if not text:
        return 0
    return len(text.split())


def calculate_reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Reading time in whole minutes, at least 1 for non-empty text."""
    words = count_words(text)
    if words == 0:
        return 0
    return max(1, math.ceil(words / words_per_minute))


def generate_excerpt(text: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Cut ``text`` at the last word boundary before ``max_length`` and add an ellipsis."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return f"{truncated}..."
