"""Utility helpers for hashnode-loader."""

from hashnode_loader.utils.content import (  # noqa: F401
    calculate_reading_time,
    count_words,
    extract_text_from_html,
    generate_excerpt,
)

__all__ = [
    "calculate_reading_time",
    "count_words",
    "extract_text_from_html",
    "generate_excerpt",
]
