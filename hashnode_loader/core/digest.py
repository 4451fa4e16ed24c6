"""Content hashing helpers.

The same 32-bit rolling hash backs both response cache keys and the change
digests handed to the content store, so a given payload always hashes to the
same short base-36 string.
"""

from __future__ import annotations

import json
from typing import Any

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def simple_hash(text: str) -> str:
    """Hash ``text`` with a 31-multiplier rolling hash truncated to 32 bits.

    Args:
        text: Input string

    Returns:
        Absolute value of the signed 32-bit hash, in base 36
    """
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(abs(value))


def stable_dumps(content: Any) -> str:
    """Serialize ``content`` to JSON with sorted keys and compact separators."""
    return json.dumps(content, sort_keys=True, separators=(",", ":"), default=str)


def calculate_digest(content: Any) -> str:
    """Return a deterministic digest of ``content``.

    Strings are hashed as-is; anything else is hashed through its stable JSON
    serialization so that equal payloads always produce equal digests.
    """
    text = content if isinstance(content, str) else stable_dumps(content)
    return simple_hash(text)
