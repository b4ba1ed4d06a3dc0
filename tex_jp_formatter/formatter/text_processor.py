"""Japanese punctuation helpers.

The substitution is purely lexical: every ideographic comma (、 U+3001) becomes
a fullwidth comma (， U+FF0C) and every ideographic full stop (。 U+3002)
becomes a fullwidth full stop (． U+FF0E). Nothing else is touched, including
half-width ``,`` and ``.``. LaTeX comments, verbatim and math environments are
not special-cased.
"""

from __future__ import annotations

import re
from typing import Any

IDEOGRAPHIC_COMMA = "\u3001"  # 、
IDEOGRAPHIC_FULL_STOP = "\u3002"  # 。
FULLWIDTH_COMMA = "\uff0c"  # ，
FULLWIDTH_FULL_STOP = "\uff0e"  # ．

PUNCTUATION_MAP = str.maketrans(
    {
        IDEOGRAPHIC_COMMA: FULLWIDTH_COMMA,
        IDEOGRAPHIC_FULL_STOP: FULLWIDTH_FULL_STOP,
    }
)

JAPANESE_PUNCTUATION_PATTERN = re.compile(f"[{IDEOGRAPHIC_COMMA}{IDEOGRAPHIC_FULL_STOP}]")


def validate_text(text: Any) -> bool:
    """Return True when ``text`` is a string (the empty string is valid)."""
    return isinstance(text, str)


def has_japanese_punctuation(text: Any) -> bool:
    """Return True if ``text`` contains 、 or 。.

    ``None``, non-string input and the empty string all yield False.
    """
    if not validate_text(text) or not text:
        return False
    return JAPANESE_PUNCTUATION_PATTERN.search(text) is not None


def format_japanese_punctuation(text: Any) -> Any:
    """Replace 、 with ， and 。 with ． throughout ``text``.

    Invalid input (``None`` or a non-string) is returned unchanged instead of
    raising, so callers can pass through whatever the host handed them.

    Example:
        >>> format_japanese_punctuation("これは、テストです。")
        'これは，テストです．'
    """
    if not validate_text(text) or not text:
        return text
    return text.translate(PUNCTUATION_MAP)


def has_changes(original: Any, formatted: Any) -> bool:
    """Return True if ``formatted`` differs from ``original``.

    False whenever either side is not a string.
    """
    if not validate_text(original) or not validate_text(formatted):
        return False
    return original != formatted
