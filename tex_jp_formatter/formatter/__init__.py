"""Punctuation processing and document formatting."""

from __future__ import annotations

from .tex_formatter import CHUNK_SIZE, LARGE_FILE_THRESHOLD, TexJapaneseFormatter
from .text_processor import (
    format_japanese_punctuation,
    has_changes,
    has_japanese_punctuation,
    validate_text,
)

__all__ = [
    "CHUNK_SIZE",
    "LARGE_FILE_THRESHOLD",
    "TexJapaneseFormatter",
    "format_japanese_punctuation",
    "has_changes",
    "has_japanese_punctuation",
    "validate_text",
]
