"""Public model exports for the project.

Tests and other modules should import
``from tex_jp_formatter.models import TextDocument, TextEdit, FormatterConfig``.
"""

from __future__ import annotations

from .config import FormatterConfig
from .document import Position, Range, TextDocument, TextLine
from .edit import CommandResult, TextEdit
from .enums import MessageLevel

__all__ = [
    "CommandResult",
    "FormatterConfig",
    "MessageLevel",
    "Position",
    "Range",
    "TextDocument",
    "TextEdit",
    "TextLine",
]
