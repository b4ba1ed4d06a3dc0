"""Edit and command result models."""

from __future__ import annotations

from dataclasses import dataclass

from .document import Range, TextLine
from .enums import MessageLevel


@dataclass(frozen=True)
class TextEdit:
    """Replace the text covered by ``range`` with ``new_text``."""

    range: Range
    new_text: str

    @classmethod
    def replace_line(cls, line: TextLine, new_text: str) -> "TextEdit":
        """Build an edit replacing the full text of ``line``."""
        return cls(range=line.range, new_text=new_text)


@dataclass(frozen=True)
class CommandResult:
    """User-visible outcome of the manual format command."""

    level: MessageLevel
    message: str
    edits_applied: int = 0

    @property
    def ok(self) -> bool:
        return self.level is not MessageLevel.ERROR

    def __str__(self) -> str:
        return self.message
