"""Read-only text document model used by the formatter and the host layer.

A :class:`TextDocument` mirrors the editor document abstraction: a sequence of
lines, a language identifier and a line count. Line breaks are stored per line
so that :meth:`TextDocument.get_text` reproduces the original text exactly,
including mixed ``\\n`` / ``\\r\\n`` / ``\\r`` endings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

# Longest alternative first so "\r\n" is never split into two breaks
LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")

DEFAULT_LANGUAGE_ID = "plaintext"


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based (line, character) position inside a document."""

    line: int
    character: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.character < 0:
            raise ValueError(
                f"Position must not be negative (line={self.line}, character={self.character})"
            )


@dataclass(frozen=True)
class Range:
    """Half-open span between two positions; ``end`` must not precede ``start``."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} precedes start {self.start}")

    @classmethod
    def from_coords(
        cls, start_line: int, start_character: int, end_line: int, end_character: int
    ) -> "Range":
        return cls(
            Position(start_line, start_character), Position(end_line, end_character)
        )

    def __str__(self) -> str:
        return (
            f"{self.start.line}:{self.start.character}-"
            f"{self.end.line}:{self.end.character}"
        )


@dataclass(frozen=True)
class TextLine:
    """A single document line; ``text`` excludes the line break."""

    line_number: int
    text: str
    range: Range


def split_lines(text: str) -> tuple[list[str], list[str]]:
    """Split ``text`` into line contents and the line break that ended each one.

    The final entry always has an empty line break, so an empty string yields
    one empty line and a trailing newline yields a trailing empty line.
    """
    lines: list[str] = []
    endings: list[str] = []
    start = 0
    for match in LINE_BREAK_PATTERN.finditer(text):
        lines.append(text[start : match.start()])
        endings.append(match.group())
        start = match.end()
    lines.append(text[start:])
    endings.append("")
    return lines, endings


class TextDocument:
    """Immutable in-memory document.

    Args:
        text: Full document text
        language_id: Editor language identifier (e.g. ``"latex"``)
        path: Optional file backing the document
    """

    def __init__(
        self,
        text: str,
        language_id: str = DEFAULT_LANGUAGE_ID,
        path: Path | None = None,
    ) -> None:
        if not isinstance(text, str):
            raise TypeError(f"Document text must be a string, got {type(text).__name__}")
        self._language_id = language_id
        self._path = Path(path) if path is not None else None
        self._lines, self._endings = split_lines(text)

        offsets: list[int] = []
        running = 0
        for line, ending in zip(self._lines, self._endings):
            offsets.append(running)
            running += len(line) + len(ending)
        self._line_offsets = offsets
        self._length = running

    @property
    def language_id(self) -> str:
        return self._language_id

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def uri(self) -> str:
        if self._path is None:
            return "untitled:document"
        if self._path.is_absolute():
            return self._path.as_uri()
        return str(self._path)

    @property
    def file_name(self) -> str:
        return self._path.name if self._path is not None else "untitled"

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_at(self, index: int) -> TextLine:
        """Return the line at ``index``; raises :class:`IndexError` when out of range."""
        if index < 0 or index >= len(self._lines):
            raise IndexError(f"Line {index} out of range (line count {len(self._lines)})")
        text = self._lines[index]
        return TextLine(
            line_number=index,
            text=text,
            range=Range.from_coords(index, 0, index, len(text)),
        )

    def offset_at(self, position: Position) -> int:
        """Convert ``position`` into an absolute character offset.

        Raises:
            ValueError: If the position lies outside the document
        """
        if position.line >= len(self._lines):
            raise ValueError(
                f"Line {position.line} out of range (line count {len(self._lines)})"
            )
        if position.character > len(self._lines[position.line]):
            raise ValueError(
                f"Character {position.character} out of range on line {position.line}"
            )
        return self._line_offsets[position.line] + position.character

    def get_text(self) -> str:
        return "".join(
            line + ending for line, ending in zip(self._lines, self._endings)
        )

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return (
            f"TextDocument(file_name={self.file_name!r}, "
            f"language_id={self._language_id!r}, line_count={self.line_count})"
        )
