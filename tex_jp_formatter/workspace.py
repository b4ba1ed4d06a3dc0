"""Loading documents from disk and applying edit lists to them.

Edits for a document are validated and applied in memory first; files are only
written once every document in a :class:`WorkspaceEdit` produced its new text.
Each file is written to a temporary sibling and renamed into place. There is
no retry and no rollback if a later write fails.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterator, Mapping, Sequence

from .models.document import DEFAULT_LANGUAGE_ID, TextDocument
from .models.edit import TextEdit

LOGGER = logging.getLogger(__name__)

# File suffix -> editor language identifier
LANGUAGE_IDS: dict[str, str] = {
    ".tex": "latex",
    ".ltx": "latex",
    ".sty": "latex",
    ".cls": "latex",
    ".dtx": "latex",
    ".bib": "bibtex",
    ".md": "markdown",
    ".markdown": "markdown",
    ".txt": "plaintext",
}

LATEX_SUFFIXES = frozenset(
    suffix for suffix, language in LANGUAGE_IDS.items() if language == "latex"
)


class EditApplicationError(Exception):
    """Raised when an edit list cannot be applied to a document."""


def language_id_for_path(path: Path) -> str:
    return LANGUAGE_IDS.get(path.suffix.lower(), DEFAULT_LANGUAGE_ID)


def open_document(path: Path, language_id: str | None = None) -> TextDocument:
    """Read a UTF-8 file into a :class:`TextDocument`.

    Line breaks are kept as-is (``newline=""``) so writing the document back
    does not normalise them.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8", newline="") as handle:
        text = handle.read()
    return TextDocument(
        text,
        language_id=language_id or language_id_for_path(path),
        path=path,
    )


def apply_text_edits(document: TextDocument, edits: Sequence[TextEdit]) -> str:
    """Return the text of ``document`` with ``edits`` applied.

    Raises:
        EditApplicationError: If an edit lies outside the document or two
            edits overlap; no partial result is produced
    """
    text = document.get_text()
    spans: list[tuple[int, int, str]] = []
    for edit in edits:
        try:
            start = document.offset_at(edit.range.start)
            end = document.offset_at(edit.range.end)
        except ValueError as exc:
            raise EditApplicationError(
                f"Edit {edit.range} does not fit {document.file_name}: {exc}"
            ) from exc
        spans.append((start, end, edit.new_text))

    spans.sort(key=lambda span: (span[0], span[1]))
    for previous, current in zip(spans, spans[1:]):
        if current[0] < previous[1]:
            raise EditApplicationError(
                f"Overlapping edits in {document.file_name} at offsets "
                f"{previous[0]}-{previous[1]} and {current[0]}-{current[1]}"
            )

    pieces: list[str] = []
    cursor = 0
    for start, end, new_text in spans:
        pieces.append(text[cursor:start])
        pieces.append(new_text)
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


class WorkspaceEdit:
    """Edit lists keyed by document path, applied as one logical change."""

    def __init__(self) -> None:
        self._entries: dict[Path, list[TextEdit]] = {}

    def set(self, path: Path, edits: Sequence[TextEdit]) -> None:
        self._entries[Path(path)] = list(edits)

    def get(self, path: Path) -> list[TextEdit]:
        return list(self._entries.get(Path(path), []))

    def __iter__(self) -> Iterator[tuple[Path, list[TextEdit]]]:
        return iter((path, list(edits)) for path, edits in self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)


def write_text_atomic(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` via a temporary file and rename.

    An existing file keeps its permission bits.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_name(f".{path.name}.tmp")
    try:
        with temp_file.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        if path.exists():
            shutil.copymode(path, temp_file)
        temp_file.replace(path)
    except OSError:
        if temp_file.exists():
            temp_file.unlink()
        raise


class FileSystemEditApplier:
    """Apply a :class:`WorkspaceEdit` to files on disk."""

    def apply(
        self,
        workspace_edit: WorkspaceEdit,
        documents: Mapping[Path, TextDocument],
    ) -> bool:
        """Apply every edit list, returning False on any failure.

        Args:
            workspace_edit: Edits keyed by document path
            documents: The documents the edits were computed against
        """
        new_texts: dict[Path, str] = {}
        for path, edits in workspace_edit:
            document = documents.get(path)
            if document is None:
                LOGGER.error("No open document for %s; edits not applied", path)
                return False
            try:
                new_texts[path] = apply_text_edits(document, edits)
            except EditApplicationError:
                LOGGER.exception("Could not apply edits to %s", path)
                return False

        for path, text in new_texts.items():
            try:
                write_text_atomic(path, text)
            except OSError:
                LOGGER.exception("Failed to write %s", path)
                return False
            LOGGER.debug("Wrote %s", path)
        return True


def iter_latex_files(root: Path) -> list[Path]:
    """Return a sorted list of LaTeX source files under ``root``."""
    if root.is_file():
        return [root]
    if not root.is_dir():
        return []
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in LATEX_SUFFIXES
    )
