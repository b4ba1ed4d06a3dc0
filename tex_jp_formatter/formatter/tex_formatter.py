"""Turn a LaTeX document into the line edits that normalise its punctuation.

The formatter never mutates a document. It reads the lines, and for every
line containing 、 or 。 proposes a :class:`TextEdit` replacing that line's full
text. Documents above :data:`LARGE_FILE_THRESHOLD` lines are walked in chunks
of :data:`CHUNK_SIZE` lines so progress and slow-run warnings can be reported
between chunks; the resulting edits are identical to the direct path.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from ..config.settings import SettingsManager
from ..models.config import FormatterConfig
from ..models.edit import TextEdit
from .text_processor import (
    format_japanese_punctuation,
    has_changes,
    has_japanese_punctuation,
)

LOGGER = logging.getLogger(__name__)

LARGE_FILE_THRESHOLD = 1000
CHUNK_SIZE = 100
SLOW_FORMAT_WARNING_SECONDS = 5.0

ProgressCallback = Callable[[int, int], None]


def _describe(document: Any) -> str:
    """Name ``document`` for log messages; never raises."""
    for attr in ("file_name", "uri"):
        try:
            value = getattr(document, attr, None)
            if value:
                return str(value)
        except Exception:
            continue
    try:
        return repr(document)
    except Exception:
        return f"<{type(document).__name__}>"


class TexJapaneseFormatter:
    """Decide whether a document qualifies and build its edit list.

    Args:
        settings_manager: Source of the configuration snapshot
        progress: Optional ``progress(processed_lines, total_lines)`` callback
            invoked between chunks of large documents
    """

    def __init__(
        self,
        settings_manager: SettingsManager | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.settings_manager = (
            settings_manager if settings_manager is not None else SettingsManager()
        )
        self.progress = progress
        self._config: FormatterConfig | None = None
        self.update_configuration()

    @property
    def config(self) -> FormatterConfig | None:
        return self._config

    def update_configuration(self) -> None:
        """Replace the configuration snapshot with a fresh read.

        If the settings cannot be read the snapshot is cleared, which makes
        every qualification check fail until the next successful refresh.
        """
        try:
            config = self.settings_manager.get_configuration()
        except Exception:
            LOGGER.exception(
                "Failed to load formatter configuration; formatting is disabled"
            )
            self._config = None
            return

        self._config = config
        LOGGER.info(
            "Configuration loaded (enabled=%s, formatOnSave=%s, targetLanguages=%s)",
            config.enabled,
            config.format_on_save,
            ", ".join(config.target_languages) or "<none>",
        )

    def is_target_language(self, document: Any) -> bool:
        """True if formatting is enabled and the document's language is targeted."""
        config = self._config
        if config is None or not config.enabled:
            return False
        language_id = getattr(document, "language_id", None)
        return language_id in config.target_languages

    def should_format(self, document: Any) -> bool:
        """Qualification for the save hook; additionally requires ``formatOnSave``."""
        config = self._config
        if config is None or not config.format_on_save:
            return False
        return self.is_target_language(document)

    def format_document(self, document: Any) -> list[TextEdit]:
        """Return the edits for the save hook (empty unless :meth:`should_format`)."""
        if not self.should_format(document):
            return []
        return self._build_edits(document)

    def format_document_manual(self, document: Any) -> list[TextEdit]:
        """Return the edits for the manual command.

        Ignores ``formatOnSave`` so users can format on demand even when the
        save hook is switched off.
        """
        if not self.is_target_language(document):
            return []
        return self._build_edits(document)

    def _build_edits(self, document: Any) -> list[TextEdit]:
        name = _describe(document)
        try:
            line_count = int(document.line_count)
        except Exception:
            LOGGER.exception("Could not read the line count of %s", name)
            return []

        if line_count <= 0:
            LOGGER.debug("%s has no lines; nothing to format", name)
            return []

        started = time.perf_counter()
        if line_count > LARGE_FILE_THRESHOLD:
            edits = self._format_in_chunks(document, line_count, started)
        else:
            edits = self._format_lines(document, 0, line_count)

        LOGGER.debug(
            "Formatted %s: %d edit(s) across %d line(s) in %.3fs",
            name,
            len(edits),
            line_count,
            time.perf_counter() - started,
        )
        return edits

    def _format_in_chunks(
        self, document: Any, line_count: int, started: float
    ) -> list[TextEdit]:
        name = _describe(document)
        total_chunks = (line_count + CHUNK_SIZE - 1) // CHUNK_SIZE
        LOGGER.info(
            "Splitting %s into %d chunk(s) (<= %d lines each)",
            name,
            total_chunks,
            CHUNK_SIZE,
        )

        edits: list[TextEdit] = []
        warned = False
        for chunk_index, start in enumerate(range(0, line_count, CHUNK_SIZE), start=1):
            end = min(start + CHUNK_SIZE, line_count)
            edits.extend(self._format_lines(document, start, end))

            LOGGER.debug(
                "Completed chunk %d/%d for %s (lines %d-%d)",
                chunk_index,
                total_chunks,
                name,
                start + 1,
                end,
            )
            self._report_progress(end, line_count)

            elapsed = time.perf_counter() - started
            if not warned and elapsed > SLOW_FORMAT_WARNING_SECONDS:
                LOGGER.warning(
                    "Formatting %s is slow: %.1fs elapsed after %d/%d line(s)",
                    name,
                    elapsed,
                    end,
                    line_count,
                )
                warned = True
        return edits

    def _format_lines(self, document: Any, start: int, end: int) -> list[TextEdit]:
        edits: list[TextEdit] = []
        for index in range(start, end):
            edit = self._format_line(document, index)
            if edit is not None:
                edits.append(edit)
        return edits

    def _format_line(self, document: Any, index: int) -> TextEdit | None:
        try:
            line = document.line_at(index)
            original = line.text
            # Lines without 、 or 。 cannot change
            if not has_japanese_punctuation(original):
                return None
            formatted = format_japanese_punctuation(original)
            if has_changes(original, formatted):
                return TextEdit.replace_line(line, formatted)
        except Exception:
            LOGGER.exception(
                "Failed to format line %d of %s; skipping", index + 1, _describe(document)
            )
        return None

    def _report_progress(self, processed: int, total: int) -> None:
        if self.progress is None:
            return
        try:
            self.progress(processed, total)
        except Exception:
            LOGGER.exception("Progress callback failed")
