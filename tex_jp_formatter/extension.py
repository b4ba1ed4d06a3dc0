"""Host integration: the save hook and the manual format command.

:class:`FormatterExtension` wires a :class:`TexJapaneseFormatter` to a
settings store and an edit applier. The save hook uses the automatic path
(``format_document``, honours ``formatOnSave``); the command uses the manual
path (``format_document_manual``) and reports a user-visible message.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .config.settings import Disposable, SettingsManager
from .formatter.tex_formatter import ProgressCallback, TexJapaneseFormatter
from .models.document import TextDocument
from .models.edit import CommandResult, TextEdit
from .models.enums import MessageLevel
from .workspace import FileSystemEditApplier, WorkspaceEdit

LOGGER = logging.getLogger(__name__)

FORMAT_COMMAND_ID = "texJapaneseFormatter.format"

MSG_FORMATTED = "Japanese punctuation formatted!"
MSG_NOTHING_TO_FORMAT = "No Japanese punctuation found to format."
MSG_NOT_LATEX = "Please open a LaTeX (.tex) file to use this formatter."
MSG_APPLY_FAILED = "Formatting failed: could not apply edits."


class ActivationError(Exception):
    """Raised when the extension cannot be activated."""


class EditApplier(Protocol):
    def apply(
        self, workspace_edit: WorkspaceEdit, documents: dict[Any, TextDocument]
    ) -> bool: ...


class FormatterExtension:
    """Save hook and format command bound to one settings store."""

    def __init__(
        self,
        settings_manager: SettingsManager | None = None,
        *,
        applier: EditApplier | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.settings_manager = (
            settings_manager if settings_manager is not None else SettingsManager()
        )
        self.applier: EditApplier = applier if applier is not None else FileSystemEditApplier()
        self.progress = progress
        self.formatter: TexJapaneseFormatter | None = None
        self.subscriptions: list[Disposable] = []

    @property
    def active(self) -> bool:
        return self.formatter is not None

    def activate(self) -> "FormatterExtension":
        """Create the formatter and subscribe to configuration changes."""
        try:
            self.formatter = TexJapaneseFormatter(
                self.settings_manager, progress=self.progress
            )
            self.subscriptions.append(
                self.settings_manager.on_configuration_changed(
                    self._on_configuration_changed
                )
            )
        except Exception as exc:
            LOGGER.exception("Error activating LaTeX Japanese Formatter")
            raise ActivationError(
                f"Failed to activate LaTeX Japanese Formatter: {exc}"
            ) from exc
        LOGGER.info("LaTeX Japanese Formatter is now active")
        return self

    def deactivate(self) -> None:
        for subscription in self.subscriptions:
            subscription.dispose()
        self.subscriptions.clear()
        self.formatter = None
        LOGGER.info("LaTeX Japanese Formatter deactivated")

    def __enter__(self) -> "FormatterExtension":
        return self.activate()

    def __exit__(self, *exc_info: object) -> None:
        self.deactivate()

    def _on_configuration_changed(self) -> None:
        if self.formatter is None:
            return
        try:
            self.formatter.update_configuration()
        except Exception:
            LOGGER.exception("Error updating configuration")

    def _require_formatter(self) -> TexJapaneseFormatter:
        if self.formatter is None:
            raise ActivationError("LaTeX Japanese Formatter is not active")
        return self.formatter

    def _apply(self, document: TextDocument, edits: list[TextEdit]) -> bool:
        if document.path is None:
            LOGGER.error("%s has no backing file; edits not applied", document.file_name)
            return False
        workspace_edit = WorkspaceEdit()
        workspace_edit.set(document.path, edits)
        return self.applier.apply(workspace_edit, {document.path: document})

    def save_hook(self, document: TextDocument) -> CommandResult:
        """Run the automatic path for ``document`` and describe the outcome.

        Skipped documents and documents without Japanese punctuation give an
        info result with no edits applied; failed edit application and
        unexpected errors give an error result.
        """
        try:
            edits = self._require_formatter().format_document(document)
            if not edits:
                return CommandResult(MessageLevel.INFO, MSG_NOTHING_TO_FORMAT)
            if not self._apply(document, edits):
                LOGGER.error("Save formatting edits were not applied to %s", document.file_name)
                return CommandResult(MessageLevel.ERROR, MSG_APPLY_FAILED)
            LOGGER.info(
                "Formatted %d line(s) in %s on save", len(edits), document.file_name
            )
            return CommandResult(
                MessageLevel.INFO, MSG_FORMATTED, edits_applied=len(edits)
            )
        except Exception as exc:
            LOGGER.exception("Error during save formatting")
            return CommandResult(MessageLevel.ERROR, f"Formatting failed: {exc}")

    def on_will_save(self, document: TextDocument) -> bool:
        """Format ``document`` before it is saved.

        Returns:
            True if edits were computed and applied
        """
        return self.save_hook(document).edits_applied > 0

    def format_command(self, document: TextDocument | None) -> CommandResult:
        """Run the ``texJapaneseFormatter.format`` command on ``document``."""
        try:
            formatter = self._require_formatter()
            if document is None or not formatter.is_target_language(document):
                return CommandResult(MessageLevel.WARNING, MSG_NOT_LATEX)

            edits = formatter.format_document_manual(document)
            if not edits:
                return CommandResult(MessageLevel.INFO, MSG_NOTHING_TO_FORMAT)

            if not self._apply(document, edits):
                return CommandResult(MessageLevel.ERROR, MSG_APPLY_FAILED)
            return CommandResult(
                MessageLevel.INFO, MSG_FORMATTED, edits_applied=len(edits)
            )
        except Exception as exc:
            LOGGER.exception("Error during manual formatting")
            return CommandResult(MessageLevel.ERROR, f"Formatting failed: {exc}")

    def check(self, document: TextDocument, *, on_save: bool = False) -> list[TextEdit]:
        """Return the edits the command (or the save hook) would apply, without applying them."""
        formatter = self._require_formatter()
        if on_save:
            return formatter.format_document(document)
        return formatter.format_document_manual(document)
