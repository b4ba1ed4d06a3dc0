"""Enumerations shared by the host layer and the CLI."""

from __future__ import annotations

from enum import Enum


class MessageLevel(str, Enum):
    """Severity of a user-visible message produced by the format command.

    Values:
        INFO: Informational message (formatting done / nothing to do)
        WARNING: The command could not run for this document
        ERROR: Formatting failed
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
