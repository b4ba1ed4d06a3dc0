"""Settings access for the formatter."""

from __future__ import annotations

from .settings import (
    CONFIGURATION_SECTION,
    ConfigurationChangeEvent,
    Disposable,
    SettingsError,
    SettingsManager,
    SettingsStore,
)

__all__ = [
    "CONFIGURATION_SECTION",
    "ConfigurationChangeEvent",
    "Disposable",
    "SettingsError",
    "SettingsManager",
    "SettingsStore",
]
