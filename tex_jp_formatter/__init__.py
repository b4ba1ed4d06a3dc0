"""TeX Japanese Formatter package.

Normalises Japanese punctuation (、。) into fullwidth comma and full stop
(，．) inside LaTeX sources. Callers can import the main entry points
directly from ``tex_jp_formatter``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.2.0"

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config.settings import SettingsManager, SettingsStore
    from .extension import FormatterExtension
    from .formatter.tex_formatter import TexJapaneseFormatter
    from .formatter.text_processor import (
        format_japanese_punctuation,
        has_changes,
        has_japanese_punctuation,
    )
    from .workspace import open_document

__all__ = [
    "FormatterExtension",
    "SettingsManager",
    "SettingsStore",
    "TexJapaneseFormatter",
    "format_japanese_punctuation",
    "has_changes",
    "has_japanese_punctuation",
    "open_document",
]

_LAZY_EXPORTS = {
    # attribute -> (module, attribute)
    "FormatterExtension": (".extension", "FormatterExtension"),
    "SettingsManager": (".config.settings", "SettingsManager"),
    "SettingsStore": (".config.settings", "SettingsStore"),
    "TexJapaneseFormatter": (".formatter.tex_formatter", "TexJapaneseFormatter"),
    "format_japanese_punctuation": (
        ".formatter.text_processor",
        "format_japanese_punctuation",
    ),
    "has_changes": (".formatter.text_processor", "has_changes"),
    "has_japanese_punctuation": (
        ".formatter.text_processor",
        "has_japanese_punctuation",
    ),
    "open_document": (".workspace", "open_document"),
}


def __getattr__(name: str):
    """Lazily import and return exported attributes.

    Keeps ``import tex_jp_formatter`` cheap and avoids import cycles between
    the formatter, settings and host layers.
    """

    if name in _LAZY_EXPORTS:
        module_name, attr = _LAZY_EXPORTS[name]
        from importlib import import_module

        mod = import_module(f"tex_jp_formatter{module_name}")
        value = getattr(mod, attr)
        globals()[name] = value
        return value
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_LAZY_EXPORTS.keys()))
