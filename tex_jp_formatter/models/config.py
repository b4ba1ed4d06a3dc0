"""Formatter configuration snapshot.

The model accepts both the camelCase keys used in the settings namespace
(``formatOnSave``, ``targetLanguages``) and the snake_case attribute names.
"""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

DEFAULT_ENABLED = True
DEFAULT_FORMAT_ON_SAVE = True
DEFAULT_TARGET_LANGUAGES = ("latex",)


class FormatterConfig(BaseModel):
    """Immutable configuration snapshot held by the formatter.

    Fields:
    - enabled: Master switch for both the save hook and the manual command
    - format_on_save: Whether the save hook formats documents
    - target_languages: Ordered language identifiers eligible for formatting
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    enabled: bool = DEFAULT_ENABLED
    format_on_save: bool = Field(default=DEFAULT_FORMAT_ON_SAVE, alias="formatOnSave")
    target_languages: Tuple[str, ...] = Field(
        default=DEFAULT_TARGET_LANGUAGES,
        alias="targetLanguages",
    )

    @field_validator("enabled", "format_on_save", mode="before")
    def _default_missing_flag(cls, value: object, info: ValidationInfo) -> object:
        if value is None:
            return (
                DEFAULT_ENABLED if info.field_name == "enabled" else DEFAULT_FORMAT_ON_SAVE
            )
        return value

    @field_validator("target_languages", mode="before")
    def _normalise_languages(cls, value: object) -> Tuple[str, ...]:
        if value is None:
            return DEFAULT_TARGET_LANGUAGES
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("targetLanguages must be a list of language identifiers")
        return tuple(str(item).strip() for item in value if str(item).strip())
