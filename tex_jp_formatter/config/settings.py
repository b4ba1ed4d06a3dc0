"""Namespaced settings store and the formatter's view of it.

Settings are layered, lowest precedence first:

1. built-in defaults (applied by :class:`SettingsManager`)
2. a JSON settings file, VS Code style (comments and trailing commas are
   tolerated); either dotted keys
   (``"texJapaneseFormatter.enabled": false``) or a nested section object
   (``"texJapaneseFormatter": {"enabled": false}``)
3. environment variables such as ``TEX_JAPANESE_FORMATTER_ENABLED``
   (callers may seed these from a ``.env`` file with python-dotenv)
4. in-memory values written with :meth:`SettingsStore.update`

Listeners registered with :meth:`SettingsStore.on_did_change_configuration`
are only notified when an effective value actually changed.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from json_repair import repair_json
from pydantic import ValidationError

from ..models.config import (
    DEFAULT_ENABLED,
    DEFAULT_FORMAT_ON_SAVE,
    DEFAULT_TARGET_LANGUAGES,
    FormatterConfig,
)

LOGGER = logging.getLogger(__name__)

CONFIGURATION_SECTION = "texJapaneseFormatter"
ENV_PREFIX = "TEX_JAPANESE_FORMATTER"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class SettingsError(Exception):
    """Raised when settings cannot be read or coerced."""


class Disposable:
    """Handle returned by subscriptions; ``dispose()`` unsubscribes once."""

    def __init__(self, on_dispose: Callable[[], None]) -> None:
        self._on_dispose: Callable[[], None] | None = on_dispose

    @property
    def disposed(self) -> bool:
        return self._on_dispose is None

    def dispose(self) -> None:
        callback, self._on_dispose = self._on_dispose, None
        if callback is not None:
            callback()

    def __enter__(self) -> "Disposable":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


@dataclass(frozen=True)
class ConfigurationChangeEvent:
    """Describes which fully qualified setting keys changed."""

    changed_keys: frozenset[str]

    def affects_configuration(self, section: str) -> bool:
        """True if ``section`` (or a key below it) changed."""
        prefix = f"{section}."
        return any(
            key == section or key.startswith(prefix) for key in self.changed_keys
        )


def env_var_name(section: str, key: str) -> str:
    """Return the environment variable for ``key`` (``formatOnSave`` -> ``..._FORMAT_ON_SAVE``)."""
    prefix = ENV_PREFIX if section == CONFIGURATION_SECTION else section.upper()
    return f"{prefix}_{_CAMEL_BOUNDARY.sub('_', key).upper()}"


def _parse_bool(name: str, value: str) -> bool:
    value_lower = value.lower()
    if value_lower in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if value_lower in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise SettingsError(f"Environment variable {name} must be a boolean")


def _parse_list(name: str, value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


_ENV_PARSERS: dict[str, Callable[[str, str], Any]] = {
    "enabled": _parse_bool,
    "formatOnSave": _parse_bool,
    "targetLanguages": _parse_list,
}


def _parse_settings_json(raw: str) -> Any:
    """Parse a settings file, accepting the JSONC that VS Code writes.

    Strict JSON is tried first. Otherwise the outermost ``{...}`` object is
    repaired (``//`` and ``/* */`` comments, trailing commas) and parsed.

    Raises:
        ValueError: If the text holds no JSON object
        json.JSONDecodeError: If the repaired text still cannot be parsed
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        start = raw.find("{")
        end = raw.rfind("}")
        if start == -1 or end <= start:
            raise ValueError(str(exc)) from exc

    repaired = repair_json(raw[start : end + 1])
    LOGGER.debug("Settings file needed JSON repair (comments or trailing commas)")
    return json.loads(repaired)


class SettingsStore:
    """Layered key-value settings with change notification.

    Args:
        settings_file: Optional JSON settings file; a missing file is treated
            as empty
        environ: Environment mapping to read overrides from (defaults to
            ``os.environ`` at read time)
    """

    def __init__(
        self,
        settings_file: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.settings_file = Path(settings_file) if settings_file is not None else None
        self._environ = environ
        self._overrides: dict[str, Any] = {}
        self._listeners: list[Callable[[ConfigurationChangeEvent], None]] = []
        self._values = self._read_all()

    def _read_file(self) -> dict[str, Any]:
        if self.settings_file is None or not self.settings_file.exists():
            return {}
        try:
            raw = self.settings_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsError(
                f"Could not read settings file {self.settings_file}: {exc}"
            ) from exc
        if not raw.strip():
            return {}
        try:
            loaded = _parse_settings_json(raw)
        except ValueError as exc:
            raise SettingsError(
                f"Settings file {self.settings_file} is not valid JSON: {exc}"
            ) from exc
        if not isinstance(loaded, dict):
            raise SettingsError(
                f"Settings file {self.settings_file} must contain a JSON object"
            )

        values: dict[str, Any] = {}
        for key, value in loaded.items():
            if isinstance(value, dict) and "." not in key:
                for sub_key, sub_value in value.items():
                    values[f"{key}.{sub_key}"] = sub_value
            else:
                values[key] = value
        return values

    def _read_environment(self) -> dict[str, Any]:
        environ = self._environ if self._environ is not None else os.environ
        values: dict[str, Any] = {}
        for key, parser in _ENV_PARSERS.items():
            name = env_var_name(CONFIGURATION_SECTION, key)
            raw = environ.get(name)
            if raw is None or raw.strip() == "":
                continue
            values[f"{CONFIGURATION_SECTION}.{key}"] = parser(name, raw.strip())
        return values

    def _read_all(self) -> dict[str, Any]:
        values = self._read_file()
        values.update(self._read_environment())
        values.update(self._overrides)
        return values

    def get(self, section: str, key: str, default: Any = None) -> Any:
        return self._values.get(f"{section}.{key}", default)

    def as_dict(self, section: str) -> dict[str, Any]:
        """Return the effective values under ``section`` keyed by short name."""
        prefix = f"{section}."
        return {
            key[len(prefix) :]: value
            for key, value in self._values.items()
            if key.startswith(prefix)
        }

    def update(self, section: str, key: str, value: Any) -> None:
        """Set an in-memory value; ``None`` removes a previous update."""
        qualified = f"{section}.{key}"
        if value is None:
            self._overrides.pop(qualified, None)
        else:
            self._overrides[qualified] = value
        self._refresh()

    def reload(self) -> None:
        """Re-read the settings file and environment, notifying on change."""
        self._refresh()

    def _refresh(self) -> None:
        new_values = self._read_all()
        changed = {
            key
            for key in set(self._values) | set(new_values)
            if self._values.get(key) != new_values.get(key)
        }
        self._values = new_values
        if changed:
            LOGGER.debug("Settings changed: %s", ", ".join(sorted(changed)))
            self._fire(ConfigurationChangeEvent(frozenset(changed)))

    def on_did_change_configuration(
        self, listener: Callable[[ConfigurationChangeEvent], None]
    ) -> Disposable:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(_remove)

    def _fire(self, event: ConfigurationChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                LOGGER.exception("Configuration change listener failed")


class SettingsManager:
    """Read the formatter configuration out of a :class:`SettingsStore`."""

    CONFIGURATION_SECTION = CONFIGURATION_SECTION

    def __init__(self, store: SettingsStore | None = None) -> None:
        self.store = store if store is not None else SettingsStore()

    def get_configuration(self) -> FormatterConfig:
        """Return a fresh configuration snapshot.

        Missing keys fall back to ``enabled=True``, ``formatOnSave=True`` and
        ``targetLanguages=["latex"]``.

        Raises:
            SettingsError: If a stored value cannot be coerced
        """
        section = self.CONFIGURATION_SECTION
        try:
            return FormatterConfig(
                enabled=self.store.get(section, "enabled", DEFAULT_ENABLED),
                formatOnSave=self.store.get(
                    section, "formatOnSave", DEFAULT_FORMAT_ON_SAVE
                ),
                targetLanguages=self.store.get(
                    section, "targetLanguages", list(DEFAULT_TARGET_LANGUAGES)
                ),
            )
        except ValidationError as exc:
            raise SettingsError(f"Invalid {section} configuration: {exc}") from exc

    def on_configuration_changed(self, callback: Callable[[], None]) -> Disposable:
        """Invoke ``callback`` whenever a setting in this namespace changes."""

        def _listener(event: ConfigurationChangeEvent) -> None:
            if event.affects_configuration(self.CONFIGURATION_SECTION):
                callback()

        return self.store.on_did_change_configuration(_listener)
