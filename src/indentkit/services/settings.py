"""Settings dataclasses and persistence helpers."""

from __future__ import annotations

import codecs
import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "Settings",
    "SettingsStore",
    "DEFAULT_INDENT_SEQUENCE",
    "DEFAULT_INDENTABLE_BLOCKS",
    "DEFAULT_KEYSTROKES",
    "INDENT_WHITESPACE",
    "normalize_indent_sequence",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".indentkit"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_SEQUENCE_ENV = "INDENTKIT_INDENT_SEQUENCE"
_BLOCKS_ENV = "INDENTKIT_INDENTABLE_BLOCKS"
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "INDENTKIT_DEBUG_LOGGING": "debug_logging",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_DISABLED_VALUES = {"false", "off", "no", "none", "disabled"}
_NAMED_SEQUENCES: Mapping[str, str] = {"tab": "\t"}

INDENT_WHITESPACE = frozenset(" \t")
DEFAULT_INDENT_SEQUENCE = "\t"
DEFAULT_INDENTABLE_BLOCKS: tuple[str, ...] = ("codeBlock",)
DEFAULT_KEYSTROKES: Mapping[str, str] = {
    "indentCodeBlock": "Tab",
    "outdentCodeBlock": "Shift+Tab",
}


def normalize_indent_sequence(value: Any) -> str | bool:
    """Return ``value`` as a literal indent sequence or ``False`` when disabled.

    Accepts ``False``/``None`` (disabled), ``True`` (the default sequence), a
    literal string of spaces and tabs, the word ``"tab"``, backslash escapes
    such as ``"\\t"`` and the words ``"false"``, ``"off"`` or ``"disabled"``.
    """

    if value is None or value is False:
        return False
    if value is True:
        return DEFAULT_INDENT_SEQUENCE
    if not isinstance(value, str):
        raise TypeError(f"indent_sequence must be a string or False, not {type(value).__name__}")

    keyword = value.strip().lower()
    if keyword in _DISABLED_VALUES:
        return False
    if keyword in _NAMED_SEQUENCES:
        return _NAMED_SEQUENCES[keyword]

    sequence = value
    if "\\" in sequence:
        try:
            sequence = codecs.decode(sequence, "unicode_escape")
        except UnicodeDecodeError as exc:
            raise ValueError(f"indent_sequence {value!r} has an invalid escape") from exc
    if not sequence:
        raise ValueError("indent_sequence must not be empty; use False to disable indentation")
    if any(char not in INDENT_WHITESPACE for char in sequence):
        raise ValueError(f"indent_sequence {value!r} may only contain spaces and tabs")
    return sequence


@dataclass(slots=True)
class Settings:
    """User-configurable indentation settings."""

    indent_sequence: str | bool = DEFAULT_INDENT_SEQUENCE
    indentable_blocks: tuple[str, ...] = DEFAULT_INDENTABLE_BLOCKS
    keystrokes: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_KEYSTROKES))
    debug_logging: bool = False

    def __post_init__(self) -> None:
        self.indent_sequence = normalize_indent_sequence(self.indent_sequence)
        if isinstance(self.indentable_blocks, str):
            self.indentable_blocks = (self.indentable_blocks,)
        self.indentable_blocks = tuple(self.indentable_blocks)

    @property
    def indentation_disabled(self) -> bool:
        return self.indent_sequence is False

    @property
    def sequence(self) -> str | None:
        """Return the literal indent unit, or ``None`` when indentation is disabled."""

        if self.indent_sequence is False:
            return None
        return str(self.indent_sequence)


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying runtime and environment overrides."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            if "indent_sequence" in data:
                try:
                    data["indent_sequence"] = normalize_indent_sequence(data["indent_sequence"])
                except (TypeError, ValueError) as exc:
                    LOGGER.warning("Ignoring stored indent_sequence: %s", exc)
                    data.pop("indent_sequence")
            keystrokes = data.get("keystrokes")
            if isinstance(keystrokes, Mapping):
                merged = dict(DEFAULT_KEYSTROKES)
                merged.update({str(name): str(key) for name, key in keystrokes.items()})
                data["keystrokes"] = merged
            elif keystrokes is not None:
                LOGGER.warning("Ignoring stored keystrokes: expected a mapping")
                data.pop("keystrokes")
            try:
                settings = Settings(**data)
            except (TypeError, ValueError) as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            LOGGER.debug("Settings loaded from %s", self._path)

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="runtime")

        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = self._serialize(settings)
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _serialize(self, settings: Settings) -> Dict[str, Any]:
        data = asdict(settings)
        data["indentable_blocks"] = list(settings.indentable_blocks)
        data["version"] = _SETTINGS_VERSION
        return data

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            payload = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return payload

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str,
    ) -> Settings:
        allowed = {item.name for item in fields(Settings)}
        filtered: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in allowed or value is None:
                continue
            filtered[key] = value
        if not filtered:
            return settings
        LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
        try:
            return replace(settings, **filtered)
        except (TypeError, ValueError) as exc:
            LOGGER.warning("Ignoring invalid %s settings overrides: %s", source, exc)
            return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        raw_sequence = os.environ.get(_SEQUENCE_ENV)
        if raw_sequence is not None:
            try:
                overrides["indent_sequence"] = normalize_indent_sequence(raw_sequence)
            except ValueError as exc:
                LOGGER.warning("Environment override %s is invalid: %s", _SEQUENCE_ENV, exc)
        raw_blocks = os.environ.get(_BLOCKS_ENV)
        if raw_blocks is not None:
            blocks = tuple(name.strip() for name in raw_blocks.split(",") if name.strip())
            if blocks:
                overrides["indentable_blocks"] = blocks
            else:
                LOGGER.warning("Environment override %s lists no block names", _BLOCKS_ENV)
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {item.name for item in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}
