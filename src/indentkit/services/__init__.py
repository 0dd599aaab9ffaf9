"""Service layer: settings and their persistence."""

from .settings import Settings, SettingsStore, normalize_indent_sequence

__all__ = ["Settings", "SettingsStore", "normalize_indent_sequence"]
