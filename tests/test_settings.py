"""Tests for the settings persistence layer."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

import pytest

from indentkit.services.settings import (
    DEFAULT_KEYSTROKES,
    Settings,
    SettingsStore,
    normalize_indent_sequence,
)


def test_defaults_indent_code_blocks_with_a_tab() -> None:
    settings = Settings()

    assert settings.indent_sequence == "\t"
    assert settings.sequence == "\t"
    assert settings.indentable_blocks == ("codeBlock",)
    assert settings.keystrokes == dict(DEFAULT_KEYSTROKES)
    assert not settings.indentation_disabled


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, False),
        (False, False),
        (True, "\t"),
        ("\t", "\t"),
        ("  ", "  "),
        (" \t", " \t"),
        ("tab", "\t"),
        ("TAB", "\t"),
        ("\\t", "\t"),
        ("\\t\\t", "\t\t"),
        ("off", False),
        ("disabled", False),
        ("False", False),
    ],
)
def test_normalize_indent_sequence(value, expected) -> None:
    assert normalize_indent_sequence(value) == expected


@pytest.mark.parametrize("value", ["", "ab", " x", "\\n"])
def test_normalize_indent_sequence_rejects_non_whitespace(value) -> None:
    with pytest.raises(ValueError):
        normalize_indent_sequence(value)


def test_normalize_indent_sequence_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        normalize_indent_sequence(4)


def test_settings_disabled_sequence_has_no_unit() -> None:
    settings = Settings(indent_sequence=False)

    assert settings.indentation_disabled
    assert settings.sequence is None


def test_settings_normalizes_fields() -> None:
    settings = Settings(indent_sequence="tab", indentable_blocks=["codeBlock", "preformatted"])

    assert settings.indent_sequence == "\t"
    assert settings.indentable_blocks == ("codeBlock", "preformatted")
    assert Settings(indentable_blocks="codeBlock").indentable_blocks == ("codeBlock",)


def test_settings_rejects_invalid_sequence() -> None:
    with pytest.raises(ValueError):
        Settings(indent_sequence="--")


def test_replace_renormalizes_sequence() -> None:
    assert replace(Settings(), indent_sequence="\\t\\t").indent_sequence == "\t\t"


def test_load_returns_defaults_when_file_missing(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")

    assert store.load() == Settings()


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore(path)
    original = Settings(
        indent_sequence="  ",
        indentable_blocks=("codeBlock", "preformatted"),
        keystrokes={"indentCodeBlock": "Ctrl+]", "outdentCodeBlock": "Ctrl+["},
        debug_logging=True,
    )

    assert store.save(original) == path
    reloaded = SettingsStore(path).load()

    assert reloaded == original
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["indentable_blocks"] == ["codeBlock", "preformatted"]
    assert not path.with_suffix(".tmp").exists()


def test_disabled_sequence_roundtrip(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")

    store.save(Settings(indent_sequence=False))

    assert store.load().indentation_disabled


def test_load_ignores_invalid_json(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        settings = SettingsStore(path).load()

    assert settings == Settings()
    assert "not valid JSON" in caplog.text


def test_load_ignores_non_object_payload(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(["codeBlock"]), encoding="utf-8")

    assert SettingsStore(path).load() == Settings()


def test_load_drops_invalid_stored_sequence(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"indent_sequence": "xx", "indentable_blocks": ["preformatted"]}),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING):
        settings = SettingsStore(path).load()

    assert settings.indent_sequence == "\t"
    assert settings.indentable_blocks == ("preformatted",)
    assert "indent_sequence" in caplog.text


def test_load_merges_partial_keystrokes(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"keystrokes": {"indentCodeBlock": "Ctrl+I"}}), encoding="utf-8")

    settings = SettingsStore(path).load()

    assert settings.keystrokes == {"indentCodeBlock": "Ctrl+I", "outdentCodeBlock": "Shift+Tab"}


def test_load_ignores_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark", "indent_sequence": "    "}), encoding="utf-8")

    assert SettingsStore(path).load().indent_sequence == "    "


def test_runtime_overrides_apply_after_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path).save(Settings(indent_sequence="  "))

    settings = SettingsStore(path).load(
        overrides={"indent_sequence": "tab", "debug_logging": None, "unknown": 1}
    )

    assert settings.indent_sequence == "\t"
    assert settings.debug_logging is False


def test_invalid_runtime_overrides_are_ignored(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = SettingsStore(tmp_path / "settings.json")

    with caplog.at_level(logging.WARNING):
        settings = store.load(overrides={"indent_sequence": "nope"})

    assert settings == Settings()
    assert "runtime" in caplog.text


def test_env_overrides_take_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path).save(Settings(indent_sequence="  "))
    monkeypatch.setenv("INDENTKIT_INDENT_SEQUENCE", "\\t")
    monkeypatch.setenv("INDENTKIT_INDENTABLE_BLOCKS", "codeBlock, preformatted ,")
    monkeypatch.setenv("INDENTKIT_DEBUG_LOGGING", "yes")

    settings = SettingsStore(path).load(overrides={"indent_sequence": "    "})

    assert settings.indent_sequence == "\t"
    assert settings.indentable_blocks == ("codeBlock", "preformatted")
    assert settings.debug_logging is True


def test_env_can_disable_indentation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INDENTKIT_INDENT_SEQUENCE", "off")

    settings = SettingsStore(tmp_path / "settings.json").load()

    assert settings.indentation_disabled


def test_invalid_env_sequence_is_ignored(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("INDENTKIT_INDENT_SEQUENCE", "abc")

    with caplog.at_level(logging.WARNING):
        settings = SettingsStore(tmp_path / "settings.json").load()

    assert settings.indent_sequence == "\t"
    assert "INDENTKIT_INDENT_SEQUENCE" in caplog.text


def test_store_exposes_path(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"

    assert SettingsStore(path).path == path
