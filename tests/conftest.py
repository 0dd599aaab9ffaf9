"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Callable

import pytest

from indentkit.editor.commands import Editor
from indentkit.services.settings import Settings
from indentkit.utils.logging import teardown_logging


@pytest.fixture
def make_editor() -> Callable[..., Editor]:
    """Build an :class:`Editor` from markup with the given indent sequence."""

    def factory(markup: str, *, sequence: str | bool = "\t", **kwargs) -> Editor:
        return Editor.from_markup(markup, Settings(indent_sequence=sequence), **kwargs)

    return factory


@pytest.fixture(autouse=True)
def _clear_indentkit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "INDENTKIT_INDENT_SEQUENCE",
        "INDENTKIT_INDENTABLE_BLOCKS",
        "INDENTKIT_DEBUG_LOGGING",
        "INDENTKIT_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def reset_indentkit_logging():
    """Remove handlers installed by ``setup_logging`` after a test."""

    yield
    teardown_logging()
