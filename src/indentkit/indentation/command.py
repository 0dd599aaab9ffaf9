"""Indent/outdent command for lines of code blocks."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterator, Optional, Protocol

from ..core.spans import LineEdit, LineSpan
from ..editor.document_model import Block, Document
from ..editor.edits import apply_line_edits
from .locator import locate_lines
from .policy import IndentConfig, can_indent, can_outdent, indent_edit, outdent_edit

LOGGER = logging.getLogger(__name__)


class IndentDirection(Enum):
    """Which way a command moves the touched lines."""

    FORWARD = "forward"
    BACKWARD = "backward"


class IndentationHost(Protocol):
    """Editor surface the command reads at call time."""

    document: Document
    settings: IndentConfig

    def is_indentable(self, block: Block) -> bool:
        ...


EditStrategy = Callable[[LineSpan, IndentConfig], Optional[LineEdit]]

_EDIT_STRATEGIES: dict[IndentDirection, EditStrategy] = {
    IndentDirection.FORWARD: indent_edit,
    IndentDirection.BACKWARD: outdent_edit,
}


class IndentCodeBlockCommand:
    """Adds or removes one indent unit on every qualifying line of the selection.

    The command keeps no state besides its direction; the document, selection
    and settings are read from ``editor`` on every call.
    """

    def __init__(self, editor: IndentationHost, direction: IndentDirection | str) -> None:
        self._editor = editor
        self._direction = IndentDirection(direction)

    @property
    def direction(self) -> IndentDirection:
        return self._direction

    @property
    def is_enabled(self) -> bool:
        settings = self._editor.settings
        if not can_indent(settings):
            return False
        if self._direction is IndentDirection.FORWARD:
            selection = self._editor.document.selection
            return selection is not None and self._editor.is_indentable(selection.first_block)
        return any(can_outdent(span, settings) for span in self._lines())

    def execute(self) -> None:
        """Apply the command; a no-op while :attr:`is_enabled` is false."""

        if not self.is_enabled:
            LOGGER.debug("Skipping %s indentation: command disabled", self._direction.value)
            return

        settings = self._editor.settings
        strategy = _EDIT_STRATEGIES[self._direction]
        edits = [edit for span in self._lines() if (edit := strategy(span, settings)) is not None]
        applied = apply_line_edits(self._editor.document, edits)
        LOGGER.debug("%s indentation changed %d line(s)", self._direction.value.capitalize(), applied)

    def _lines(self) -> Iterator[LineSpan]:
        return locate_lines(self._editor.document, self._editor.is_indentable)


__all__ = ["IndentCodeBlockCommand", "IndentDirection", "IndentationHost"]
