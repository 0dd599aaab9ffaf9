"""Decide whether a line can be indented/outdented and build the edit."""

from __future__ import annotations

from typing import Protocol

from ..core.spans import LineEdit, LineSpan
from .whitespace import leading_whitespace, leading_whitespace_end


class IndentConfig(Protocol):
    """Read-only view of the settings used by the policy."""

    @property
    def sequence(self) -> str | None:
        ...


def can_indent(config: IndentConfig) -> bool:
    return config.sequence is not None


def indent_edit(span: LineSpan, config: IndentConfig) -> LineEdit:
    """Insert one indent unit right after the line's leading whitespace."""

    sequence = config.sequence
    if sequence is None:
        raise ValueError("Indentation is disabled")
    return LineEdit.insertion(span.block, leading_whitespace_end(span), sequence)


def can_outdent(span: LineSpan, config: IndentConfig) -> bool:
    return outdent_edit(span, config) is not None


def outdent_edit(span: LineSpan, config: IndentConfig) -> LineEdit | None:
    """Remove one indent unit from the end of the line's leading whitespace.

    Returns ``None`` unless the whitespace ends with the full sequence.
    """

    sequence = config.sequence
    if sequence is None:
        return None
    whitespace = leading_whitespace(span)
    if not whitespace.endswith(sequence):
        return None
    boundary = span.start + len(whitespace)
    return LineEdit.removal(span.block, boundary - len(sequence), sequence)


__all__ = ["IndentConfig", "can_indent", "can_outdent", "indent_edit", "outdent_edit"]
