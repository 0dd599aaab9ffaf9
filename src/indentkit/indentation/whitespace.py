"""Leading whitespace of a line."""

from __future__ import annotations

from ..core.spans import LineSpan
from ..services.settings import INDENT_WHITESPACE

_STRIP_CHARS = "".join(sorted(INDENT_WHITESPACE))


def leading_whitespace(span: LineSpan) -> str:
    """Return the run of spaces and tabs opening ``span``."""

    text = span.text()
    return text[: len(text) - len(text.lstrip(_STRIP_CHARS))]


def leading_whitespace_end(span: LineSpan) -> int:
    """Return the offset where ``span``'s leading whitespace stops.

    This is where indentation is inserted and removed. For an empty or
    all-whitespace line it is the line end.
    """

    return span.start + len(leading_whitespace(span))


__all__ = ["leading_whitespace", "leading_whitespace_end"]
