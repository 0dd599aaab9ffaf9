"""Value types describing lines and line edits inside a block."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ..editor.document_model import Block


def _coerce_offset(value: Any, owner: str, label: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{owner} {label} must be an integer") from exc
    if number < 0:
        raise ValueError(f"{owner} {label} must not be negative")
    return number


@dataclass(slots=True, frozen=True)
class LineSpan:
    """One line of a block: ``[start, end)`` between line breaks or block edges."""

    block: "Block"
    start: int
    end: int

    def __post_init__(self) -> None:
        start = _coerce_offset(self.start, "LineSpan", "start")
        end = _coerce_offset(self.end, "LineSpan", "end")
        if end < start:
            raise ValueError("LineSpan end must not precede its start")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def length(self) -> int:
        """Return the number of offsets covered by the line."""

        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def touches(self, low: int, high: int) -> bool:
        """Return ``True`` when ``[low, high]`` meets the line, endpoints included."""

        return self.start <= high and self.end >= low

    def text(self) -> str:
        """Return the line content; inline elements render as U+FFFC."""

        return self.block.slice_text(self.start, self.end)

    def to_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


@dataclass(slots=True, frozen=True)
class LineEdit:
    """Replacement of ``[start, end)`` in ``block`` by ``replacement``.

    ``match_text`` is the content expected in the range when the edit is
    applied; a mismatch aborts the whole batch.
    """

    block: "Block"
    start: int
    end: int
    replacement: str = ""
    match_text: str = ""

    def __post_init__(self) -> None:
        start = _coerce_offset(self.start, "LineEdit", "start")
        end = _coerce_offset(self.end, "LineEdit", "end")
        if end < start:
            raise ValueError("LineEdit end must not precede its start")
        if len(self.match_text) != end - start:
            raise ValueError("LineEdit match_text must cover the edited range exactly")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end

    @property
    def is_removal(self) -> bool:
        return not self.replacement and self.end > self.start

    @property
    def delta(self) -> int:
        """Return the change in block length caused by the edit."""

        return len(self.replacement) - (self.end - self.start)

    @classmethod
    def insertion(cls, block: "Block", offset: int, text: str) -> "LineEdit":
        return cls(block=block, start=offset, end=offset, replacement=text)

    @classmethod
    def removal(cls, block: "Block", start: int, expected: str) -> "LineEdit":
        return cls(block=block, start=start, end=start + len(expected), match_text=expected)


__all__ = ["LineSpan", "LineEdit"]
