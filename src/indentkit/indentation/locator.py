"""Find the lines of qualifying blocks touched by a selection."""

from __future__ import annotations

from typing import Callable, Iterator

from ..core.spans import LineSpan
from ..editor.document_model import Block, Document, Position, Selection

BlockPredicate = Callable[[Block], bool]

__all__ = ["BlockPredicate", "iter_block_lines", "line_at", "locate_lines"]


def iter_block_lines(block: Block) -> Iterator[LineSpan]:
    """Yield every line of ``block`` in order."""

    start = 0
    for offset in block.line_break_offsets():
        yield LineSpan(block, start, offset)
        start = offset + 1
    yield LineSpan(block, start, block.max_offset)


def line_at(position: Position) -> LineSpan:
    """Return the line holding ``position``.

    A position right before a line break belongs to the line ending there; a
    position right after it belongs to the following line.
    """

    for span in iter_block_lines(position.block):
        if span.start <= position.offset <= span.end:
            return span
    raise ValueError(f"offset {position.offset} outside {position.block!r}")


def locate_lines(
    document: Document,
    is_qualifying: BlockPredicate,
    selection: Selection | None = None,
) -> Iterator[LineSpan]:
    """Yield, in document order, the qualifying lines touched by ``selection``.

    ``selection`` defaults to the document selection. A line counts as touched
    when any part of it meets the selected range, a zero-length touch at either
    endpoint included. Lines of blocks rejected by ``is_qualifying`` are skipped.
    """

    if selection is None:
        selection = document.selection
    if selection is None:
        return

    if selection.is_collapsed:
        position = selection.anchor
        if is_qualifying(position.block):
            yield line_at(position)
        return

    start, end = selection.start, selection.end
    for block in document.blocks_between(start.block, end.block):
        if not is_qualifying(block):
            continue
        low = start.offset if block is start.block else 0
        high = end.offset if block is end.block else block.max_offset
        for span in iter_block_lines(block):
            if span.start > high:
                break
            if span.touches(low, high):
                yield span
