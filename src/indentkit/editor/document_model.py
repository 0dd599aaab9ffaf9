"""Tree document model: blocks of inline content, positions and selection.

A :class:`Document` holds blocks, optionally grouped in containers. Each
:class:`Block` holds inline nodes: :class:`Text` runs and atomic
:class:`InlineElement` nodes such as the ``softBreak`` line-break marker.
Offsets inside a block count one per character and one per inline element.

Mutations go through :meth:`Document.batch`, which applies every operation
immediately, carries the selection across it and restores the touched blocks
if the batch fails.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, Protocol, Sequence, Union

from .edits import EditApplyError

LOGGER = logging.getLogger(__name__)

LINE_BREAK = "softBreak"
OBJECT_REPLACEMENT = "\ufffc"


@dataclass(slots=True)
class Text:
    """Run of characters inside a block."""

    data: str

    @property
    def size(self) -> int:
        return len(self.data)

    def copy(self) -> "Text":
        return Text(self.data)


@dataclass(slots=True)
class InlineElement:
    """Atomic inline node occupying exactly one offset."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return 1

    @property
    def is_line_break(self) -> bool:
        return self.name == LINE_BREAK

    def copy(self) -> "InlineElement":
        return InlineElement(self.name, dict(self.attributes))


InlineNode = Union[Text, InlineElement]


def line_break() -> InlineElement:
    """Return a new line-break marker."""

    return InlineElement(LINE_BREAK)


@dataclass(slots=True, eq=False)
class Block:
    """Block element holding inline content (a paragraph, a code block...)."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[InlineNode] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._normalize()

    def __repr__(self) -> str:
        return f"Block({self.name!r}, {self.text!r})"

    @property
    def max_offset(self) -> int:
        return sum(node.size for node in self.children)

    @property
    def text(self) -> str:
        """Plain text with ``\\n`` for line breaks and U+FFFC for other inline nodes."""

        parts: list[str] = []
        for node in self.children:
            if isinstance(node, Text):
                parts.append(node.data)
            elif node.is_line_break:
                parts.append("\n")
            else:
                parts.append(OBJECT_REPLACEMENT)
        return "".join(parts)

    def line_break_offsets(self) -> list[int]:
        """Return the offsets occupied by line-break markers, ascending."""

        offsets: list[int] = []
        cursor = 0
        for node in self.children:
            if isinstance(node, InlineElement) and node.is_line_break:
                offsets.append(cursor)
            cursor += node.size
        return offsets

    def char_at(self, offset: int) -> str:
        """Return the character at ``offset``; inline elements render as U+FFFC."""

        if offset < 0 or offset >= self.max_offset:
            raise IndexError(f"offset {offset} outside block {self.name!r}")
        return self.slice_text(offset, offset + 1)

    def slice_text(self, start: int, end: int) -> str:
        """Return the content of ``[start, end)``; inline elements render as U+FFFC."""

        self._check_offset(start)
        self._check_offset(end)
        parts: list[str] = []
        cursor = 0
        for node in self.children:
            node_end = cursor + node.size
            if node_end <= start:
                cursor = node_end
                continue
            if cursor >= end:
                break
            if isinstance(node, Text):
                parts.append(node.data[max(start, cursor) - cursor : min(end, node_end) - cursor])
            else:
                parts.append(OBJECT_REPLACEMENT)
            cursor = node_end
        return "".join(parts)

    def insert_text(self, offset: int, data: str) -> None:
        if not data:
            return
        index = self._split_at(offset)
        self.children.insert(index, Text(data))
        self._normalize()

    def insert_inline(self, offset: int, element: InlineElement) -> None:
        index = self._split_at(offset)
        self.children.insert(index, element)
        self._normalize()

    def remove(self, start: int, end: int) -> str:
        """Remove ``[start, end)`` and return the removed content."""

        if end < start:
            raise ValueError("remove() end must not precede start")
        removed = self.slice_text(start, end)
        if start == end:
            return removed
        first = self._split_at(start)
        last = self._split_at(end)
        del self.children[first:last]
        self._normalize()
        return removed

    def copy_children(self) -> list[InlineNode]:
        return [node.copy() for node in self.children]

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset > self.max_offset:
            raise ValueError(
                f"offset {offset} outside block {self.name!r} (max offset {self.max_offset})"
            )

    def _split_at(self, offset: int) -> int:
        """Ensure a node boundary at ``offset`` and return the index of the node starting there."""

        self._check_offset(offset)
        cursor = 0
        for index, node in enumerate(self.children):
            if cursor == offset:
                return index
            node_end = cursor + node.size
            if offset < node_end and isinstance(node, Text):
                split = offset - cursor
                self.children[index : index + 1] = [Text(node.data[:split]), Text(node.data[split:])]
                return index + 1
            cursor = node_end
        return len(self.children)

    def _normalize(self) -> None:
        merged: list[InlineNode] = []
        for node in self.children:
            if isinstance(node, Text):
                if not node.data:
                    continue
                if merged and isinstance(merged[-1], Text):
                    merged[-1] = Text(merged[-1].data + node.data)
                    continue
            merged.append(node)
        self.children[:] = merged


@dataclass(slots=True, eq=False)
class Container:
    """Element grouping blocks (a block quote, a list...). Holds no inline content."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)


Node = Union[Block, Container]


@dataclass(slots=True, frozen=True)
class Position:
    """Location between two offsets of a block."""

    block: Block
    offset: int


@dataclass(slots=True, frozen=True)
class Selection:
    """Anchor/focus pair; ``start``/``end`` are the pair in document order."""

    anchor: Position
    focus: Position
    is_backward: bool = False

    @property
    def is_collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def start(self) -> Position:
        return self.focus if self.is_backward else self.anchor

    @property
    def end(self) -> Position:
        return self.anchor if self.is_backward else self.focus

    @property
    def first_block(self) -> Block:
        """Return the block holding the first selected position."""

        return self.start.block


class ChangeListener(Protocol):
    """Callback invoked once per committed batch."""

    def __call__(self, document: "Document") -> None:
        ...


class Document:
    """Root of the tree; owns the selection and the mutation batch."""

    def __init__(
        self,
        children: Sequence[Node] = (),
        *,
        selection: Selection | None = None,
    ) -> None:
        self.children: list[Node] = list(children)
        self.version_id = 1
        self._listeners: list[ChangeListener] = []
        self._writer: EditWriter | None = None
        self._selection: Selection | None = None
        if selection is not None:
            self.selection = selection
        else:
            first = next(self.iter_blocks(), None)
            if first is not None:
                self.set_selection(Position(first, 0))

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def iter_blocks(self) -> Iterator[Block]:
        """Yield every block in document order (depth first)."""

        stack: list[Iterator[Node]] = [iter(self.children)]
        while stack:
            node = next(stack[-1], None)
            if node is None:
                stack.pop()
                continue
            if isinstance(node, Block):
                yield node
            else:
                stack.append(iter(node.children))

    def block_index(self, block: Block) -> int:
        for index, candidate in enumerate(self.iter_blocks()):
            if candidate is block:
                return index
        raise ValueError(f"{block!r} is not attached to this document")

    def blocks_between(self, first: Block, last: Block) -> Iterator[Block]:
        """Yield the blocks from ``first`` to ``last`` inclusive, in document order."""

        inside = False
        for block in self.iter_blocks():
            if block is first:
                inside = True
            if inside:
                yield block
            if block is last and inside:
                return

    def compare(self, a: Position, b: Position) -> int:
        """Return -1, 0 or 1 as ``a`` is before, equal to or after ``b``."""

        key_a = (self.block_index(a.block), a.offset)
        key_b = (self.block_index(b.block), b.offset)
        return (key_a > key_b) - (key_a < key_b)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selection(self) -> Selection | None:
        return self._selection

    @selection.setter
    def selection(self, value: Selection) -> None:
        self.set_selection(value.anchor, value.focus)

    def set_selection(self, anchor: Position, focus: Position | None = None) -> Selection:
        """Validate and store a selection; ``focus`` defaults to ``anchor``."""

        focus = anchor if focus is None else focus
        self._validate_position(anchor)
        self._validate_position(focus)
        selection = Selection(anchor, focus, is_backward=self.compare(anchor, focus) > 0)
        self._selection = selection
        return selection

    def _validate_position(self, position: Position) -> None:
        self.block_index(position.block)
        if position.offset < 0 or position.offset > position.block.max_offset:
            raise ValueError(
                f"position offset {position.offset} outside {position.block!r}"
            )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add_change_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @contextmanager
    def batch(self) -> Iterator["EditWriter"]:
        """Group mutations into one atomic change.

        Nested calls join the outermost batch. If the body raises, every block
        touched by the batch and the selection are restored before the error
        propagates.
        """

        if self._writer is not None:
            yield self._writer
            return

        writer = EditWriter(self)
        self._writer = writer
        try:
            yield writer
        except Exception:
            writer.rollback()
            LOGGER.debug("Batch rolled back after %d operation(s)", writer.operation_count)
            raise
        finally:
            self._writer = None

        if writer.operation_count:
            self.version_id += 1
            for listener in list(self._listeners):
                listener(self)


class EditWriter:
    """Mutation handle yielded by :meth:`Document.batch`."""

    def __init__(self, document: Document) -> None:
        self._document = document
        self._snapshots: dict[int, tuple[Block, list[InlineNode]]] = {}
        self._selection_before = document.selection
        self.operation_count = 0

    def insert_text(self, block: Block, offset: int, data: str) -> None:
        if not data:
            return
        self._prepare(block, offset, offset)
        block.insert_text(offset, data)
        self._track_insertion(block, offset, len(data))
        self.operation_count += 1

    def insert_line_break(self, block: Block, offset: int) -> None:
        self._prepare(block, offset, offset)
        block.insert_inline(offset, line_break())
        self._track_insertion(block, offset, 1)
        self.operation_count += 1

    def remove(self, block: Block, start: int, end: int) -> str:
        self._prepare(block, start, end)
        removed = block.remove(start, end)
        if end > start:
            self._track_removal(block, start, end)
            self.operation_count += 1
        return removed

    def replace(
        self,
        block: Block,
        start: int,
        end: int,
        data: str,
        *,
        expected: str | None = None,
    ) -> None:
        """Replace ``[start, end)`` with ``data``, checking ``expected`` first when given."""

        self._prepare(block, start, end)
        if expected is not None:
            actual = block.slice_text(start, end)
            if actual != expected:
                raise EditApplyError(
                    "Edit range content mismatch",
                    reason="range_mismatch",
                    expected=expected,
                    actual=actual,
                )
        if end > start:
            self.remove(block, start, end)
        self.insert_text(block, start, data)

    def rollback(self) -> None:
        for block, children in self._snapshots.values():
            block.children[:] = children
        self._document._selection = self._selection_before
        self._snapshots.clear()

    def _prepare(self, block: Block, start: int, end: int) -> None:
        try:
            self._document.block_index(block)
        except ValueError as exc:
            raise EditApplyError(str(exc), reason="detached_block") from exc
        if start < 0 or end < start or end > block.max_offset:
            raise EditApplyError(
                f"Edit range ({start}, {end}) exceeds {block!r}",
                reason="range_overflow",
            )
        self._snapshots.setdefault(id(block), (block, block.copy_children()))

    def _track_insertion(self, block: Block, offset: int, length: int) -> None:
        """Move positions at or after ``offset`` past the inserted content.

        The end of a non-collapsed range sitting exactly at ``offset`` stays
        put, so a range never grows to cover text inserted at its edge.
        """

        selection = self._document.selection
        keep_range_end = selection is not None and not selection.is_collapsed

        def shift(position: Position, is_end: bool) -> Position:
            if position.block is not block or position.offset < offset:
                return position
            if position.offset == offset and is_end and keep_range_end:
                return position
            return Position(block, position.offset + length)

        self._transform_selection(shift)

    def _track_removal(self, block: Block, start: int, end: int) -> None:
        def shift(position: Position, is_end: bool) -> Position:
            if position.block is not block or position.offset <= start:
                return position
            if position.offset >= end:
                return Position(block, position.offset - (end - start))
            return Position(block, start)

        self._transform_selection(shift)

    def _transform_selection(self, shift: Callable[[Position, bool], Position]) -> None:
        selection = self._document.selection
        if selection is None:
            return
        self._document._selection = Selection(
            shift(selection.anchor, selection.is_backward),
            shift(selection.focus, not selection.is_backward),
            is_backward=selection.is_backward,
        )


__all__ = [
    "LINE_BREAK",
    "OBJECT_REPLACEMENT",
    "Block",
    "Container",
    "Document",
    "EditWriter",
    "InlineElement",
    "Position",
    "Selection",
    "Text",
    "line_break",
]
