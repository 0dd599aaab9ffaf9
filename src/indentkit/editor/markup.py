"""Compact markup for building documents and printing them back.

``<codeBlock language="py">f[]oo<softBreak></softBreak>bar</codeBlock>``
describes one code block with a collapsed selection after ``f``. ``[`` marks
the selection start and ``]`` its end. Top-level elements and elements inside
a container are blocks; elements inside a block are inline nodes.
"""

from __future__ import annotations

import re
from collections import deque
from typing import Iterable
from xml.etree import ElementTree
from xml.sax.saxutils import escape

from .document_model import (
    Block,
    Container,
    Document,
    InlineElement,
    InlineNode,
    Node,
    Position,
    Selection,
    Text,
)

__all__ = ["DEFAULT_CONTAINERS", "parse_markup", "stringify_document"]

DEFAULT_CONTAINERS: tuple[str, ...] = ("blockQuote",)
_MARKER_RE = re.compile(r"([\[\]])")
_ATTRIBUTE_ENTITIES = {'"': "&quot;"}


def parse_markup(
    markup: str,
    *,
    containers: Iterable[str] = DEFAULT_CONTAINERS,
    backward: bool = False,
) -> Document:
    """Build a :class:`Document` (and its selection) from ``markup``."""

    try:
        root = ElementTree.fromstring(f"<root>{markup}</root>")
    except ElementTree.ParseError as exc:
        raise ValueError(f"Malformed document markup: {exc}") from exc

    builder = _MarkupBuilder(frozenset(containers))
    children = builder.build_children(root)
    document = Document(children)

    start, end = builder.start, builder.end
    if start is None and end is None:
        return document
    if start is None or end is None:
        raise ValueError("Selection markup needs both '[' and ']'")
    if document.compare(start, end) > 0:
        raise ValueError("Selection markup ']' must not precede '['")
    if backward:
        document.set_selection(end, start)
    else:
        document.set_selection(start, end)
    return document


def stringify_document(document: Document, *, with_selection: bool = True) -> str:
    """Render ``document`` as markup, with ``[``/``]`` around the selection."""

    selection = document.selection if with_selection else None
    parts: list[str] = []
    for node in document.children:
        _write_node(node, selection, parts)
    return "".join(parts)


class _MarkupBuilder:
    def __init__(self, containers: frozenset[str]) -> None:
        self._containers = containers
        self.start: Position | None = None
        self.end: Position | None = None

    def build_children(self, element: ElementTree.Element) -> list[Node]:
        _require_blank(element.text, element.tag)
        nodes: list[Node] = []
        for child in element:
            nodes.append(self._build_node(child))
            _require_blank(child.tail, element.tag)
        return nodes

    def _build_node(self, element: ElementTree.Element) -> Node:
        if element.tag in self._containers:
            return Container(element.tag, dict(element.attrib), self.build_children(element))
        children: list[InlineNode] = []
        markers: list[tuple[str, int]] = []
        self._collect_text(element.text, children, markers)
        for child in element:
            if len(child) or child.text:
                raise ValueError(f"Inline element <{child.tag}> cannot have content")
            children.append(InlineElement(child.tag, dict(child.attrib)))
            self._collect_text(child.tail, children, markers)
        block = Block(element.tag, dict(element.attrib), children)
        for marker, offset in markers:
            self._place_marker(marker, Position(block, offset))
        return block

    def _collect_text(
        self,
        text: str | None,
        children: list[InlineNode],
        markers: list[tuple[str, int]],
    ) -> None:
        if not text:
            return
        for part in _MARKER_RE.split(text):
            if part in ("[", "]"):
                markers.append((part, sum(node.size for node in children)))
            elif part:
                children.append(Text(part))

    def _place_marker(self, marker: str, position: Position) -> None:
        if marker == "[":
            if self.start is not None:
                raise ValueError("Selection markup contains more than one '['")
            self.start = position
        else:
            if self.end is not None:
                raise ValueError("Selection markup contains more than one ']'")
            self.end = position


def _require_blank(text: str | None, tag: str) -> None:
    if text and text.strip():
        raise ValueError(f"Text {text.strip()!r} is not allowed directly inside <{tag}>")


def _write_node(node: Node, selection: Selection | None, parts: list[str]) -> None:
    parts.append(f"<{node.name}{_format_attributes(node.attributes)}>")
    if isinstance(node, Container):
        for child in node.children:
            _write_node(child, selection, parts)
    else:
        _write_block_content(node, selection, parts)
    parts.append(f"</{node.name}>")


def _write_block_content(block: Block, selection: Selection | None, parts: list[str]) -> None:
    markers: list[tuple[int, int, str]] = []
    if selection is not None:
        if selection.start.block is block:
            markers.append((selection.start.offset, 0, "["))
        if selection.end.block is block:
            markers.append((selection.end.offset, 1, "]"))
    pending = deque(sorted(markers))

    cursor = 0
    for child in block.children:
        child_end = cursor + child.size
        if isinstance(child, Text):
            piece_start = cursor
            while pending and pending[0][0] < child_end:
                offset, _order, marker = pending.popleft()
                parts.append(escape(child.data[piece_start - cursor : offset - cursor]))
                parts.append(marker)
                piece_start = offset
            parts.append(escape(child.data[piece_start - cursor :]))
        else:
            while pending and pending[0][0] <= cursor:
                parts.append(pending.popleft()[2])
            parts.append(f"<{child.name}{_format_attributes(child.attributes)}></{child.name}>")
        cursor = child_end
    parts.extend(marker for _offset, _order, marker in pending)


def _format_attributes(attributes: dict[str, str]) -> str:
    return "".join(
        f' {name}="{escape(str(value), _ATTRIBUTE_ENTITIES)}"' for name, value in attributes.items()
    )
