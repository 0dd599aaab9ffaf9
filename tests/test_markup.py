"""Tests for the document markup parser and printer."""

from __future__ import annotations

import pytest

from indentkit.editor.document_model import Block, Container, InlineElement, Text
from indentkit.editor.markup import parse_markup, stringify_document


@pytest.mark.parametrize(
    "markup",
    [
        '<codeBlock language="foo">f[]oo</codeBlock>',
        "<codeBlock>[]</codeBlock>",
        "<codeBlock>\tf[oo<softBreak></softBreak>  b]ar</codeBlock>",
        "<paragraph>f[oo</paragraph><codeBlock>ba]r</codeBlock>",
        "<blockQuote><codeBlock>a[]</codeBlock></blockQuote><paragraph></paragraph>",
        "<codeBlock>foo<softBreak></softBreak>[]bar</codeBlock>",
        "<codeBlock>foo[]<softBreak></softBreak>bar</codeBlock>",
        '<codeBlock title="a &quot;b&quot; &amp; c">x &lt; y[]</codeBlock>',
    ],
)
def test_markup_survives_parse_and_print(markup: str) -> None:
    assert stringify_document(parse_markup(markup)) == markup


def test_parse_builds_blocks_containers_and_inline_nodes() -> None:
    document = parse_markup(
        '<blockQuote><codeBlock language="py">a<softBreak></softBreak>b[]</codeBlock></blockQuote>'
    )

    quote = document.children[0]
    assert isinstance(quote, Container)
    block = quote.children[0]
    assert isinstance(block, Block)
    assert block.attributes == {"language": "py"}
    assert block.children == [Text("a"), InlineElement("softBreak"), Text("b")]
    assert document.selection.anchor.block is block
    assert document.selection.anchor.offset == 3


def test_parse_without_markers_uses_default_selection() -> None:
    document = parse_markup("<codeBlock>foo</codeBlock>")

    assert document.selection.is_collapsed
    assert document.selection.anchor.offset == 0


def test_parse_backward_selection() -> None:
    document = parse_markup("<codeBlock>f[oo]</codeBlock>", backward=True)

    assert document.selection.is_backward
    assert document.selection.anchor.offset == 3
    assert document.selection.focus.offset == 1
    assert stringify_document(document) == "<codeBlock>f[oo]</codeBlock>"


def test_custom_containers() -> None:
    document = parse_markup("<list><codeBlock>x[]</codeBlock></list>", containers=("list",))

    assert isinstance(document.children[0], Container)
    assert [block.name for block in document.iter_blocks()] == ["codeBlock"]


def test_stringify_without_selection() -> None:
    document = parse_markup("<codeBlock>f[o]o</codeBlock>")

    assert stringify_document(document, with_selection=False) == "<codeBlock>foo</codeBlock>"


@pytest.mark.parametrize(
    "markup",
    [
        "<codeBlock>f[oo",
        "<codeBlock>f[oo</codeBlock>",
        "<codeBlock>fo]o</codeBlock>",
        "<codeBlock>f]o[o</codeBlock>",
        "<codeBlock>[f[o]o</codeBlock>",
        "<codeBlock><b>bold</b>[]</codeBlock>",
        "stray<codeBlock>[]</codeBlock>",
        "<blockQuote>text<codeBlock>[]</codeBlock></blockQuote>",
    ],
)
def test_parse_rejects_invalid_markup(markup: str) -> None:
    with pytest.raises(ValueError):
        parse_markup(markup)


def test_selection_markers_do_not_split_text_runs() -> None:
    document = parse_markup("<codeBlock>f[o]o<softBreak></softBreak>b</codeBlock>")

    (block,) = document.iter_blocks()
    assert block.children == [Text("foo"), InlineElement("softBreak"), Text("b")]
    assert (document.selection.start.offset, document.selection.end.offset) == (1, 2)
