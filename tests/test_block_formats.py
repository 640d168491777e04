from __future__ import annotations

import pytest

from marky.document import EditableDocument, FormatCommand, SelectionRange, StaleSelectionError
from marky.editing import BLOCK_TRANSFORMS, apply_format


def make_document(markup: str) -> EditableDocument:
    return EditableDocument.from_html(markup)


def select_block(document: EditableDocument, index: int = 0) -> SelectionRange:
    return document.select_node_contents(document.blocks[index])


@pytest.mark.parametrize(
    "command, tag",
    [
        (FormatCommand.HEADING_1, "h1"),
        (FormatCommand.HEADING_2, "h2"),
        (FormatCommand.HEADING_3, "h3"),
    ],
)
def test_heading_swap_keeps_inline_content(command: FormatCommand, tag: str) -> None:
    document = make_document("<p>A <em>b</em> c</p><p>next</p>")

    outcome = apply_format(document, select_block(document), command)

    assert outcome.applied
    assert document.to_html() == f"<{tag}>A <em>b</em> c</{tag}>\n<p>next</p>"
    assert len(document.blocks) == 2


BLOCK_KINDS = {
    "p": FormatCommand.PARAGRAPH,
    "h1": FormatCommand.HEADING_1,
    "h2": FormatCommand.HEADING_2,
    "h3": FormatCommand.HEADING_3,
}


@pytest.mark.parametrize(
    "source, tag",
    [(source, tag) for source in BLOCK_KINDS for tag in BLOCK_KINDS if source != tag],
)
def test_block_swap_between_every_kind_keeps_position_and_content(source: str, tag: str) -> None:
    document = make_document(
        f"<p>before</p><{source}>Mid <strong>dle</strong></{source}><h3>after</h3>"
    )

    outcome = apply_format(document, select_block(document, 1), BLOCK_KINDS[tag])

    assert outcome.applied
    assert document.to_html() == (
        f"<p>before</p>\n<{tag}>Mid <strong>dle</strong></{tag}>\n<h3>after</h3>"
    )
    assert [block.tag for block in document.blocks] == ["p", tag, "h3"]
    assert outcome.target is document.blocks[1]


def test_paragraph_swap_from_heading() -> None:
    document = make_document("<h2>Title <strong>x</strong></h2>")

    apply_format(document, select_block(document), "p")

    assert document.to_html() == "<p>Title <strong>x</strong></p>"


def test_every_block_command_has_a_transform() -> None:
    expected = {command for command in FormatCommand if command.family.value != "inline"}

    assert set(BLOCK_TRANSFORMS) == expected


def test_bullet_list_wraps_and_unwraps() -> None:
    document = make_document("<p>Item</p>")

    first = apply_format(document, select_block(document), FormatCommand.BULLET_LIST)
    assert document.to_html() == "<ul><li>Item</li></ul>"

    apply_format(document, first.selection, FormatCommand.BULLET_LIST)
    assert document.to_html() == "<p>Item</p>"


def test_numbered_list_wraps_with_ol() -> None:
    document = make_document("<h3>Step</h3>")

    apply_format(document, select_block(document), "ol")

    assert document.to_html() == "<ol><li>Step</li></ol>"


def test_list_toggle_inside_other_list_kind_unwraps() -> None:
    document = make_document("<ul><li>One</li><li>Two</li></ul>")
    selection = SelectionRange.between(((0, 0, 0), 0), ((0, 0, 0), 3))

    apply_format(document, selection, FormatCommand.NUMBERED_LIST)

    assert document.to_html() == "<p>One</p>\n<ul><li>Two</li></ul>"


def test_list_unwrap_of_empty_item_keeps_caret_target() -> None:
    document = make_document("<ul><li></li></ul>")
    selection = SelectionRange.caret((0, 0), 0)

    outcome = apply_format(document, selection, FormatCommand.BULLET_LIST)

    assert outcome.applied
    assert document.to_html() == "<p><br></p>"


def test_code_block_round_trip_drops_inline_formatting() -> None:
    document = make_document("<p>Some <strong>bold</strong> code</p>")

    first = apply_format(document, select_block(document), FormatCommand.CODE_BLOCK)
    assert document.to_html() == "<pre><code>Some bold code</code></pre>"

    apply_format(document, first.selection, FormatCommand.CODE_BLOCK)
    assert document.to_html() == "<p>Some bold code</p>"


def test_code_unwrap_strips_one_trailing_newline() -> None:
    document = make_document("<pre><code>line one\nline two\n</code></pre>")

    apply_format(document, select_block(document), "code")

    assert document.to_html() == "<p>line one\nline two</p>"


def test_empty_code_block_unwraps_to_placeholder() -> None:
    document = make_document("<pre><code></code></pre>")
    selection = SelectionRange.caret((0,), 0)

    apply_format(document, selection, FormatCommand.CODE_BLOCK)

    assert document.to_html() == "<p><br></p>"


def test_multi_block_selection_uses_first_block() -> None:
    document = make_document("<p>One</p><p>Two</p>")
    selection = SelectionRange.between(((0, 0), 1), ((1, 0), 2))

    outcome = apply_format(document, selection, FormatCommand.HEADING_2)

    assert outcome.applied
    assert document.to_html() == "<h2>One</h2>\n<p>Two</p>"


def test_block_command_without_block_target_is_noop() -> None:
    document = make_document("loose text")
    selection = SelectionRange.between(((0,), 0), ((0,), 5))
    before = document.to_html()

    outcome = apply_format(document, selection, FormatCommand.HEADING_1)

    assert not outcome.applied
    assert outcome.status == "no_target"
    assert document.to_html() == before


def test_missing_selection_is_noop() -> None:
    document = make_document("<p>text</p>")

    outcome = apply_format(document, None, FormatCommand.HEADING_1)

    assert not outcome.applied
    assert outcome.status == "no_selection"


def test_stale_selection_is_rejected() -> None:
    document = make_document("<p>text</p>")
    selection = select_block(document)
    apply_format(document, selection, FormatCommand.HEADING_1)

    with pytest.raises(StaleSelectionError):
        apply_format(document, selection, FormatCommand.PARAGRAPH)


def test_outcome_selection_spans_produced_block() -> None:
    document = make_document("<p>one</p><p>two</p>")

    outcome = apply_format(document, select_block(document, 1), FormatCommand.HEADING_1)

    assert outcome.selection is not None
    assert outcome.selection.version == document.version
    assert document.node_at(outcome.selection.anchor.path).tag == "h1"


def test_unknown_command_name_raises() -> None:
    document = make_document("<p>text</p>")

    with pytest.raises(ValueError):
        apply_format(document, select_block(document), "underline")


def test_loose_list_unwrap_moves_item_paragraph_out() -> None:
    document = make_document("<ul><li><p>one</p></li><li><p>two</p></li></ul>")
    selection = document.select_node_contents(document.node_at((0, 0, 0)))

    outcome = apply_format(document, selection, FormatCommand.BULLET_LIST)

    assert document.to_html() == "<p>one</p>\n<ul><li><p>two</p></li></ul>"
    assert outcome.target is document.blocks[0]


def test_unwrap_item_with_sublist_keeps_sublist() -> None:
    document = make_document("<ul><li>parent<ul><li>child</li></ul></li></ul>")
    selection = SelectionRange.between(((0, 0, 0), 0), ((0, 0, 0), 6))

    apply_format(document, selection, FormatCommand.BULLET_LIST)

    assert document.to_html() == "<p>parent</p>\n<ul><li>child</li></ul>"
