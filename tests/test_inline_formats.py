from __future__ import annotations

from marky.document import EditableDocument, FormatCommand, SelectionRange
from marky.editing import apply_format


def make_document(markup: str) -> EditableDocument:
    return EditableDocument.from_html(markup)


def test_bold_wraps_selected_characters_only() -> None:
    document = make_document("<p>Hello world</p>")
    selection = SelectionRange.between(((0, 0), 6), ((0, 0), 11))

    outcome = apply_format(document, selection, FormatCommand.BOLD)

    assert outcome.status == "added"
    assert document.to_html() == "<p>Hello <strong>world</strong></p>"


def test_bold_toggle_twice_restores_plain_text() -> None:
    document = make_document("<p>Hello world</p>")
    selection = SelectionRange.between(((0, 0), 6), ((0, 0), 11))

    first = apply_format(document, selection, FormatCommand.BOLD)
    second = apply_format(document, first.selection, FormatCommand.BOLD)

    assert second.status == "removed"
    assert document.to_html() == "<p>Hello world</p>"


def test_partial_unbold_splits_wrapper() -> None:
    document = make_document("<p><strong>Hello world</strong></p>")
    selection = SelectionRange.between(((0, 0, 0), 6), ((0, 0, 0), 11))

    apply_format(document, selection, FormatCommand.BOLD)

    assert document.to_html() == "<p><strong>Hello </strong>world</p>"


def test_b_tag_counts_as_bold() -> None:
    document = make_document("<p><b>loud</b></p>")
    selection = SelectionRange.between(((0, 0, 0), 0), ((0, 0, 0), 4))

    outcome = apply_format(document, selection, "bold")

    assert outcome.status == "removed"
    assert document.to_html() == "<p>loud</p>"


def test_mixed_selection_gains_format_and_merges() -> None:
    document = make_document("<p><strong>Hel</strong>lo</p>")
    selection = document.select_node_contents(document.blocks[0])

    outcome = apply_format(document, selection, FormatCommand.BOLD)

    assert outcome.status == "added"
    assert document.to_html() == "<p><strong>Hello</strong></p>"


def test_italic_across_blocks_stays_inside_each_block() -> None:
    document = make_document("<p>Hello</p><p>World</p>")
    selection = SelectionRange.between(((0, 0), 2), ((1, 0), 3))

    apply_format(document, selection, FormatCommand.ITALIC)

    assert document.to_html() == "<p>He<em>llo</em></p>\n<p><em>Wor</em>ld</p>"


def test_backwards_selection_is_normalized() -> None:
    document = make_document("<p>Hello world</p>")
    selection = SelectionRange.between(((0, 0), 5), ((0, 0), 0))

    apply_format(document, selection, FormatCommand.ITALIC)

    assert document.to_html() == "<p><em>Hello</em> world</p>"


def test_collapsed_selection_is_noop() -> None:
    document = make_document("<p>Hello</p>")
    before = document.version

    outcome = apply_format(document, SelectionRange.caret((0, 0), 2), FormatCommand.BOLD)

    assert not outcome.applied
    assert outcome.status == "collapsed"
    assert document.version == before


def test_inline_result_selection_covers_formatted_text() -> None:
    document = make_document("<p>Hello world</p>")
    selection = SelectionRange.between(((0, 0), 0), ((0, 0), 5))

    outcome = apply_format(document, selection, FormatCommand.BOLD)

    assert outcome.selection is not None
    node = document.node_at(outcome.selection.anchor.path)
    assert node.text_content == "Hello"
    assert outcome.selection.focus.offset == 5
