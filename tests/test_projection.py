from __future__ import annotations

from marky.document import EditableDocument, Rect, apply_line_edits, project


def make_document() -> EditableDocument:
    return EditableDocument.from_html(
        "<h1>Title</h1><ul><li>One</li><li>Two</li></ul><pre><code>a\nb\n</code></pre>"
    )


def test_each_block_projects_to_lines() -> None:
    projection = project(make_document())

    assert [line.text for line in projection.lines] == ["Title", "One", "Two", "a", "b"]
    assert projection.text == "Title\nOne\nTwo\na\nb"


def test_cells_map_back_to_text_positions() -> None:
    document = make_document()
    projection = project(document)

    position = projection.position_at((2, 1))

    assert document.node_at(position.path).text_content == "Two"
    assert position.offset == 1


def test_code_lines_map_into_shared_text_node() -> None:
    document = make_document()
    projection = project(document)

    position = projection.position_at((4, 1))

    assert document.node_at(position.path).text_content == "a\nb\n"
    assert position.offset == 3


def test_selection_and_bounds_between_cells() -> None:
    document = make_document()
    projection = project(document)

    selection = projection.selection_between((0, 1), (0, 4))

    assert selection.version == document.version
    assert projection.bounds((0, 1), (0, 4)) == Rect(1, 0, 3, 1)
    assert projection.bounds((1, 2), (2, 0)).height == 2


def test_formatting_is_flattened_per_line() -> None:
    document = EditableDocument.from_html("<p>Hello <strong>world</strong></p>")

    projection = project(document)

    assert projection.text == "Hello world"
    assert len(projection.lines[0].segments) == 2


def test_editing_a_line_rewrites_its_block() -> None:
    document = make_document()
    projection = project(document)

    changed = apply_line_edits(projection, ["Title", "Uno", "Two", "a", "b"])

    assert changed
    assert "<li>Uno</li>" in document.to_html()


def test_new_line_after_paragraph_creates_sibling() -> None:
    document = EditableDocument.from_html("<p>First</p>")
    projection = project(document)

    apply_line_edits(projection, ["First", "Second"])

    assert document.to_html() == "<p>First</p>\n<p>Second</p>"


def test_new_line_in_code_block_extends_code() -> None:
    document = make_document()
    projection = project(document)

    apply_line_edits(projection, ["Title", "One", "Two", "a", "b", "c"])

    assert document.to_html().endswith("<pre><code>a\nb\nc\n</code></pre>")


def test_deleting_last_item_removes_empty_list() -> None:
    document = EditableDocument.from_html("<p>Intro</p><ul><li>Only</li></ul>")
    projection = project(document)

    apply_line_edits(projection, ["Intro"])

    assert document.to_html() == "<p>Intro</p>"


def test_unchanged_lines_keep_formatting() -> None:
    document = EditableDocument.from_html("<p><em>keep</em></p><p>edit</p>")
    projection = project(document)

    apply_line_edits(projection, ["keep", "edited"])

    assert document.to_html() == "<p><em>keep</em></p>\n<p>edited</p>"


def test_identical_lines_report_no_change() -> None:
    document = make_document()
    before = document.version

    assert not apply_line_edits(project(document), ["Title", "One", "Two", "a", "b"])
    assert document.version == before


def test_clearing_everything_keeps_first_block_empty() -> None:
    document = make_document()

    apply_line_edits(project(document), [""])

    assert document.to_html() == "<h1><br></h1>"


def test_nested_list_parent_text_is_editable() -> None:
    document = EditableDocument.from_html("<ul><li>parent\n<ul><li>child</li></ul></li></ul>")
    projection = project(document)
    assert [line.text for line in projection.lines] == ["parent ", "child"]

    changed = apply_line_edits(projection, ["parent edited", "child"])

    assert changed
    assert document.to_html() == "<ul><li>parent edited<ul><li>child</li></ul></li></ul>"


def test_extra_line_under_nested_parent_becomes_paragraph() -> None:
    document = EditableDocument.from_html("<ul><li>parent<ul><li>child</li></ul></li></ul>")

    apply_line_edits(project(document), ["parent", "more", "child"])

    assert document.to_html() == (
        "<ul><li>parent<p>more</p><ul><li>child</li></ul></li></ul>"
    )


def test_loose_root_text_is_editable() -> None:
    document = EditableDocument.from_html("loose words<p>Para</p>")

    changed = apply_line_edits(project(document), ["loose edit", "Para"])

    assert changed
    assert document.to_html() == "loose edit\n<p>Para</p>"
