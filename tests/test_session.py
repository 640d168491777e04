from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

import pytest

from marky.bridges import MemoryClipboard, MemoryStore, UnsupportedFileError
from marky.config import EditorConfig
from marky.document import EditableDocument, FormatCommand, Rect, SelectionRange
from marky.session import WELCOME_HTML, EditorSession


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


def make_session(
    markup: str = "<p>Hello</p>",
    *,
    store: MemoryStore | None = None,
    tmp_path: Path | None = None,
) -> tuple[EditorSession, MemoryStore, FakeClock]:
    store = store or MemoryStore()
    clock = FakeClock()
    config = EditorConfig(
        storage_path=(tmp_path or Path(".")) / "storage.json",
        export_dir=tmp_path or Path("."),
    )
    session = EditorSession(
        store,
        config=config,
        document=EditableDocument.from_html(markup),
        clock=clock,
    )
    return session, store, clock


def test_start_uses_welcome_content_on_first_run() -> None:
    session, _, _ = make_session()

    session.start()

    assert "Welcome to Marky" in session.to_html()
    assert session.to_html() == EditableDocument.from_html(WELCOME_HTML).to_html()


def test_start_restores_persisted_content() -> None:
    store = MemoryStore({"markdownContent": "<h2>Saved</h2>"})
    session, _, _ = make_session(store=store)

    session.start()

    assert session.to_html() == "<h2>Saved</h2>"


def test_select_drives_toolbar() -> None:
    session, _, _ = make_session()
    selection = session.document.select_node_contents(session.document.blocks[0])

    view = session.select(selection, bounds=Rect(10, 20, 100, 16))

    assert view.visible
    assert view.position == (60.0, 10.0)
    assert session.select(None).visible is False


def test_block_format_hides_toolbar_and_saves_after_short_debounce() -> None:
    session, store, clock = make_session()
    session.select(
        session.document.select_node_contents(session.document.blocks[0]),
        bounds=Rect(0, 0, 50, 10),
    )

    outcome = session.apply_format(FormatCommand.HEADING_1)

    assert outcome.applied
    assert not session.toolbar.visible
    clock.advance(50)
    session.process_timeouts()
    assert store.writes == 0
    clock.advance(60)
    session.process_timeouts()
    assert store.load("markdownContent") == "<h1>Hello</h1>"


def test_inline_format_keeps_toolbar_visible() -> None:
    session, _, _ = make_session("<p>Hello world</p>")
    session.select(SelectionRange.between(((0, 0), 0), ((0, 0), 5)), bounds=Rect(0, 0, 50, 10))

    session.apply_format("bold")

    assert session.toolbar.visible
    assert session.selection is not None
    assert session.selection.version == session.document.version


def test_rapid_edits_collapse_into_one_write_of_final_state() -> None:
    session, store, clock = make_session()
    session.select(SelectionRange.caret((0, 0), 5))

    for character in "abcdefghij":
        session.insert_text(character)
        clock.advance(50)

    assert store.writes == 0
    clock.advance(1000)
    session.process_timeouts()

    assert store.writes == 1
    assert store.load("markdownContent") == "<p>Helloabcdefghij</p>"
    assert store.load("markdownContent") == session.to_html()


def test_insert_text_in_middle_of_word() -> None:
    session, _, _ = make_session()
    session.select(SelectionRange.caret((0, 0), 2))

    assert session.insert_text("XY")

    assert session.to_html() == "<p>HeXYllo</p>"


def test_typing_into_placeholder_replaces_break() -> None:
    session, _, _ = make_session("")
    session.select(SelectionRange.caret((0,), 0))

    session.insert_text("first words")

    assert session.to_html() == "<p>first words</p>"


def test_paste_plain_text_and_ignore_whitespace() -> None:
    session, _, _ = make_session()
    session.select(SelectionRange.caret((0, 0), 5))

    assert not session.paste(text="   \n")
    assert session.paste(text=" world")

    assert session.to_html() == "<p>Hello world</p>"


def test_paste_html_blocks_after_current_block() -> None:
    session, _, _ = make_session("<p>Hello</p><p>Tail</p>")
    session.select(SelectionRange.caret((0, 0), 1))

    session.paste(html="<h2>New</h2><p>Para</p>", text="New Para")

    assert session.to_html() == "<p>Hello</p>\n<h2>New</h2>\n<p>Para</p>\n<p>Tail</p>"


def test_paste_inline_html_at_caret() -> None:
    session, _, _ = make_session()
    session.select(SelectionRange.caret((0, 0), 5))

    session.paste(html=" <em>there</em>")

    assert session.to_html() == "<p>Hello <em>there</em></p>"


def test_load_markdown_replaces_document() -> None:
    session, _, _ = make_session()

    session.load_markdown("# Title\n\n- a\n- b\n")

    assert session.to_html() == "<h1>Title</h1>\n<ul><li>a</li><li>b</li></ul>"
    assert "# Title" in session.to_markdown()


def test_import_file_rejects_unsupported_extension(tmp_path: Path) -> None:
    session, _, _ = make_session(tmp_path=tmp_path)
    bad = tmp_path / "notes.docx"
    bad.write_text("x", encoding="utf-8")

    with pytest.raises(UnsupportedFileError):
        session.import_file(bad)


def test_download_and_export(tmp_path: Path) -> None:
    session, _, _ = make_session("<h1>Doc</h1>", tmp_path=tmp_path)

    markdown_path = session.download()
    html_path = session.export_html()

    assert markdown_path == tmp_path / "document.md"
    assert "# Doc" in markdown_path.read_text(encoding="utf-8")
    assert html_path.suffix == ".html"
    assert "<h1>Doc</h1>" in html_path.read_text(encoding="utf-8")


def test_clear_resets_document_and_storage() -> None:
    store = MemoryStore({"markdownContent": "<p>old</p>"})
    session, _, clock = make_session(store=store)
    session.select(SelectionRange.caret((0, 0), 5))
    session.insert_text("!")

    session.clear()
    clock.advance(5000)
    session.process_timeouts()

    assert store.load("markdownContent") is None
    assert session.to_html() == "<p><br></p>"
    assert session.selection == SelectionRange.caret((0,), 0, version=session.document.version)


def test_close_flushes_pending_write() -> None:
    session, store, _ = make_session()
    session.select(SelectionRange.caret((0, 0), 5))
    session.insert_text("!")

    session.close()

    assert store.writes == 1
    assert store.load("markdownContent") == "<p>Hello!</p>"
    assert not session.autosave.pending


def test_copy_to_clipboard_writes_markdown() -> None:
    session, _, _ = make_session("<h1>Copy me</h1>")
    clipboard = MemoryClipboard()

    assert asyncio.run(session.copy_to_clipboard(clipboard))

    assert clipboard.text == session.to_markdown()


def test_clipboard_denial_emits_notice_and_keeps_document() -> None:
    session, _, _ = make_session()
    notices: List[object] = []
    session.bus.subscribe("notice", notices.append)
    before = session.to_html()

    copied = asyncio.run(session.copy_to_clipboard(MemoryClipboard(denied=True)))
    pasted = asyncio.run(session.paste_from_clipboard(MemoryClipboard("# x", denied=True)))

    assert not copied and not pasted
    assert len(notices) == 2
    assert all("clipboard" in str(notice) for notice in notices)
    assert session.to_html() == before


def test_paste_from_clipboard_replaces_document() -> None:
    session, _, _ = make_session()

    assert asyncio.run(session.paste_from_clipboard(MemoryClipboard("## From clipboard")))

    assert session.to_html() == "<h2>From clipboard</h2>"


def test_blank_clipboard_is_ignored() -> None:
    session, _, _ = make_session()

    assert not asyncio.run(session.paste_from_clipboard(MemoryClipboard("  \n")))

    assert session.to_html() == "<p>Hello</p>"


def test_session_clipboard_used_when_none_passed() -> None:
    clipboard = MemoryClipboard()
    session, _, _ = make_session()
    session.clipboard = clipboard

    asyncio.run(session.copy_to_clipboard())

    assert "Hello" in clipboard.text


def test_edit_block_text_rewrites_current_block() -> None:
    session, store, clock = make_session("<h2>Old <em>title</em></h2><p>Body</p>")
    session.select(SelectionRange.caret((0, 1, 0), 2))
    block = session.current_block()

    assert block is session.document.blocks[0]
    session.edit_block_text(block, "New title")  # type: ignore[arg-type]
    clock.advance(1000)
    session.process_timeouts()

    assert session.to_html() == "<h2>New title</h2>\n<p>Body</p>"
    assert session.selection is None
    assert store.load("markdownContent") == session.to_html()


def test_typing_over_selection_replaces_it() -> None:
    session, _, _ = make_session("<p>hello world</p>")
    session.select(SelectionRange.between(((0, 0), 0), ((0, 0), 5)))

    assert session.paste(text="bye")

    assert session.to_html() == "<p>bye world</p>"
    assert session.selection == SelectionRange.caret(
        (0, 0), 3, version=session.document.version
    )


def test_paste_over_selection_across_formatting() -> None:
    session, _, _ = make_session("<p>keep <strong>bold</strong> tail</p>")
    session.select(SelectionRange.between(((0, 0), 2), ((0, 1, 0), 4)))

    session.paste(html="<em>x</em>")

    assert session.to_html() == "<p>ke<em>x</em> tail</p>"


def test_block_paste_over_whole_paragraph_replaces_it() -> None:
    session, _, _ = make_session("<p>Intro</p><p>gone</p>")
    session.select(SelectionRange.between(((1, 0), 0), ((1, 0), 4)))

    session.paste(html="<h2>New</h2>")

    assert session.to_html() == "<p>Intro</p>\n<h2>New</h2>"
