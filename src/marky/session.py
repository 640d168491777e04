"""Per-document editor session tying the tree, toolbar, autosave, and bridges together."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from marky.bridges.clipboard import Clipboard, ClipboardPermissionError
from marky.bridges.conversion import ConversionBridge
from marky.bridges.files import read_markdown_file, write_download, write_html_export
from marky.bridges.persistence import KeyValueStore
from marky.config import EditorConfig
from marky.document.html import parse_fragment
from marky.document.nodes import (
    FLOW_TAGS,
    Element,
    FormatCommand,
    FormatFamily,
    Node,
    Text,
    detach,
    insert_after,
    split_text,
)
from marky.document.projection import Projection, Rect, apply_line_edits, project, set_block_text
from marky.document.selection import SelectionRange
from marky.document.tree import EditableDocument, placeholder_paragraph
from marky.editing.formats import FormatOutcome, apply_format, delete_selection
from marky.editing.resolver import resolve_block
from marky.editing.toolbar import PointerTarget, ToolbarPresenter, ToolbarView
from marky.runtime import telemetry
from marky.runtime.debounce import Debouncer

WELCOME_HTML = """<h1>Welcome to Marky - Your Simple Markdown Editor</h1>
<p>Start editing this document right away. Your changes are automatically saved!</p>
<h2>Features</h2>
<ul>
<li><strong>WYSIWYG editing</strong> - What you see is what you get</li>
<li><strong>Auto-save</strong> - Never lose your work</li>
<li><strong>Format toolbar</strong> - Select text to see formatting options</li>
<li><strong>Import/Export</strong> - Upload and download markdown files</li>
<li><strong>Copy to clipboard</strong> - Instantly copy your markdown</li>
</ul>
<h2>Keyboard Shortcuts</h2>
<ul>
<li><strong>Ctrl+S</strong> - Download your markdown</li>
<li><strong>Ctrl+O</strong> - Upload a markdown file</li>
</ul>
<p>Select any text to reveal the <strong>formatting toolbar</strong>. Use it to change headings, add <em>emphasis</em>, create lists, or insert code blocks.</p>
<p>Happy writing!</p>"""


@dataclass(slots=True)
class ActionResult:
    """Result returned from shortcut action handlers."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None


class EventBus:
    """Minimal event bus letting hosts observe session activity."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class EditorSession:
    """Everything one open document needs, passed explicitly to every operation.

    Content edits schedule an autosave after ``config.content_debounce_ms``;
    format commands after ``config.format_debounce_ms``. Both share one
    debounce slot, so a newer schedule always discards the pending one. The
    saved value is serialized when the timer fires, not when it is scheduled.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        config: Optional[EditorConfig] = None,
        conversion: Optional[ConversionBridge] = None,
        document: Optional[EditableDocument] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.monotonic,
        toolbar_size: tuple[float, float] = (0.0, 0.0),
        clipboard: Optional[Clipboard] = None,
    ) -> None:
        self.store = store
        self.clipboard = clipboard
        self.config = config or EditorConfig()
        self.conversion = conversion or ConversionBridge()
        self.document = document or EditableDocument()
        self.bus = bus or EventBus()
        self.selection: Optional[SelectionRange] = None
        self.autosave = Debouncer(name="autosave", clock=clock)
        self.toolbar = ToolbarPresenter(
            size=toolbar_size,
            margin=self.config.toolbar_margin,
            on_change=lambda view: self.bus.emit("toolbar.change", view),
        )
        self.logger = telemetry.get_logger("marky.session")

    # -- lifecycle --------------------------------------------------------

    def start(self) -> None:
        """Restore persisted content, or the welcome document on first run."""

        saved = self.store.load(self.config.storage_key)
        self.document.load_html(saved if saved else WELCOME_HTML)
        self.selection = None
        telemetry.record_event("session.start", data={"restored": bool(saved)})
        self.bus.emit("document.change", self.document)

    def close(self) -> None:
        self.autosave.cancel()
        self.save_now()
        telemetry.record_event("session.close")

    def process_timeouts(self) -> bool:
        return self.autosave.process_timeouts()

    # -- persistence ------------------------------------------------------

    def schedule_save(self, delay_ms: int) -> None:
        self.autosave.schedule(self.save_now, delay_ms)

    def save_now(self) -> None:
        html = self.document.to_html()
        self.store.save(self.config.storage_key, html)
        self.bus.emit("storage.saved", html)

    def _content_changed(self, *, delay_ms: Optional[int] = None) -> None:
        self.schedule_save(self.config.content_debounce_ms if delay_ms is None else delay_ms)
        self.bus.emit("document.change", self.document)

    # -- selection & toolbar ----------------------------------------------

    def select(
        self,
        selection: Optional[SelectionRange],
        *,
        bounds: Optional[Rect] = None,
        scroll_top: float = 0.0,
    ) -> ToolbarView:
        if selection is not None:
            if selection.version is None:
                selection = selection.with_version(self.document.version)
            self.document.validate(selection)
        self.selection = selection
        self.bus.emit("selection.change", selection)
        return self.toolbar.on_selection_change(
            self.document, selection, bounds, scroll_top=scroll_top
        )

    def pointer_down(self, target: PointerTarget | str) -> ToolbarView:
        return self.toolbar.on_pointer_down(target)

    def current_block(self) -> Optional[Node]:
        return resolve_block(self.document, self.selection)

    # -- formatting -------------------------------------------------------

    def apply_format(self, command: FormatCommand | str) -> FormatOutcome:
        outcome = apply_format(self.document, self.selection, command)
        if not outcome.applied:
            return outcome
        self.selection = outcome.selection
        if outcome.command.family is not FormatFamily.INLINE:
            self.toolbar.hide(reason="format_applied")
        self._content_changed(delay_ms=self.config.format_debounce_ms)
        self.bus.emit("format.applied", outcome)
        return outcome

    # -- content edits ----------------------------------------------------

    def projection(self) -> Projection:
        return project(self.document)

    def replace_lines(self, projection: Projection, new_lines: Sequence[str]) -> bool:
        """Fold host text edits (one string per projected line) into the tree."""

        if projection.version != self.document.version:
            projection = project(self.document)
        changed = apply_line_edits(projection, new_lines)
        if changed:
            self.selection = None
            self._content_changed()
        return changed

    def edit_block_text(self, block: Element, text: str) -> None:
        set_block_text(self.document, block, text)
        self.selection = None
        self._content_changed()

    def insert_text(self, text: str) -> bool:
        if not text:
            return False
        return self._insert_inline([Text(text)])

    def paste(self, *, html: Optional[str] = None, text: Optional[str] = None) -> bool:
        """Replace the selection with pasted content: HTML when present, else plain text."""

        if html and html.strip():
            nodes = parse_fragment(html)
            if any(isinstance(node, Element) and node.tag in FLOW_TAGS for node in nodes):
                return self._insert_blocks(nodes)
            return self._insert_inline(nodes)
        if text and text.strip():
            return self.insert_text(text)
        return False

    def _insert_inline(self, nodes: List[Node]) -> bool:
        if self.selection is None or not nodes:
            return False
        self.document.validate(self.selection)
        start = self.selection.start().anchor
        placeholder = delete_selection(self.document, self.selection)
        if placeholder is not None:
            parent = placeholder.parent
            assert parent is not None
            index = parent.index(placeholder)
        else:
            parent, index = self._caret_slot(start.path, start.offset)
        for offset, node in enumerate(nodes):
            parent.insert(index + offset, node)
        if placeholder is not None:
            detach(placeholder)
        self.document.touch()

        last = nodes[-1]
        end = len(last.text) if isinstance(last, Text) else len(last.children)
        self.selection = SelectionRange.caret(
            self.document.path_of(last), end, version=self.document.version
        )
        self._content_changed()
        return True

    def _caret_slot(self, path: tuple[int, ...], offset: int) -> tuple[Element, int]:
        container = self.document.node_at(path)
        if isinstance(container, Text):
            parent = container.parent
            assert parent is not None
            if offset == 0:
                return parent, parent.index(container)
            if offset < len(container.text):
                split_text(container, offset)
            return parent, parent.index(container) + 1
        if [child.tag for child in container.element_children] == ["br"] and len(container.children) == 1:
            container.take_children()
            return container, 0
        return container, min(offset, len(container.children))

    def _insert_blocks(self, nodes: List[Node]) -> bool:
        target = resolve_block(self.document, self.selection) if self.selection else None
        while target is not None and target.parent is not self.document.root:
            target = target.parent
        if self.selection is not None:
            self.document.validate(self.selection)
            delete_selection(self.document, self.selection, keep_anchor=False)
        blocks = [node for node in nodes if isinstance(node, Element) or node.text.strip()]
        if target is None or target is self.document.root:
            self.document.root.extend(blocks)
        else:
            anchor = target
            for block in blocks:
                insert_after(anchor, block)
                anchor = block
            if isinstance(target, Element) and not target.text_content.strip() and target.tag == "p":
                self.document.remove(target)
        self.document.touch()
        self.selection = self.document.select_node_contents(blocks[-1]) if blocks else None
        self._content_changed()
        return bool(blocks)

    # -- whole-document operations ----------------------------------------

    def load_markdown(self, markdown: str) -> None:
        self.document.load_html(self.conversion.render(markdown))
        self.selection = None
        self.toolbar.hide(reason="document_replaced")
        self._content_changed()

    def import_file(self, path: Path | str) -> None:
        self.load_markdown(read_markdown_file(path))

    def to_html(self) -> str:
        return self.document.to_html()

    def to_markdown(self) -> str:
        return self.conversion.serialize(self.document.to_html())

    def download(self, directory: Optional[Path | str] = None) -> Path:
        return write_download(
            self.to_markdown(),
            directory or self.config.export_dir,
            filename=self.config.download_name,
        )

    def export_html(self, directory: Optional[Path | str] = None) -> Path:
        return write_html_export(self.to_html(), directory or self.config.export_dir)

    def clear(self) -> None:
        """Drop persisted content and reset to an empty paragraph with the caret in it."""

        self.autosave.cancel()
        self.store.clear(self.config.storage_key)
        self.document.replace_content([placeholder_paragraph()])
        self.selection = self.document.caret_at_start()
        self.toolbar.hide(reason="cleared")
        self.bus.emit("document.change", self.document)

    # -- clipboard --------------------------------------------------------

    async def copy_to_clipboard(self, clipboard: Optional[Clipboard] = None) -> bool:
        clipboard = self._require_clipboard(clipboard)
        try:
            await clipboard.write_text(self.to_markdown())
        except ClipboardPermissionError as exc:
            self._clipboard_denied("copy", exc)
            return False
        self.bus.emit("clipboard.copied", None)
        return True

    async def paste_from_clipboard(self, clipboard: Optional[Clipboard] = None) -> bool:
        clipboard = self._require_clipboard(clipboard)
        try:
            text = await clipboard.read_text()
        except ClipboardPermissionError as exc:
            self._clipboard_denied("paste", exc)
            return False
        if not text or not text.strip():
            return False
        self.load_markdown(text)
        return True

    def _require_clipboard(self, clipboard: Optional[Clipboard]) -> Clipboard:
        target = clipboard or self.clipboard
        if target is None:
            raise RuntimeError("no clipboard attached to this session")
        return target

    def _clipboard_denied(self, operation: str, exc: Exception) -> None:
        telemetry.record_event(
            "clipboard.denied", level="warning", data={"operation": operation, "reason": str(exc)}
        )
        verb = "copy to" if operation == "copy" else "access"
        self.bus.emit(
            "notice",
            f"Unable to {verb} clipboard. Please grant clipboard permissions.",
        )


__all__ = ["ActionResult", "EditorSession", "EventBus", "WELCOME_HTML"]
