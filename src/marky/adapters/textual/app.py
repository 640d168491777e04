"""Executable Textual app that hosts the Marky editor."""

from __future__ import annotations

import argparse
import dataclasses
import os
from pathlib import Path
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when the editor is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Button, Footer, Header, Input, Static, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use marky.adapters.textual.app"
    ) from exc

from marky.bridges import LocalStore, WriteOnlyClipboard
from marky.config import EditorConfig
from marky.document.nodes import FormatCommand
from marky.document.projection import Projection, Rect
from marky.editing.toolbar import ToolbarView
from marky.keymaps import ShortcutRegistry, load_default_keymaps
from marky.runtime import telemetry
from marky.session import EditorSession

from .controller import TextualEditorAdapter, TextualUIHooks

TOOLBAR_LABELS = {
    FormatCommand.PARAGRAPH: "P",
    FormatCommand.HEADING_1: "H1",
    FormatCommand.HEADING_2: "H2",
    FormatCommand.HEADING_3: "H3",
    FormatCommand.BOLD: "B",
    FormatCommand.ITALIC: "I",
    FormatCommand.BULLET_LIST: "•",
    FormatCommand.NUMBERED_LIST: "1.",
    FormatCommand.CODE_BLOCK: "</>",
}
# terminal hosts measure in cells, so the browser-sized default gap is too wide
TERMINAL_MARGIN = 1.0
# rough cell footprint of the floating bar: buttons plus borders
TOOLBAR_SIZE = (sum(len(label) + 4 for label in TOOLBAR_LABELS.values()), 3)


def create_session(config: EditorConfig, clipboard_sink) -> EditorSession:
    """Build an EditorSession backed by the on-disk store."""

    return EditorSession(
        LocalStore(config.storage_path),
        config=config,
        toolbar_size=TOOLBAR_SIZE,
        clipboard=WriteOnlyClipboard(clipboard_sink),
    )


class MarkyApp(App[None]):
    """Terminal markdown editor with a floating format toolbar."""

    CSS = """
	Screen {
		layout: vertical;
		layers: base overlay;
	}

	#editor {
		height: 1fr;
	}

	#format-bar {
		layer: overlay;
		width: auto;
		height: 3;
		display: none;
		background: $primary-darken-2;
	}

	#format-bar Button {
		min-width: 4;
		height: 3;
		border: none;
	}

	#format-bar Button.active {
		background: $accent;
	}

	#actions {
		height: 3;
	}

	#path-input {
		display: none;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, config: Optional[EditorConfig] = None) -> None:
        super().__init__()
        self.config = config or EditorConfig.from_env()
        self.session: EditorSession | None = None
        self.adapter: TextualEditorAdapter | None = None
        self._editor: TextArea | None = None
        self._bar: Horizontal | None = None
        self._status: Static | None = None
        self._path_input: Input | None = None
        self._confirm_clear = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="format-bar"):
            for command, label in TOOLBAR_LABELS.items():
                yield Button(label, id=f"fmt-{command.short_name}", classes="format-btn")
        self._editor = TextArea("", id="editor")
        yield self._editor
        with Horizontal(id="actions"):
            yield Button("Upload", id="upload")
            yield Button("Download", id="download")
            yield Button("Export HTML", id="export")
            yield Button("Copy", id="copy")
            yield Button("Paste", id="paste")
            yield Button("Clear", id="clear", variant="error")
        self._path_input = Input(placeholder="Path to a .md file", id="path-input")
        yield self._path_input
        self._status = Static("", id="status-line")
        yield self._status
        yield Footer()

    async def on_mount(self) -> None:
        self._bar = self.query_one("#format-bar", Horizontal)
        self.session = create_session(self.config, self.copy_to_clipboard)
        self.session.start()
        registry = ShortcutRegistry(logger_name="marky.keymaps")
        load_default_keymaps(registry)
        hooks = TextualUIHooks(
            update_surface=self._update_surface,
            update_toolbar=self._update_toolbar,
            update_status=self._update_status,
            notify=self._notify,
            prompt_upload=self._prompt_upload,
            run_async=lambda pending: self.run_worker(pending, exclusive=False),
            to_viewport=self._to_viewport,
            log=lambda line: telemetry.get_logger("marky.textual").debug(line),
        )
        self.adapter = TextualEditorAdapter(self.session, registry, hooks)
        self.set_interval(0.1, self._process_timeouts)

    def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.close()

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    # -- widget events ----------------------------------------------------

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        result = self.adapter.handle_textual_key(event.key)
        if result.consumed:
            event.stop()
            event.prevent_default()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self.adapter:
            self.adapter.handle_text_change(event.text_area.text)

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        if self.adapter:
            selection = event.selection
            self.adapter.handle_selection_change(tuple(selection.start), tuple(selection.end))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if not self.adapter or not self.session:
            return
        button_id = event.button.id or ""
        if button_id.startswith("fmt-"):
            self.adapter.press_toolbar(button_id[4:])
            if self._editor:
                self._editor.focus()
            return
        if button_id != "clear":
            self._confirm_clear = False
        if button_id == "upload":
            self._prompt_upload()
        elif button_id == "download":
            self.adapter.handle_textual_key("ctrl+s")
        elif button_id == "export":
            self.adapter.handle_textual_key("ctrl+e")
        elif button_id == "copy":
            self.adapter.handle_textual_key("ctrl+shift+c")
        elif button_id == "paste":
            self.adapter.handle_textual_key("ctrl+shift+v")
        elif button_id == "clear":
            if self._confirm_clear:
                self._confirm_clear = False
                self.adapter.clear()
            else:
                self._confirm_clear = True
                self._update_status("Press Clear again to erase the document")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if not self.adapter or event.input is not self._path_input:
            return
        value = event.value.strip()
        event.input.display = False
        event.input.value = ""
        if value:
            self.adapter.import_path(Path(value).expanduser())
        if self._editor:
            self._editor.focus()

    def on_click(self, event: events.Click) -> None:
        if self.adapter and self._bar and self._bar.display:
            widget = event.widget
            if widget is not None and widget is not self._bar and self._bar not in widget.ancestors:
                if widget is not self._editor:
                    self.adapter.pointer_outside()

    # -- hooks ------------------------------------------------------------

    def _update_surface(self, projection: Projection) -> None:
        if self._editor and self._editor.text != projection.text:
            self._editor.load_text(projection.text)

    def _update_toolbar(self, view: ToolbarView) -> None:
        if not self._bar:
            return
        self._bar.display = view.visible
        if not view.visible:
            return
        left, top = view.position or (0.0, 0.0)
        self._bar.styles.offset = (max(0, int(left)), max(0, int(top)))
        for command in TOOLBAR_LABELS:
            button = self._bar.query_one(f"#fmt-{command.short_name}", Button)
            button.set_class(view.is_active(command), "active")

    def _update_status(self, status: str) -> None:
        if self._status:
            self._status.update(status)

    def _notify(self, message: str) -> None:
        self.notify(message)

    def _prompt_upload(self) -> None:
        if self._path_input:
            self._path_input.display = True
            self._path_input.focus()

    def _to_viewport(self, rect: Rect) -> Rect:
        if not self._editor:
            return rect
        region = self._editor.content_region
        scroll_x, scroll_y = self._editor.scroll_offset
        return dataclasses.replace(
            rect,
            left=rect.left - scroll_x + region.x,
            top=rect.top - scroll_y + region.y,
        )


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Marky terminal markdown editor.")
    parser.add_argument(
        "--storage",
        type=Path,
        default=None,
        help="Path of the JSON file used for autosave (default: ~/.marky/storage.json)",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Directory for downloads and HTML exports (default: current directory)",
    )
    parser.add_argument(
        "--preset",
        choices=("development", "production"),
        default=None,
        help="Logging preset to configure before starting",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.preset:
        telemetry.configure(preset=args.preset)
    config = EditorConfig.from_env()
    if "MARKY_TOOLBAR_MARGIN" not in os.environ:
        config = dataclasses.replace(config, toolbar_margin=TERMINAL_MARGIN)
    if args.storage:
        config = dataclasses.replace(config, storage_path=args.storage.expanduser())
    if args.export_dir:
        config = dataclasses.replace(config, export_dir=args.export_dir.expanduser())
    app = MarkyApp(config=config)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
