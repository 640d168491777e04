"""Built-in shortcuts: file interchange, clipboard, and inline formatting."""

from __future__ import annotations

from typing import Iterable, Sequence

from marky.actions import files as file_actions
from marky.actions import formatting as format_actions

from .models import ActionRef, Binding, KeyChord
from .registry import ShortcutRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="files.download",
        handler=file_actions.download_markdown,
        description="Download the document as markdown",
    ),
    ActionRef(
        id="files.upload",
        handler=file_actions.request_upload,
        description="Open a markdown file",
    ),
    ActionRef(
        id="files.export_html",
        handler=file_actions.export_html,
        description="Export a standalone HTML page",
    ),
    ActionRef(
        id="clipboard.copy",
        handler=file_actions.copy_markdown,
        description="Copy markdown to the clipboard",
    ),
    ActionRef(
        id="clipboard.paste",
        handler=file_actions.paste_markdown,
        description="Replace the document with clipboard markdown",
    ),
    ActionRef(
        id="format.bold",
        handler=format_actions.toggle_bold,
        description="Toggle bold",
    ),
    ActionRef(
        id="format.italic",
        handler=format_actions.toggle_italic,
        description="Toggle italic",
    ),
)


def _binding(binding_id: str, chord: str, action_id: str, description: str) -> Binding:
    return Binding(
        id=binding_id,
        chord=KeyChord.parse(chord),
        action_id=action_id,
        description=description,
    )


DEFAULT_BINDINGS: tuple[Binding, ...] = (
    _binding("download.ctrl", "ctrl+s", "files.download", "Download markdown"),
    _binding("download.meta", "meta+s", "files.download", "Download markdown"),
    _binding("upload.ctrl", "ctrl+o", "files.upload", "Upload markdown"),
    _binding("upload.meta", "meta+o", "files.upload", "Upload markdown"),
    _binding("export.ctrl", "ctrl+e", "files.export_html", "Export HTML"),
    _binding("copy.ctrl", "ctrl+shift+c", "clipboard.copy", "Copy markdown"),
    _binding("paste.ctrl", "ctrl+shift+v", "clipboard.paste", "Paste markdown"),
    _binding("bold.ctrl", "ctrl+b", "format.bold", "Bold"),
    _binding("italic.ctrl", "ctrl+i", "format.italic", "Italic"),
)


def load_default_keymaps(
    registry: ShortcutRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    exclude_bindings: Sequence[str] | None = None,
) -> None:
    """Register built-in actions and bindings."""

    excluded = set(exclude_bindings or ())
    for action in DEFAULT_ACTIONS:
        registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if binding.id in excluded:
            continue
        registry.register_binding(binding, replace=replace)

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)


__all__ = ["DEFAULT_ACTIONS", "DEFAULT_BINDINGS", "load_default_keymaps"]
