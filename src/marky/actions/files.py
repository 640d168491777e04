"""Shortcut handlers for download, upload, export, and the clipboard."""

from __future__ import annotations

from typing import TYPE_CHECKING

from marky.session import ActionResult, EditorSession

if TYPE_CHECKING:
    from marky.keymaps.registry import ShortcutMatch


def download_markdown(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    path = session.download()
    session.bus.emit("notice", f"Saved {path}")
    return ActionResult(consumed=True, message=str(path))


def request_upload(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    # the host owns the file picker; it answers with session.import_file()
    session.bus.emit("prompt.upload", None)
    return ActionResult(consumed=True, status="prompt", message="upload")


def export_html(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    path = session.export_html()
    session.bus.emit("notice", f"Exported {path}")
    return ActionResult(consumed=True, message=str(path))


async def copy_markdown(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    if await session.copy_to_clipboard():
        session.bus.emit("notice", "Copied!")
        return ActionResult(consumed=True, message="copied")
    return ActionResult(consumed=True, status="denied")


async def paste_markdown(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    if await session.paste_from_clipboard():
        return ActionResult(consumed=True, message="pasted")
    return ActionResult(consumed=True, status="noop")


__all__ = [
    "copy_markdown",
    "download_markdown",
    "export_html",
    "paste_markdown",
    "request_upload",
]
