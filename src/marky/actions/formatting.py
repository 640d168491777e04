"""Shortcut handlers that run format commands against the session selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from marky.document.nodes import FormatCommand
from marky.session import ActionResult, EditorSession

if TYPE_CHECKING:
    from marky.keymaps.registry import ShortcutMatch


def _apply(session: EditorSession, command: FormatCommand) -> ActionResult:
    outcome = session.apply_format(command)
    if outcome.applied:
        return ActionResult(consumed=True, message=command.short_name)
    return ActionResult(consumed=True, status="noop", message=outcome.status)


def toggle_bold(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    return _apply(session, FormatCommand.BOLD)


def toggle_italic(session: EditorSession, match: ShortcutMatch) -> ActionResult:
    del match
    return _apply(session, FormatCommand.ITALIC)


__all__ = ["toggle_bold", "toggle_italic"]
