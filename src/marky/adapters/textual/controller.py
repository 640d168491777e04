"""Textual adapter that wires EditorSession events into UI callbacks."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from marky.bridges.files import UnsupportedFileError
from marky.document.nodes import FormatCommand
from marky.document.projection import Cell, Projection, Rect
from marky.editing.toolbar import PointerTarget, ToolbarView
from marky.keymaps import KeyChord, ShortcutRegistry
from marky.runtime import telemetry
from marky.session import ActionResult, EditorSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def _identity(rect: Rect) -> Rect:
    return rect


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_surface: Callable[[Projection], None]
    update_toolbar: Callable[[ToolbarView], None] = _noop
    update_status: Callable[[str], None] = _noop
    notify: Callable[[str], None] = _noop
    prompt_upload: Callable[[], None] = _noop
    # schedules coroutines from async shortcut handlers on the host loop
    run_async: Callable[[Awaitable[object]], None] = _noop
    # maps projection cell rectangles into viewport coordinates
    to_viewport: Callable[[Rect], Rect] = _identity
    log: Callable[[str], None] = _noop


class TextualEditorAdapter:
    """Bridges an EditorSession and its shortcut registry to a Textual surface."""

    def __init__(
        self,
        session: EditorSession,
        registry: ShortcutRegistry,
        hooks: TextualUIHooks,
    ) -> None:
        self.session = session
        self.registry = registry
        self.hooks = hooks
        self.projection = session.projection()
        self._syncing = False
        self._subscribe_events()
        self._refresh_surface()

    # -- input ------------------------------------------------------------

    def handle_textual_key(self, key: str) -> ActionResult:
        """Run the shortcut bound to a Textual key name such as ``ctrl+s``."""

        try:
            chord = KeyChord.parse(key)
        except ValueError:
            return ActionResult(consumed=False, status="miss")
        match = self.registry.lookup(chord, context=self._context())
        if match is None:
            return ActionResult(consumed=False, status="miss")

        self.hooks.log(f"shortcut -> {chord.token} action={match.action.id}")
        outcome = match.action(self.session, match)
        if inspect.isawaitable(outcome):
            self.hooks.run_async(self._finish_async(outcome))
            return ActionResult(consumed=True, status="pending")
        result = outcome if isinstance(outcome, ActionResult) else ActionResult(consumed=True)
        self._after_result(result)
        return result

    def handle_text_change(self, text: str) -> bool:
        """Fold the widget's full text back into the tree."""

        if text == self.projection.text:
            return False
        self._syncing = True
        try:
            changed = self.session.replace_lines(self.projection, text.split("\n"))
        finally:
            self._syncing = False
        if not changed:
            # the tree refused the edit; put the widget back in step with it
            self._refresh_surface()
            return False
        self.projection = self.session.projection()
        # the widget already shows the typed text unless the tree normalized it
        if self.projection.text != text:
            self.hooks.update_surface(self.projection)
        return True

    def handle_selection_change(self, anchor: Cell, focus: Cell) -> ToolbarView:
        if self.projection.version != self.session.document.version:
            self.projection = self.session.projection()
        selection = self.projection.selection_between(anchor, focus)
        bounds: Optional[Rect] = None
        if anchor != focus:
            bounds = self.hooks.to_viewport(self.projection.bounds(anchor, focus))
        return self.session.select(selection, bounds=bounds)

    def press_toolbar(self, name: FormatCommand | str) -> None:
        self.session.pointer_down(PointerTarget.TOOLBAR)
        outcome = self.session.apply_format(name)
        self.hooks.update_status(f"{outcome.command.short_name}:{outcome.status}")

    def pointer_outside(self) -> None:
        self.session.pointer_down(PointerTarget.OUTSIDE)

    def import_path(self, path: str | Path) -> bool:
        try:
            self.session.import_file(path)
        except (UnsupportedFileError, OSError) as exc:
            telemetry.record_event("files.import_failed", level="warning", data={"reason": str(exc)})
            self.hooks.notify(f"Could not open file: {exc}")
            return False
        self.hooks.update_status(f"opened {Path(path).name}")
        return True

    def clear(self) -> None:
        self.session.clear()
        self.hooks.update_status("cleared")

    def process_timeouts(self) -> bool:
        return self.session.process_timeouts()

    def close(self) -> None:
        self.session.close()

    # -- internals --------------------------------------------------------

    async def _finish_async(self, pending: Awaitable[object]) -> None:
        result = await pending
        if isinstance(result, ActionResult):
            self._after_result(result)

    def _after_result(self, result: ActionResult) -> None:
        status = result.message or result.status
        if status:
            self.hooks.update_status(status)

    def _context(self) -> dict[str, bool]:
        selection = self.session.selection
        return {
            "has_selection": selection is not None and not selection.collapsed,
            "toolbar_visible": self.session.toolbar.visible,
        }

    def _subscribe_events(self) -> None:
        bus = self.session.bus
        bus.subscribe("document.change", lambda _payload: self._document_changed())
        bus.subscribe("toolbar.change", self._toolbar_changed)
        bus.subscribe("notice", lambda payload: self.hooks.notify(str(payload)))
        bus.subscribe("prompt.upload", lambda _payload: self.hooks.prompt_upload())
        bus.subscribe("storage.saved", lambda _payload: self.hooks.update_status("saved"))

    def _document_changed(self) -> None:
        if self._syncing:
            return
        if self.projection.version == self.session.document.version:
            return
        self._refresh_surface()

    def _toolbar_changed(self, view: object) -> None:
        if isinstance(view, ToolbarView):
            self.hooks.update_toolbar(view)

    def _refresh_surface(self) -> None:
        self.projection = self.session.projection()
        self.hooks.update_surface(self.projection)
        self.hooks.log(
            f"surface <- version={self.projection.version} lines={len(self.projection.lines)}"
        )


__all__ = ["TextualEditorAdapter", "TextualUIHooks"]
