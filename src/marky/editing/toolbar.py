"""Floating format toolbar: visibility state machine and active-format flags."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional, Tuple

from marky.document.nodes import FormatCommand
from marky.document.projection import Rect
from marky.document.selection import SelectionRange
from marky.document.tree import EditableDocument
from marky.runtime import telemetry

from .resolver import iter_anchor_ancestors

DEFAULT_MARGIN = 10.0

TAG_FORMATS = {
    "p": FormatCommand.PARAGRAPH,
    "h1": FormatCommand.HEADING_1,
    "h2": FormatCommand.HEADING_2,
    "h3": FormatCommand.HEADING_3,
    "ul": FormatCommand.BULLET_LIST,
    "ol": FormatCommand.NUMBERED_LIST,
    "code": FormatCommand.CODE_BLOCK,
    "strong": FormatCommand.BOLD,
    "b": FormatCommand.BOLD,
    "em": FormatCommand.ITALIC,
    "i": FormatCommand.ITALIC,
}


class ToolbarState(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


class PointerTarget(str, Enum):
    TOOLBAR = "toolbar"
    EDITOR = "editor"
    OUTSIDE = "outside"


@dataclass(frozen=True, slots=True)
class ToolbarView:
    state: ToolbarState
    position: Optional[Tuple[float, float]] = None
    active: FrozenSet[FormatCommand] = frozenset()

    @property
    def visible(self) -> bool:
        return self.state is ToolbarState.VISIBLE

    def is_active(self, command: FormatCommand | str) -> bool:
        return FormatCommand.parse(command) in self.active


@dataclass
class ToolbarPresenter:
    """Two-state presenter; hosts render whatever :attr:`view` says.

    ``size`` is the toolbar's own (width, height) in host units and ``margin``
    the gap kept between the toolbar and the selection.
    """

    size: Tuple[float, float] = (0.0, 0.0)
    margin: float = DEFAULT_MARGIN
    on_change: Optional[Callable[[ToolbarView], None]] = None
    view: ToolbarView = field(default_factory=lambda: ToolbarView(ToolbarState.HIDDEN))

    @property
    def visible(self) -> bool:
        return self.view.visible

    def on_selection_change(
        self,
        document: EditableDocument,
        selection: Optional[SelectionRange],
        bounds: Optional[Rect],
        *,
        scroll_top: float = 0.0,
    ) -> ToolbarView:
        if selection is None:
            return self.hide(reason="no_selection")
        if selection.collapsed:
            return self.hide(reason="collapsed")
        if bounds is None or bounds.width == 0:
            return self.hide(reason="zero_width")

        width, height = self.size
        left = bounds.left + bounds.width / 2 - width / 2
        top = bounds.top + scroll_top - height - self.margin
        active = active_formats(document, selection)
        return self._transition(ToolbarView(ToolbarState.VISIBLE, (left, top), active))

    def on_pointer_down(self, target: PointerTarget | str) -> ToolbarView:
        if PointerTarget(target) is PointerTarget.OUTSIDE:
            return self.hide(reason="pointer_outside")
        return self.view

    def hide(self, *, reason: str = "explicit") -> ToolbarView:
        if not self.visible:
            return self.view
        telemetry.record_event("toolbar.hide", level="debug", data={"reason": reason})
        return self._transition(ToolbarView(ToolbarState.HIDDEN))

    def _transition(self, view: ToolbarView) -> ToolbarView:
        if view.visible and not self.visible:
            telemetry.record_event("toolbar.show", level="debug", data={"position": view.position})
        changed = view != self.view
        self.view = view
        if changed and self.on_change is not None:
            self.on_change(view)
        return view


def active_formats(
    document: EditableDocument, selection: SelectionRange
) -> FrozenSet[FormatCommand]:
    """Formats whose tag appears between the selection anchor and the root."""

    found = set()
    for element in iter_anchor_ancestors(document, selection):
        command = TAG_FORMATS.get(element.tag)
        if command is not None:
            found.add(command)
    return frozenset(found)


__all__ = [
    "PointerTarget",
    "TAG_FORMATS",
    "ToolbarPresenter",
    "ToolbarState",
    "ToolbarView",
    "active_formats",
]
