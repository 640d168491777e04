"""Selection resolution, format application, and toolbar presentation."""

from .formats import (
    BLOCK_TRANSFORMS,
    FormatOutcome,
    apply_format,
    delete_selection,
    resolve_target,
)
from .resolver import resolve_block, resolve_container
from .toolbar import (
    PointerTarget,
    ToolbarPresenter,
    ToolbarState,
    ToolbarView,
    active_formats,
)

__all__ = [
    "BLOCK_TRANSFORMS",
    "FormatOutcome",
    "PointerTarget",
    "ToolbarPresenter",
    "ToolbarState",
    "ToolbarView",
    "active_formats",
    "apply_format",
    "delete_selection",
    "resolve_block",
    "resolve_container",
    "resolve_target",
]
