"""Keyboard shortcut registry and default bindings."""

from .models import ActionRef, Binding, KeyChord, WhenClause
from .registry import KeymapConflictError, RegistryStats, ShortcutMatch, ShortcutRegistry
from .defaults import load_default_keymaps

__all__ = [
    "ActionRef",
    "Binding",
    "KeyChord",
    "WhenClause",
    "KeymapConflictError",
    "RegistryStats",
    "ShortcutMatch",
    "ShortcutRegistry",
    "load_default_keymaps",
]
