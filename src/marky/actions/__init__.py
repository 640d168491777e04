"""Action handlers invoked by keyboard shortcuts."""

from . import files, formatting

__all__ = ["files", "formatting"]
