"""Textual terminal host for the editor."""

from .controller import TextualEditorAdapter, TextualUIHooks

__all__ = ["TextualEditorAdapter", "TextualUIHooks"]
