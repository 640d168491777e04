"""Markdown WYSIWYG editing engine with pluggable hosts."""

__all__ = [
    "actions",
    "adapters",
    "bridges",
    "config",
    "converter",
    "document",
    "editing",
    "keymaps",
    "runtime",
    "session",
]

__version__ = "0.1.0"
