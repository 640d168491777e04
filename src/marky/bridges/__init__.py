"""Collaborators outside the editing core: conversion, storage, clipboard, files."""

from .clipboard import (
    Clipboard,
    ClipboardPermissionError,
    MemoryClipboard,
    WriteOnlyClipboard,
)
from .conversion import ConversionBridge
from .files import UnsupportedFileError, read_markdown_file, write_download, write_html_export
from .persistence import KeyValueStore, LocalStore, MemoryStore

__all__ = [
    "Clipboard",
    "ClipboardPermissionError",
    "ConversionBridge",
    "KeyValueStore",
    "LocalStore",
    "MemoryClipboard",
    "MemoryStore",
    "UnsupportedFileError",
    "WriteOnlyClipboard",
    "read_markdown_file",
    "write_download",
    "write_html_export",
]
