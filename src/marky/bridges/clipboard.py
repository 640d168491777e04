"""Asynchronous clipboard boundary."""

from __future__ import annotations

from typing import Optional, Protocol


class ClipboardPermissionError(PermissionError):
    """Raised when the host refuses clipboard access."""


class Clipboard(Protocol):
    async def read_text(self) -> str:
        ...

    async def write_text(self, text: str) -> None:
        ...


class MemoryClipboard:
    """In-process clipboard. ``denied`` makes every access fail like a refused permission."""

    def __init__(self, text: str = "", *, denied: bool = False) -> None:
        self.text = text
        self.denied = denied

    async def read_text(self) -> str:
        self._check()
        return self.text

    async def write_text(self, text: str) -> None:
        self._check()
        self.text = text

    def _check(self) -> None:
        if self.denied:
            raise ClipboardPermissionError("clipboard access denied")


class WriteOnlyClipboard:
    """Clipboard whose host can push text out but never read it back."""

    def __init__(self, sink, *, reason: Optional[str] = None) -> None:
        self._sink = sink
        self._reason = reason or "clipboard read is not available on this host"

    async def read_text(self) -> str:
        raise ClipboardPermissionError(self._reason)

    async def write_text(self, text: str) -> None:
        self._sink(text)


__all__ = [
    "Clipboard",
    "ClipboardPermissionError",
    "MemoryClipboard",
    "WriteOnlyClipboard",
]
