"""Selection ranges expressed as child-index paths into the document tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Path = Tuple[int, ...]


class SelectionValidationError(RuntimeError):
    """Raised when a selection points outside the document tree."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class StaleSelectionError(SelectionValidationError):
    """Raised when a selection predates the document's latest mutation."""


@dataclass(frozen=True, slots=True)
class Position:
    """Boundary point: ``offset`` counts characters in text, children in elements."""

    path: Path
    offset: int = 0

    @property
    def point(self) -> Tuple[int, ...]:
        # Tuple ordering of points matches document order.
        return self.path + (self.offset,)


@dataclass(frozen=True, slots=True)
class SelectionRange:
    anchor: Position
    focus: Position
    version: Optional[int] = None

    @classmethod
    def caret(cls, path: Path, offset: int = 0, *, version: Optional[int] = None) -> "SelectionRange":
        position = Position(tuple(path), offset)
        return cls(position, position, version)

    @classmethod
    def between(
        cls,
        anchor: Tuple[Path, int],
        focus: Tuple[Path, int],
        *,
        version: Optional[int] = None,
    ) -> "SelectionRange":
        return cls(
            Position(tuple(anchor[0]), anchor[1]),
            Position(tuple(focus[0]), focus[1]),
            version,
        )

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def common_ancestor(self) -> Path:
        common = []
        for left, right in zip(self.anchor.path, self.focus.path):
            if left != right:
                break
            common.append(left)
        return tuple(common)

    def ordered(self) -> Tuple[Position, Position]:
        if self.focus.point < self.anchor.point:
            return self.focus, self.anchor
        return self.anchor, self.focus

    def start(self) -> "SelectionRange":
        first, _ = self.ordered()
        return SelectionRange(first, first, self.version)

    def with_version(self, version: int) -> "SelectionRange":
        return SelectionRange(self.anchor, self.focus, version)


__all__ = [
    "Path",
    "Position",
    "SelectionRange",
    "SelectionValidationError",
    "StaleSelectionError",
]
