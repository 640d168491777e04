"""The editable document: a root element that owns every block."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from .html import parse_fragment, to_html
from .nodes import BLOCK_TAGS, Element, Node, Text, insert_before, replace_node, detach
from .selection import (
    Path,
    Position,
    SelectionRange,
    SelectionValidationError,
    StaleSelectionError,
)

ROOT_TAG = "body"


def placeholder_paragraph() -> Element:
    return Element("p", children=[Element("br")])


class EditableDocument:
    """Tree of blocks with a version counter bumped on every mutation.

    The root never ends up without children: :meth:`ensure_not_empty` puts an
    empty paragraph back whenever the last block goes away.
    """

    def __init__(self, blocks: Iterable[Node] = ()) -> None:
        self.root = Element(ROOT_TAG, children=list(blocks))
        self.version = 0
        self.ensure_not_empty()

    @classmethod
    def from_html(cls, markup: str) -> "EditableDocument":
        return cls(parse_fragment(markup))

    def to_html(self) -> str:
        return "\n".join(to_html(child) for child in self.root.children)

    @property
    def blocks(self) -> List[Node]:
        return list(self.root.children)

    @property
    def text_content(self) -> str:
        return self.root.text_content

    def touch(self) -> int:
        self.version += 1
        return self.version

    def ensure_not_empty(self) -> bool:
        meaningful = [
            child
            for child in self.root.children
            if isinstance(child, Element) or child.text.strip()
        ]
        if meaningful:
            return False
        self.root.take_children()
        self.root.append(placeholder_paragraph())
        self.touch()
        return True

    def replace_content(self, nodes: Iterable[Node]) -> None:
        self.root.take_children()
        self.root.extend(nodes)
        self.touch()
        self.ensure_not_empty()

    def load_html(self, markup: str) -> None:
        self.replace_content(parse_fragment(markup))

    # -- tree edits -------------------------------------------------------

    def replace(self, old: Node, new: Node) -> None:
        self._require_owned(old)
        replace_node(old, new)
        self.touch()

    def insert_before(self, reference: Node, new: Node) -> None:
        self._require_owned(reference)
        insert_before(reference, new)
        self.touch()

    def remove(self, node: Node) -> None:
        self._require_owned(node)
        detach(node)
        self.touch()
        self.ensure_not_empty()

    def _require_owned(self, node: Node) -> None:
        if node is self.root:
            raise ValueError("the document root cannot be replaced or removed")
        if not self.contains(node):
            raise ValueError(f"{node!r} does not belong to this document")

    # -- addressing -------------------------------------------------------

    def contains(self, node: Node) -> bool:
        if node is self.root:
            return True
        return any(ancestor is self.root for ancestor in node.ancestors())

    def path_of(self, node: Node) -> Path:
        path: List[int] = []
        current: Node = node
        while current is not self.root:
            parent = current.parent
            if parent is None:
                raise ValueError(f"{node!r} does not belong to this document")
            path.append(parent.index(current))
            current = parent
        return tuple(reversed(path))

    def node_at(self, path: Path) -> Node:
        node: Node = self.root
        for depth, index in enumerate(path):
            if not isinstance(node, Element) or not 0 <= index < len(node.children):
                raise SelectionValidationError(
                    f"Path {tuple(path)} leaves the tree at depth {depth}",
                    path=tuple(path),
                )
            node = node.children[index]
        return node

    def iter_text(self) -> Iterator[Text]:
        return self.root.iter_text()

    def validate(self, selection: SelectionRange) -> SelectionRange:
        """Check ``selection`` against the current tree and version."""

        if selection.version is not None and selection.version != self.version:
            raise StaleSelectionError(
                f"Selection taken at version {selection.version}, document is at {self.version}",
                path=selection.anchor.path,
            )
        for position in (selection.anchor, selection.focus):
            self._validate_position(position)
        return selection

    def _validate_position(self, position: Position) -> None:
        node = self.node_at(position.path)
        limit = len(node.text) if isinstance(node, Text) else len(node.children)
        if not 0 <= position.offset <= limit:
            raise SelectionValidationError(
                f"Offset {position.offset} outside 0..{limit}", path=position.path
            )

    def select_node_contents(self, node: Node) -> SelectionRange:
        """Range spanning everything inside ``node``, stamped with the current version."""

        path = self.path_of(node)
        end = len(node.text) if isinstance(node, Text) else len(node.children)
        return SelectionRange.between((path, 0), (path, end), version=self.version)

    def caret_at_start(self) -> SelectionRange:
        first = self.root.children[0]
        return SelectionRange.caret(self.path_of(first), 0, version=self.version)

    def nearest_block(self, node: Node) -> Optional[Element]:
        current: Optional[Element] = node if isinstance(node, Element) else node.parent
        while current is not None and current is not self.root:
            if current.tag in BLOCK_TAGS:
                return current
            current = current.parent
        return None


__all__ = ["EditableDocument", "ROOT_TAG", "placeholder_paragraph"]
