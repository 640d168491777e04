"""Selection -> structural block resolution."""

from __future__ import annotations

from typing import Iterator, Optional

from marky.document.nodes import BLOCK_TAGS, Element, Node, Text
from marky.document.selection import SelectionRange
from marky.document.tree import EditableDocument


def resolve_container(
    document: EditableDocument, selection: SelectionRange
) -> Element:
    """Common ancestor of the selection, lifted to an element."""

    node = document.node_at(selection.common_ancestor)
    if isinstance(node, Text):
        assert node.parent is not None
        return node.parent
    return node


def resolve_block(
    document: EditableDocument, selection: Optional[SelectionRange]
) -> Optional[Node]:
    """Nearest eligible block enclosing ``selection``.

    Returns ``None`` when there is no selection. When the upward walk reaches
    the root without meeting an eligible block, the starting container itself
    is returned (which may be the root).
    """

    if selection is None:
        return None
    document.validate(selection)
    container = resolve_container(document, selection)
    node: Optional[Element] = container
    while node is not None and node is not document.root:
        if node.tag in BLOCK_TAGS:
            return node
        node = node.parent
    return container


def iter_anchor_ancestors(
    document: EditableDocument, selection: SelectionRange
) -> Iterator[Element]:
    """Elements from the anchor's container up to, not including, the root."""

    node = document.node_at(selection.anchor.path)
    current: Optional[Element] = node.parent if isinstance(node, Text) else node
    while current is not None and current is not document.root:
        yield current
        current = current.parent


__all__ = ["iter_anchor_ancestors", "resolve_block", "resolve_container"]
