"""Format application: tree edits for every toolbar command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from marky.document.nodes import (
    BLOCK_TAGS,
    BOLD_TAGS,
    FLOW_TAGS,
    ITALIC_TAGS,
    Element,
    FormatCommand,
    FormatFamily,
    Node,
    Text,
    detach,
    insert_after,
    insert_before,
    replace_node,
    split_text,
    unwrap,
)
from marky.document.selection import SelectionRange
from marky.document.tree import EditableDocument, placeholder_paragraph
from marky.runtime import telemetry

from .resolver import resolve_block

Transform = Callable[[EditableDocument, Element, FormatCommand], Optional[Node]]
Point = Tuple[int, ...]


@dataclass(slots=True)
class FormatOutcome:
    """What ``apply_format`` did.

    ``selection`` replaces the caller's selection, which the mutation
    invalidated; it spans the content the command produced or touched.
    """

    command: FormatCommand
    applied: bool
    selection: Optional[SelectionRange] = None
    target: Optional[Node] = None
    status: str = "ok"


def apply_format(
    document: EditableDocument,
    selection: Optional[SelectionRange],
    command: FormatCommand | str,
) -> FormatOutcome:
    command = FormatCommand.parse(command)
    if selection is None:
        return FormatOutcome(command, applied=False, status="no_selection")
    document.validate(selection)

    with telemetry.span(
        "format::apply",
        component="editing",
        metadata={"command": command.value, "version": document.version},
    ) as handle:
        if command.family is FormatFamily.INLINE:
            outcome = toggle_inline(document, selection, command)
        else:
            outcome = _apply_block_command(document, selection, command)
        handle.add_metadata("status", outcome.status)

    telemetry.record_event(
        "format.applied" if outcome.applied else "format.skipped",
        data={"command": command.value, "status": outcome.status},
    )
    return outcome


def _apply_block_command(
    document: EditableDocument, selection: SelectionRange, command: FormatCommand
) -> FormatOutcome:
    target = resolve_target(document, selection)
    if target is None:
        return FormatOutcome(command, applied=False, selection=selection, status="no_target")
    produced = BLOCK_TRANSFORMS[command](document, target, command)
    if produced is None:
        return FormatOutcome(command, applied=False, selection=selection, status="unchanged")
    document.ensure_not_empty()
    return FormatOutcome(
        command,
        applied=True,
        selection=document.select_node_contents(produced),
        target=produced,
    )


def resolve_target(
    document: EditableDocument, selection: SelectionRange
) -> Optional[Element]:
    """Block a block-level command should rewrite.

    A selection spanning several blocks resolves to the root; in that case the
    block holding the earliest selection boundary is used instead. If that
    still lands on the root there is nothing safe to rewrite.
    """

    target = resolve_block(document, selection)
    if target is document.root:
        target = resolve_block(document, selection.start())
    if target is None or target is document.root or not isinstance(target, Element):
        return None
    return target


# -- block transforms --------------------------------------------------------


def swap_block(document: EditableDocument, target: Element, command: FormatCommand) -> Node:
    replacement = Element(command.tag, children=target.take_children())
    document.replace(target, replacement)
    return replacement


def toggle_list(
    document: EditableDocument, target: Element, command: FormatCommand
) -> Optional[Node]:
    container = target.closest("ul", "ol")
    if container is not None:
        item = target.closest("li")
        if item is None:
            return None
        blocks = _item_blocks(item)
        for block in blocks:
            document.insert_before(container, block)
        document.remove(item)
        if not container.element_children:
            document.remove(container)
        return target if any(block is target for block in blocks) else blocks[0]

    item = Element("li", children=target.take_children())
    document.replace(target, Element(command.tag, children=[item]))
    return item


def _item_blocks(item: Element) -> List[Element]:
    """Split a list item's content into top-level blocks.

    Loose items already hold paragraphs (``li > p``); those move out as they
    are. Inline runs between them are wrapped in a paragraph.
    """

    blocks: List[Element] = []
    run: List[Node] = []

    def flush() -> None:
        if any(isinstance(node, Element) or node.text.strip() for node in run):
            blocks.append(Element("p", children=list(run)))
        run.clear()

    for child in item.take_children():
        if isinstance(child, Element) and child.tag in FLOW_TAGS:
            flush()
            blocks.append(child)
        else:
            run.append(child)
    flush()
    return blocks or [placeholder_paragraph()]


def toggle_code(
    document: EditableDocument, target: Element, command: FormatCommand
) -> Node:
    pre = target.closest("pre")
    if pre is not None:
        text = pre.text_content
        if text.endswith("\n"):
            text = text[:-1]
        paragraph = Element.build("p", text) if text else placeholder_paragraph()
        document.replace(pre, paragraph)
        return paragraph

    replacement = Element(command.tag, children=[Element.build("code", target.text_content)])
    document.replace(target, replacement)
    return replacement


BLOCK_TRANSFORMS: Dict[FormatCommand, Transform] = {
    FormatCommand.PARAGRAPH: swap_block,
    FormatCommand.HEADING_1: swap_block,
    FormatCommand.HEADING_2: swap_block,
    FormatCommand.HEADING_3: swap_block,
    FormatCommand.BULLET_LIST: toggle_list,
    FormatCommand.NUMBERED_LIST: toggle_list,
    FormatCommand.CODE_BLOCK: toggle_code,
}


# -- inline toggles ----------------------------------------------------------


def _synonyms(command: FormatCommand) -> FrozenSet[str]:
    return BOLD_TAGS if command is FormatCommand.BOLD else ITALIC_TAGS


def toggle_inline(
    document: EditableDocument, selection: SelectionRange, command: FormatCommand
) -> FormatOutcome:
    """Bold/italic toggle over the selected characters.

    If every selected character already carries the format it is removed from
    exactly those characters; otherwise the unformatted ones gain it.
    """

    if selection.collapsed:
        return FormatOutcome(command, applied=False, selection=selection, status="collapsed")

    tags = _synonyms(command)
    start, end = selection.ordered()
    pieces = _isolate_selected_text(document, start.point, end.point)
    if not pieces:
        return FormatOutcome(command, applied=False, selection=selection, status="empty")

    if all(_format_ancestor(piece, tags) is not None for piece in pieces):
        for piece in pieces:
            wrapper = _format_ancestor(piece, tags)
            if wrapper is not None:
                _lift_out(piece, wrapper)
        status = "removed"
    else:
        for piece in pieces:
            if _format_ancestor(piece, tags) is None:
                wrapper = Element(command.tag)
                replace_node(piece, wrapper)
                wrapper.append(piece)
        status = "added"

    scopes: List[Element] = []
    for piece in pieces:
        scope = document.nearest_block(piece) or document.root
        if not any(scope is seen for seen in scopes):
            scopes.append(scope)
    for scope in scopes:
        _merge_adjacent(scope, tags)

    document.touch()
    first, last = pieces[0], pieces[-1]
    new_selection = SelectionRange.between(
        (document.path_of(first), 0),
        (document.path_of(last), len(last.text)),
        version=document.version,
    )
    return FormatOutcome(command, applied=True, selection=new_selection, status=status)


def delete_selection(
    document: EditableDocument, selection: SelectionRange, *, keep_anchor: bool = True
) -> Optional[Text]:
    """Remove the selected characters.

    With ``keep_anchor`` an emptied text node stays where the selection began
    and is returned, so callers can insert replacement content in its place.
    Returns ``None`` when nothing was selected. Inline wrappers emptied by the
    removal go too, and an emptied block keeps a ``br`` placeholder.
    """

    if selection.collapsed:
        return None
    start, end = selection.ordered()
    pieces = _isolate_selected_text(document, start.point, end.point)
    if not pieces:
        return None
    anchor = pieces[0]
    anchor.text = ""
    doomed = pieces[1:] if keep_anchor else pieces
    for piece in doomed:
        parent = piece.parent
        detach(piece)
        _prune_empty(document, parent)
    document.touch()
    return anchor if keep_anchor else None


def _prune_empty(document: EditableDocument, element: Optional[Element]) -> None:
    while element is not None and element is not document.root and not element.children:
        if element.tag in FLOW_TAGS:
            element.append(Element("br"))
            return
        parent = element.parent
        detach(element)
        element = parent


def _isolate_selected_text(
    document: EditableDocument, start: Point, end: Point
) -> List[Text]:
    spans: List[Tuple[Text, int, int]] = []
    for text in list(document.iter_text()):
        clip = _clip(document.path_of(text), len(text.text), start, end)
        if clip is not None:
            spans.append((text, clip[0], clip[1]))

    pieces: List[Text] = []
    for text, low, high in spans:
        if high < len(text.text):
            split_text(text, high)
        pieces.append(split_text(text, low) if low > 0 else text)
    return pieces


def _clip(path: Point, length: int, start: Point, end: Point) -> Optional[Tuple[int, int]]:
    if start <= path + (0,):
        low = 0
    elif start[:-1] == path:
        low = start[-1]
    else:
        return None
    if path + (length,) <= end:
        high = length
    elif end[:-1] == path:
        high = end[-1]
    else:
        return None
    if low >= high:
        return None
    return low, high


def _format_ancestor(node: Text, tags: FrozenSet[str]) -> Optional[Element]:
    current = node.parent
    while current is not None and current.tag not in BLOCK_TAGS and current.parent is not None:
        if current.tag in tags:
            return current
        current = current.parent
    return None


def _lift_out(node: Node, ancestor: Element) -> None:
    """Move ``node`` out of ``ancestor``, splitting every wrapper in between."""

    current = node
    while current.parent is not ancestor:
        parent = current.parent
        assert parent is not None
        _split_around(parent, current)
        current = parent
    _split_around(ancestor, current)
    unwrap(ancestor)


def _split_around(element: Element, child: Node) -> None:
    position = element.index(child)
    before = element.children[:position]
    after = element.children[position + 1 :]
    if before:
        left = Element(element.tag, dict(element.attrs))
        insert_before(element, left)
        left.extend(before)
    if after:
        right = Element(element.tag, dict(element.attrs))
        insert_after(element, right)
        right.extend(after)


def _merge_adjacent(scope: Element, tags: FrozenSet[str]) -> None:
    previous: Optional[Element] = None
    for child in list(scope.children):
        if (
            isinstance(child, Element)
            and previous is not None
            and child.tag in tags
            and child.tag == previous.tag
            and child.attrs == previous.attrs
        ):
            previous.extend(child.take_children())
            detach(child)
            continue
        previous = child if isinstance(child, Element) else None
    for child in scope.element_children:
        _merge_adjacent(child, tags)


__all__ = [
    "BLOCK_TRANSFORMS",
    "FormatOutcome",
    "apply_format",
    "delete_selection",
    "resolve_target",
    "swap_block",
    "toggle_code",
    "toggle_inline",
    "toggle_list",
]
