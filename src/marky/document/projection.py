"""Line-oriented projection of the document tree for text-cell hosts.

Every leaf block renders as one line, except code blocks which render one line
per source line. Inline content sitting beside nested blocks (the text of a
list item holding a sublist, loose text under the root) renders as a line of
its own. Each projected line remembers which text nodes it came from so
(row, column) coordinates map back to tree positions, and edits made to the
projected text can be folded back into the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence, Tuple

from .nodes import FLOW_TAGS, Element, Node, Text, detach, insert_after
from .selection import Position, SelectionRange
from .tree import EditableDocument

Cell = Tuple[int, int]  # (row, column)


@dataclass(frozen=True, slots=True)
class Rect:
    left: float
    top: float
    width: float
    height: float


@dataclass(slots=True)
class Segment:
    node: Text
    column: int
    offset: int
    length: int


@dataclass(slots=True)
class ProjectedLine:
    block: Element
    text: str = ""
    segments: List[Segment] = field(default_factory=list)
    # inline nodes of a mixed-content run; empty when the line is a whole leaf block
    run: List[Node] = field(default_factory=list)


@dataclass(slots=True)
class Projection:
    document: EditableDocument
    version: int
    lines: List[ProjectedLine]

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    def position_at(self, cell: Cell) -> Position:
        row, column = self._clamp(cell)
        line = self.lines[row]
        if not line.segments:
            return Position(self.document.path_of(line.block), 0)
        for segment in line.segments:
            if column <= segment.column + segment.length:
                local = max(0, column - segment.column)
                return Position(self.document.path_of(segment.node), segment.offset + local)
        last = line.segments[-1]
        return Position(self.document.path_of(last.node), last.offset + last.length)

    def selection_between(self, anchor: Cell, focus: Cell) -> SelectionRange:
        return SelectionRange(
            self.position_at(anchor), self.position_at(focus), self.version
        )

    def bounds(self, anchor: Cell, focus: Cell) -> Rect:
        """Cell-space bounding box of the selection between two cells."""

        (top_row, top_col), (bottom_row, bottom_col) = sorted(
            (self._clamp(anchor), self._clamp(focus))
        )
        if top_row == bottom_row:
            return Rect(top_col, top_row, bottom_col - top_col, 1)
        widest = max(len(line.text) for line in self.lines[top_row : bottom_row + 1])
        return Rect(0, top_row, widest, bottom_row - top_row + 1)

    def _clamp(self, cell: Cell) -> Cell:
        row = max(0, min(cell[0], len(self.lines) - 1))
        column = max(0, min(cell[1], len(self.lines[row].text)))
        return row, column


def project(document: EditableDocument) -> Projection:
    lines: List[ProjectedLine] = []
    _project_container(document.root, lines)
    return Projection(document=document, version=document.version, lines=lines)


def _project_container(container: Element, lines: List[ProjectedLine]) -> None:
    run: List[Node] = []
    for child in container.children:
        if isinstance(child, Element) and child.tag in FLOW_TAGS:
            _flush_run(container, run, lines)
            run = []
            if _is_leaf(child):
                lines.extend(_project_leaf(child))
            else:
                _project_container(child, lines)
        else:
            run.append(child)
    _flush_run(container, run, lines)


def _flush_run(container: Element, run: List[Node], lines: List[ProjectedLine]) -> None:
    if not run or not "".join(node.text_content for node in run).strip():
        return
    line = ProjectedLine(block=container, run=list(run))
    for node in run:
        _collect_segments(node, line)
    lines.append(line)


def _is_leaf(element: Element) -> bool:
    return not any(child.tag in FLOW_TAGS for child in element.element_children)


def _project_leaf(block: Element) -> List[ProjectedLine]:
    line = ProjectedLine(block=block)
    if block.tag != "pre":
        for child in block.children:
            _collect_segments(child, line)
        return [line]

    lines = [line]
    for text in block.iter_text():
        offset = 0
        for index, piece in enumerate(text.text.split("\n")):
            if index:
                lines.append(ProjectedLine(block=block))
            current = lines[-1]
            if piece:
                current.segments.append(Segment(text, len(current.text), offset, len(piece)))
                current.text += piece
            offset += len(piece) + 1
    if len(lines) > 1 and not lines[-1].text:
        lines.pop()  # trailing newline of the code body
    return lines


def _collect_segments(node: Node, line: ProjectedLine) -> None:
    if isinstance(node, Text):
        if node.text:
            # soft breaks render as spaces so columns stay aligned with offsets
            line.segments.append(Segment(node, len(line.text), 0, len(node.text)))
            line.text += node.text.replace("\n", " ")
        return
    for child in node.children:
        _collect_segments(child, line)


def block_text(block: Element) -> str:
    text = block.text_content
    if block.tag == "pre":
        return text[:-1] if text.endswith("\n") else text
    return text.replace("\n", " ")


def set_block_text(document: EditableDocument, block: Element, text: str) -> None:
    """Replace a block's inline content with a single plain text run."""

    if block.tag == "pre":
        code = next((child for child in block.element_children if child.tag == "code"), None)
        target = code or block
        target.take_children()
        target.append(Text(text + "\n" if text else ""))
    else:
        block.take_children()
        block.append(Text(text) if text else Element("br"))
    document.touch()


def apply_line_edits(projection: Projection, new_lines: Sequence[str]) -> bool:
    """Fold an edited copy of ``projection.text`` back into the document.

    Unchanged blocks keep their inline formatting; a changed block is rewritten
    as plain text. Extra lines in a non-code block become new sibling blocks,
    and blocks whose lines were all deleted are removed. A mixed-content run is
    rewritten in place, leaving the nested blocks beside it untouched.
    """

    document = projection.document
    old_lines = [line.text for line in projection.lines]
    new_lines = list(new_lines)
    if old_lines == new_lines:
        return False

    replacement: Dict[int, List[str]] = {row: [text] for row, text in enumerate(old_lines)}
    matcher = SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        added = new_lines[j1:j2]
        if tag == "insert":
            if i1 > 0:
                replacement[i1 - 1] = replacement[i1 - 1] + added
            elif old_lines:
                replacement[0] = added + replacement[0]
            continue
        for row in range(i1, i2):
            replacement[row] = []
        for index, text in enumerate(added):
            row = min(i1 + index, i2 - 1)
            replacement[row].append(text)

    changed = False
    for block, rows in _group_rows(projection):
        lines = [text for row in rows for text in replacement[row]]
        previous = [old_lines[row] for row in rows]
        if lines == previous:
            continue
        changed = True
        run = projection.lines[rows[0]].run
        if run:
            _replace_run(document, block, run, lines)
            continue
        if not lines:
            parent = block.parent
            document.remove(block)
            if parent is not None and parent is not document.root and not parent.children:
                document.remove(parent)
            continue
        if block.tag == "pre":
            set_block_text(document, block, "\n".join(lines))
            continue
        set_block_text(document, block, lines[0])
        anchor: Element = block
        for text in lines[1:]:
            sibling = Element("li" if block.tag == "li" else "p")
            sibling.append(Text(text) if text else Element("br"))
            insert_after(anchor, sibling)
            anchor = sibling
        document.touch()
    document.ensure_not_empty()
    return changed


def _replace_run(
    document: EditableDocument, container: Element, run: List[Node], lines: List[str]
) -> None:
    index = container.index(run[0])
    for node in run:
        detach(node)
    if lines and lines[0]:
        container.insert(index, Text(lines[0]))
        index += 1
    for text in lines[1:]:
        sibling = Element("p")
        sibling.append(Text(text) if text else Element("br"))
        container.insert(index, sibling)
        index += 1
    document.touch()


def _group_rows(projection: Projection) -> List[Tuple[Element, List[int]]]:
    groups: List[Tuple[Element, List[int]]] = []
    previous: Optional[Element] = None
    for row, line in enumerate(projection.lines):
        if groups and line.block is previous and line.block.tag == "pre":
            groups[-1][1].append(row)
        else:
            groups.append((line.block, [row]))
        previous = line.block
    return groups


__all__ = [
    "Cell",
    "ProjectedLine",
    "Projection",
    "Rect",
    "Segment",
    "apply_line_edits",
    "block_text",
    "project",
    "set_block_text",
]
