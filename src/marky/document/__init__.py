"""Document tree, selections, and host projections."""

from .html import inner_html, parse_fragment, to_html
from .nodes import (
    BLOCK_TAGS,
    BlockKind,
    Element,
    FormatCommand,
    FormatFamily,
    Node,
    Text,
)
from .projection import Projection, Rect, apply_line_edits, project, set_block_text
from .selection import (
    Position,
    SelectionRange,
    SelectionValidationError,
    StaleSelectionError,
)
from .tree import EditableDocument, placeholder_paragraph

__all__ = [
    "BLOCK_TAGS",
    "BlockKind",
    "EditableDocument",
    "Element",
    "FormatCommand",
    "FormatFamily",
    "Node",
    "Position",
    "Projection",
    "Rect",
    "SelectionRange",
    "SelectionValidationError",
    "StaleSelectionError",
    "Text",
    "apply_line_edits",
    "inner_html",
    "parse_fragment",
    "placeholder_paragraph",
    "project",
    "set_block_text",
    "to_html",
]
