"""Owned element tree nodes and the closed format/block vocabularies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Union


@dataclass(eq=False, slots=True)
class Text:
    """Character data leaf."""

    text: str = ""
    parent: Optional["Element"] = field(default=None, repr=False)

    @property
    def text_content(self) -> str:
        return self.text

    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent


@dataclass(eq=False, slots=True)
class Element:
    """Tagged container owning an ordered list of child nodes.

    ``parent`` is a non-owning back reference maintained by the mutation
    helpers below; callers should never assign ``children`` items directly.
    """

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    parent: Optional["Element"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tag = self.tag.lower()
        children = list(self.children)
        self.children = []
        for child in children:
            _detach(child)
            child.parent = self
            self.children.append(child)

    @classmethod
    def build(
        cls, tag: str, *children: "Node | str", attrs: Optional[Dict[str, str]] = None
    ) -> "Element":
        nodes = [Text(child) if isinstance(child, str) else child for child in children]
        return cls(tag, dict(attrs or {}), nodes)

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.children)

    @property
    def element_children(self) -> List["Element"]:
        return [child for child in self.children if isinstance(child, Element)]

    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def closest(self, *tags: str) -> Optional["Element"]:
        """Return ``self`` or the nearest ancestor whose tag is in ``tags``."""

        wanted = {tag.lower() for tag in tags}
        node: Optional[Element] = self
        while node is not None:
            if node.tag in wanted:
                return node
            node = node.parent
        return None

    def index(self, child: "Node") -> int:
        for position, candidate in enumerate(self.children):
            if candidate is child:
                return position
        raise ValueError(f"{child!r} is not a child of <{self.tag}>")

    def append(self, child: "Node") -> "Node":
        return self.insert(len(self.children), child)

    def extend(self, children: Iterable["Node"]) -> None:
        for child in list(children):
            self.append(child)

    def insert(self, position: int, child: "Node") -> "Node":
        _detach(child)
        self.children.insert(position, child)
        child.parent = self
        return child

    def take_children(self) -> List["Node"]:
        """Detach and return all children, leaving ``self`` empty."""

        taken = self.children
        self.children = []
        for child in taken:
            child.parent = None
        return taken

    def iter_descendants(self) -> Iterator["Node"]:
        for child in self.children:
            yield child
            if isinstance(child, Element):
                yield from child.iter_descendants()

    def iter_text(self) -> Iterator[Text]:
        for node in self.iter_descendants():
            if isinstance(node, Text):
                yield node


Node = Union[Text, Element]


def _detach(node: Node) -> None:
    parent = node.parent
    if parent is None:
        return
    for position, candidate in enumerate(parent.children):
        if candidate is node:
            del parent.children[position]
            break
    node.parent = None


def detach(node: Node) -> None:
    _detach(node)


def replace_node(old: Node, new: Node) -> None:
    parent = old.parent
    if parent is None:
        raise ValueError("cannot replace a detached node")
    position = parent.index(old)
    _detach(old)
    parent.insert(position, new)


def insert_before(reference: Node, new: Node) -> None:
    parent = reference.parent
    if parent is None:
        raise ValueError("cannot insert next to a detached node")
    parent.insert(parent.index(reference), new)


def insert_after(reference: Node, new: Node) -> None:
    parent = reference.parent
    if parent is None:
        raise ValueError("cannot insert next to a detached node")
    parent.insert(parent.index(reference) + 1, new)


def unwrap(element: Element) -> List[Node]:
    """Replace ``element`` with its children; returns the moved children."""

    parent = element.parent
    if parent is None:
        raise ValueError("cannot unwrap a detached element")
    position = parent.index(element)
    children = element.take_children()
    _detach(element)
    for offset, child in enumerate(children):
        parent.insert(position + offset, child)
    return children


def split_text(node: Text, offset: int) -> Text:
    """Split ``node`` at ``offset``; the tail becomes a new following sibling."""

    if not 0 < offset < len(node.text):
        raise ValueError(f"split offset {offset} outside text of length {len(node.text)}")
    tail = Text(node.text[offset:])
    node.text = node.text[:offset]
    insert_after(node, tail)
    return tail


class BlockKind(str, Enum):
    """Structural block kinds the selection resolver may stop at."""

    PARAGRAPH = "p"
    HEADING_1 = "h1"
    HEADING_2 = "h2"
    HEADING_3 = "h3"
    LIST_ITEM = "li"
    CODE_BLOCK = "pre"

    @classmethod
    def for_tag(cls, tag: str) -> Optional["BlockKind"]:
        try:
            return cls(tag.lower())
        except ValueError:
            return None


BLOCK_TAGS = frozenset(kind.value for kind in BlockKind)
LIST_TAGS = frozenset({"ul", "ol"})
BOLD_TAGS = frozenset({"strong", "b"})
ITALIC_TAGS = frozenset({"em", "i"})
VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)
# Elements whose children are laid out as blocks rather than inline runs.
CONTAINER_TAGS = frozenset(
    {
        "body",
        "div",
        "section",
        "article",
        "blockquote",
        "ul",
        "ol",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
    }
)
FLOW_TAGS = frozenset(
    BLOCK_TAGS
    | CONTAINER_TAGS
    | {"h4", "h5", "h6", "hr", "td", "th", "figure", "dl", "dt", "dd"}
)


class FormatFamily(str, Enum):
    INLINE = "inline"
    BLOCK = "block"
    LIST = "list"
    CODE = "code"


class FormatCommand(str, Enum):
    """Every action the format toolbar can request."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading-1"
    HEADING_2 = "heading-2"
    HEADING_3 = "heading-3"
    BOLD = "bold"
    ITALIC = "italic"
    BULLET_LIST = "bullet-list"
    NUMBERED_LIST = "numbered-list"
    CODE_BLOCK = "code-block"

    @classmethod
    def parse(cls, name: "str | FormatCommand") -> "FormatCommand":
        if isinstance(name, FormatCommand):
            return name
        key = name.strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        for command in cls:
            if command.short_name == key:
                return command
        raise ValueError(f"Unknown format '{name}'")

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @property
    def family(self) -> FormatFamily:
        return _FAMILIES[self]

    @property
    def tag(self) -> str:
        """Tag this command produces (``strong``/``em`` for inline formats)."""

        return _TAGS[self]


_SHORT_NAMES = {
    FormatCommand.PARAGRAPH: "p",
    FormatCommand.HEADING_1: "h1",
    FormatCommand.HEADING_2: "h2",
    FormatCommand.HEADING_3: "h3",
    FormatCommand.BOLD: "bold",
    FormatCommand.ITALIC: "italic",
    FormatCommand.BULLET_LIST: "ul",
    FormatCommand.NUMBERED_LIST: "ol",
    FormatCommand.CODE_BLOCK: "code",
}

_FAMILIES = {
    FormatCommand.PARAGRAPH: FormatFamily.BLOCK,
    FormatCommand.HEADING_1: FormatFamily.BLOCK,
    FormatCommand.HEADING_2: FormatFamily.BLOCK,
    FormatCommand.HEADING_3: FormatFamily.BLOCK,
    FormatCommand.BOLD: FormatFamily.INLINE,
    FormatCommand.ITALIC: FormatFamily.INLINE,
    FormatCommand.BULLET_LIST: FormatFamily.LIST,
    FormatCommand.NUMBERED_LIST: FormatFamily.LIST,
    FormatCommand.CODE_BLOCK: FormatFamily.CODE,
}

_TAGS = {
    FormatCommand.PARAGRAPH: "p",
    FormatCommand.HEADING_1: "h1",
    FormatCommand.HEADING_2: "h2",
    FormatCommand.HEADING_3: "h3",
    FormatCommand.BOLD: "strong",
    FormatCommand.ITALIC: "em",
    FormatCommand.BULLET_LIST: "ul",
    FormatCommand.NUMBERED_LIST: "ol",
    FormatCommand.CODE_BLOCK: "pre",
}


__all__ = [
    "BLOCK_TAGS",
    "BOLD_TAGS",
    "BlockKind",
    "CONTAINER_TAGS",
    "Element",
    "FLOW_TAGS",
    "FormatCommand",
    "FormatFamily",
    "ITALIC_TAGS",
    "LIST_TAGS",
    "Node",
    "Text",
    "VOID_TAGS",
    "detach",
    "insert_after",
    "insert_before",
    "replace_node",
    "split_text",
    "unwrap",
]
