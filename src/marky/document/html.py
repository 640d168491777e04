"""HTML fragment parsing into owned nodes and serialization back out."""

from __future__ import annotations

from html import escape
from typing import List

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from .nodes import FLOW_TAGS, VOID_TAGS, Element, Node, Text


def parse_fragment(markup: str) -> List[Node]:
    """Parse an HTML fragment into detached top-level nodes.

    Whitespace-only text between block-level siblings is dropped; text inside
    ``pre`` is kept verbatim.
    """

    soup = BeautifulSoup(markup or "", "html.parser")
    holder = Element("body")
    _convert_children(soup, holder, preformatted=False)
    _strip_layout_whitespace(holder)
    return holder.take_children()


def _convert_children(source: Tag, target: Element, *, preformatted: bool) -> None:
    for child in source.children:
        if isinstance(child, PreformattedString):
            continue  # comments, doctypes, CDATA, processing instructions
        if isinstance(child, NavigableString):
            target.append(Text(str(child)))
        elif isinstance(child, Tag):
            element = Element(child.name, _attrs(child))
            target.append(element)
            _convert_children(
                child, element, preformatted=preformatted or element.tag == "pre"
            )


def _attrs(tag: Tag) -> dict[str, str]:
    result: dict[str, str] = {}
    for key, value in tag.attrs.items():
        result[key] = " ".join(value) if isinstance(value, list) else str(value)
    return result


def _strip_layout_whitespace(element: Element) -> None:
    if element.tag == "pre":
        return
    has_flow = any(child.tag in FLOW_TAGS for child in element.element_children)
    if has_flow:
        for child in list(element.children):
            if isinstance(child, Text) and not child.text.strip():
                element.children.remove(child)
                child.parent = None
    for child in element.element_children:
        _strip_layout_whitespace(child)


def to_html(node: Node) -> str:
    if isinstance(node, Text):
        return escape(node.text, quote=False)
    attrs = "".join(
        f' {key}="{escape(value, quote=True)}"' for key, value in node.attrs.items()
    )
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}>"
    return f"<{node.tag}{attrs}>{inner_html(node)}</{node.tag}>"


def inner_html(element: Element) -> str:
    return "".join(to_html(child) for child in element.children)


__all__ = ["inner_html", "parse_fragment", "to_html"]
