"""Markdown <-> HTML conversion backed by markdown-it-py and html2text."""

from __future__ import annotations

from dataclasses import dataclass, field

import html2text
from markdown_it import MarkdownIt

from marky.runtime.telemetry import span


def _default_renderer() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("table").enable("strikethrough")


def _default_serializer() -> html2text.HTML2Text:
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ignore_links = False
    converter.ignore_images = False
    converter.ul_item_mark = "-"
    converter.emphasis_mark = "_"
    converter.strong_mark = "**"
    # fenced code blocks instead of indented ones
    converter.backquote_code_style = True
    return converter


@dataclass
class ConversionBridge:
    """``render`` and ``serialize`` pair used by the session and the CLI."""

    renderer: MarkdownIt = field(default_factory=_default_renderer)

    def render(self, markdown: str) -> str:
        with span("conversion::render", component="conversion", metadata={"chars": len(markdown)}):
            return self.renderer.render(markdown)

    def serialize(self, html: str) -> str:
        # HTML2Text keeps parser state, so every call gets a fresh instance.
        with span("conversion::serialize", component="conversion", metadata={"chars": len(html)}):
            markdown = _default_serializer().handle(html)
        return markdown.strip("\n") + "\n"


_DEFAULT = ConversionBridge()


def render(markdown: str) -> str:
    return _DEFAULT.render(markdown)


def serialize(html: str) -> str:
    return _DEFAULT.serialize(html)


__all__ = ["ConversionBridge", "render", "serialize"]
