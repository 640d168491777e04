"""Markdown to DOCX conversion through the rendered HTML tree and python-docx."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor
from docx.text.paragraph import Paragraph

from marky.bridges.conversion import ConversionBridge
from marky.document.html import parse_fragment
from marky.document.nodes import BOLD_TAGS, ITALIC_TAGS, LIST_TAGS, Element, Node, Text
from marky.runtime.telemetry import record_event, span

DEFAULT_TITLE = "Document"
BASE_FONT = "Times New Roman"
BASE_SIZE = Pt(12)
CODE_FONT = "Courier New"
CODE_SIZE = Pt(10)
HEADING_SIZES = {1: Pt(24), 2: Pt(18), 3: Pt(14), 4: Pt(12)}
LINK_COLOR = RGBColor(0x34, 0x98, 0xDB)

_TITLE_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)


class ConversionError(RuntimeError):
    """Raised when a markdown file cannot be turned into a DOCX document."""


@dataclass(frozen=True, slots=True)
class ConversionReport:
    title: str
    output: Path
    size_bytes: int

    @property
    def size_kb(self) -> float:
        return self.size_bytes / 1024


def extract_title(markdown: str) -> str:
    match = _TITLE_PATTERN.search(markdown)
    return match.group(1).strip() if match else DEFAULT_TITLE


def default_output_path(input_path: Path) -> Path:
    return input_path.with_suffix(".docx")


@dataclass(slots=True)
class _InlineStyle:
    bold: bool = False
    italic: bool = False
    code: bool = False
    strike: bool = False
    link: bool = False

    def with_tag(self, tag: str) -> "_InlineStyle":
        return _InlineStyle(
            bold=self.bold or tag in BOLD_TAGS,
            italic=self.italic or tag in ITALIC_TAGS,
            code=self.code or tag == "code",
            strike=self.strike or tag in {"s", "del", "strike"},
            link=self.link or tag == "a",
        )


class DocxWriter:
    """Walks rendered HTML blocks and appends the matching python-docx content."""

    def __init__(self, *, title: str = DEFAULT_TITLE, source_name: str = "") -> None:
        self.title = title
        self.source_name = source_name
        self.document: DocxDocument = Document()
        self._setup()

    def _setup(self) -> None:
        normal = self.document.styles["Normal"]
        normal.font.name = BASE_FONT
        normal.font.size = BASE_SIZE

        for section in self.document.sections:
            section.top_margin = Inches(1)
            section.bottom_margin = Inches(1)
            section.left_margin = Inches(1)
            section.right_margin = Inches(1)
            section.header_distance = Inches(0.5)
            section.footer_distance = Inches(0.5)
            section.gutter = Inches(0)

        props = self.document.core_properties
        props.title = self.title
        props.subject = "Converted from Markdown"
        props.author = "Marky MD to DOCX Converter"
        props.keywords = "markdown, document"
        props.comments = f"Document converted from {self.source_name}"

    def write_html(self, html: str) -> None:
        for node in parse_fragment(html):
            self._block(node, list_depth=0)

    def save(self, output: Path) -> None:
        self.document.save(str(output))

    # -- blocks -----------------------------------------------------------

    def _block(self, node: Node, *, list_depth: int) -> None:
        if isinstance(node, Text):
            if node.text.strip():
                self._inline_paragraph([node])
            return

        tag = node.tag
        if tag in {"h1", "h2", "h3", "h4", "h5", "h6"}:
            level = int(tag[1])
            paragraph = self.document.add_heading("", level=min(level, 4))
            self._inline(paragraph, node.children, _InlineStyle())
            size = HEADING_SIZES.get(level, HEADING_SIZES[4])
            for run in paragraph.runs:
                run.font.size = size
                run.bold = True
        elif tag == "p":
            self._inline_paragraph(node.children)
        elif tag in LIST_TAGS:
            self._list(node, depth=list_depth + 1)
        elif tag == "pre":
            self._code_block(node)
        elif tag == "blockquote":
            self._blockquote(node)
        elif tag == "table":
            self._table(node)
        elif tag == "hr":
            paragraph = self.document.add_paragraph()
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            paragraph.add_run("* * *")
        elif tag in {"div", "section", "article", "body"}:
            for child in node.children:
                self._block(child, list_depth=list_depth)
        else:
            self._inline_paragraph([node])

    def _inline_paragraph(self, nodes: Iterable[Node], style: Optional[str] = None) -> Paragraph:
        paragraph = self.document.add_paragraph(style=style)
        self._inline(paragraph, nodes, _InlineStyle())
        return paragraph

    def _list(self, element: Element, *, depth: int) -> None:
        base = "List Bullet" if element.tag == "ul" else "List Number"
        style = base if depth == 1 else f"{base} {min(depth, 3)}"
        for item in element.element_children:
            if item.tag != "li":
                continue
            inline: List[Node] = []
            nested: List[Element] = []
            for child in item.children:
                if isinstance(child, Element) and child.tag in LIST_TAGS:
                    nested.append(child)
                elif isinstance(child, Element) and child.tag == "p":
                    if inline:
                        inline.append(Text(" "))
                    inline.extend(child.children)
                else:
                    inline.append(child)
            self._inline_paragraph(inline, style=style)
            for sub in nested:
                self._list(sub, depth=depth + 1)

    def _code_block(self, element: Element) -> None:
        code = element.text_content
        if code.endswith("\n"):
            code = code[:-1]
        paragraph = self.document.add_paragraph()
        run = paragraph.add_run(code)
        run.font.name = CODE_FONT
        run.font.size = CODE_SIZE

    def _blockquote(self, element: Element) -> None:
        for child in element.children:
            if isinstance(child, Element) and child.tag == "p":
                self._inline_paragraph(child.children, style="Quote")
            else:
                self._block(child, list_depth=0)

    def _table(self, element: Element) -> None:
        rows: List[tuple[Element, bool]] = []
        for section in element.element_children:
            if section.tag == "tr":
                rows.append((section, False))
                continue
            for row in section.element_children:
                if row.tag == "tr":
                    rows.append((row, section.tag == "thead"))
        if not rows:
            return
        width = max(len(row.element_children) for row, _ in rows)
        table = self.document.add_table(rows=len(rows), cols=width)
        table.style = "Table Grid"
        for r, (row, header) in enumerate(rows):
            for c, cell_node in enumerate(row.element_children):
                paragraph = table.cell(r, c).paragraphs[0]
                bold = header or cell_node.tag == "th"
                self._inline(paragraph, cell_node.children, _InlineStyle(bold=bold))

    # -- inline runs ------------------------------------------------------

    def _inline(self, paragraph: Paragraph, nodes: Iterable[Node], style: _InlineStyle) -> None:
        for node in nodes:
            if isinstance(node, Text):
                text = node.text if style.code else re.sub(r"\s*\n\s*", " ", node.text)
                if text:
                    self._run(paragraph, text, style)
            elif node.tag == "br":
                paragraph.add_run().add_break()
            elif node.tag == "img":
                alt = node.attrs.get("alt", "")
                if alt:
                    self._run(paragraph, f"[{alt}]", style)
            else:
                self._inline(paragraph, node.children, style.with_tag(node.tag))

    def _run(self, paragraph: Paragraph, text: str, style: _InlineStyle) -> None:
        run = paragraph.add_run(text)
        if style.bold:
            run.bold = True
        if style.italic:
            run.italic = True
        if style.strike:
            run.font.strike = True
        if style.code:
            run.font.name = CODE_FONT
            run.font.size = CODE_SIZE
        if style.link:
            run.underline = True
            run.font.color.rgb = LINK_COLOR


def convert_file(
    input_path: Path | str,
    output_path: Path | str | None = None,
    *,
    conversion: Optional[ConversionBridge] = None,
    progress: Optional[Callable[[str], None]] = None,
) -> ConversionReport:
    """Convert one markdown file to DOCX and report what was written.

    ``progress`` receives one human-readable line per conversion step.
    """

    source = Path(input_path)
    target = Path(output_path) if output_path else default_output_path(source)
    if not source.exists():
        raise FileNotFoundError(f"Input file not found: {source}")

    bridge = conversion or ConversionBridge()
    note = progress or (lambda line: None)
    with span(
        "converter::docx",
        component="converter",
        metadata={"input": str(source), "output": str(target)},
    ) as handle:
        try:
            note(f"Reading markdown file: {source}")
            markdown = source.read_text(encoding="utf-8")
            title = extract_title(markdown)
            note(f"Document title: {title}")
            note("Converting markdown to HTML...")
            html = bridge.render(markdown)
            note("Converting HTML to DOCX...")
            writer = DocxWriter(title=title, source_name=source.name)
            writer.write_html(html)
            target.parent.mkdir(parents=True, exist_ok=True)
            writer.save(target)
        except (OSError, ValueError, KeyError) as exc:
            handle.fail(str(exc))
            raise ConversionError(str(exc)) from exc
        size = target.stat().st_size
        handle.add_metadata("bytes", size)

    record_event("converter.docx_written", data={"output": str(target), "bytes": size})
    return ConversionReport(title=title, output=target, size_bytes=size)


__all__ = [
    "ConversionError",
    "ConversionReport",
    "DocxWriter",
    "convert_file",
    "default_output_path",
    "extract_title",
]
