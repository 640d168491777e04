"""File interchange: markdown import, markdown download, standalone HTML export."""

from __future__ import annotations

import time
from html import escape
from pathlib import Path
from typing import Optional

from marky.document.nodes import FormatCommand
from marky.runtime.telemetry import record_event, span

ACCEPTED_EXTENSIONS = (".md", ".markdown", ".txt")
DOWNLOAD_NAME = "document.md"


class UnsupportedFileError(ValueError):
    """Raised when an import is attempted on a non-markdown file."""

    def __init__(self, path: Path) -> None:
        accepted = ", ".join(ACCEPTED_EXTENSIONS)
        super().__init__(f"{path.name}: expected one of {accepted}")
        self.path = path


def read_markdown_file(path: Path | str) -> str:
    source = Path(path).expanduser()
    if source.suffix.lower() not in ACCEPTED_EXTENSIONS:
        raise UnsupportedFileError(source)
    with span("files::import", component="files", metadata={"path": str(source)}):
        return source.read_text(encoding="utf-8")


def write_download(markdown: str, directory: Path | str, *, filename: str = DOWNLOAD_NAME) -> Path:
    target = Path(directory).expanduser() / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(markdown, encoding="utf-8")
    record_event("files.download", data={"path": str(target), "chars": len(markdown)})
    return target


def write_html_export(
    content_html: str, directory: Path | str, *, timestamp_ms: Optional[int] = None
) -> Path:
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    target = Path(directory).expanduser() / f"{stamp}.html"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(build_export_html(content_html), encoding="utf-8")
    record_event("files.export_html", data={"path": str(target)})
    return target


_BUTTON_LABELS = {
    FormatCommand.PARAGRAPH: ("P", "Paragraph"),
    FormatCommand.HEADING_1: ("H1", "Heading 1"),
    FormatCommand.HEADING_2: ("H2", "Heading 2"),
    FormatCommand.HEADING_3: ("H3", "Heading 3"),
    FormatCommand.BOLD: ("<b>B</b>", "Bold"),
    FormatCommand.ITALIC: ("<i>I</i>", "Italic"),
    FormatCommand.BULLET_LIST: ("&bull;", "Bullet List"),
    FormatCommand.NUMBERED_LIST: ("1.", "Numbered List"),
    FormatCommand.CODE_BLOCK: ("&lt;/&gt;", "Code Block"),
}

# separators after the heading group and after the inline group
_GROUP_ENDS = {FormatCommand.HEADING_3, FormatCommand.ITALIC}

_EXPORT_CSS = """
body { margin: 0; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; background: #f5f5f5; color: #333; }
.container { max-width: 900px; margin: 0 auto; padding: 2rem; }
.format-bar { display: flex; gap: 0.25rem; padding: 0.4rem; background: #2c3e50; border-radius: 6px; margin-bottom: 1rem; }
.format-btn { background: transparent; color: #fff; border: none; padding: 0.3rem 0.6rem; border-radius: 4px; cursor: pointer; }
.format-btn:hover, .format-btn.active { background: #3498db; }
.separator { width: 1px; background: rgba(255, 255, 255, 0.3); margin: 0 0.25rem; }
#editor { background: #fff; padding: 2rem; border-radius: 8px; min-height: 60vh; line-height: 1.6; outline: none; }
#editor pre { background: #f4f4f4; padding: 1rem; border-radius: 4px; overflow-x: auto; }
#editor code { font-family: "Courier New", Courier, monospace; }
#editor blockquote { border-left: 3px solid #3498db; margin: 1rem 0; padding-left: 1rem; color: #666; }
""".strip()


def toolbar_markup() -> str:
    parts = []
    for command in FormatCommand:
        label, title = _BUTTON_LABELS[command]
        parts.append(
            f'<button class="format-btn" data-format="{command.short_name}" '
            f'title="{escape(title)}">{label}</button>'
        )
        if command in _GROUP_ENDS:
            parts.append('<div class="separator"></div>')
    return "\n            ".join(parts)


def build_export_html(content_html: str, *, title: str = "Markdown Editor") -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>
{_EXPORT_CSS}
    </style>
</head>
<body>
    <div class="container">
        <div id="formatBar" class="format-bar">
            {toolbar_markup()}
        </div>
        <div id="editor" contenteditable="true" spellcheck="true">
{content_html}
        </div>
    </div>
</body>
</html>
"""


__all__ = [
    "ACCEPTED_EXTENSIONS",
    "DOWNLOAD_NAME",
    "UnsupportedFileError",
    "build_export_html",
    "read_markdown_file",
    "toolbar_markup",
    "write_download",
    "write_html_export",
]
