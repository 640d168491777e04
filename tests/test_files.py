from __future__ import annotations

from pathlib import Path

import pytest

from marky.bridges import UnsupportedFileError, read_markdown_file, write_download, write_html_export
from marky.bridges.files import build_export_html, toolbar_markup


def test_read_accepts_markdown_extensions(tmp_path: Path) -> None:
    for name in ("a.md", "b.markdown", "c.txt"):
        path = tmp_path / name
        path.write_text("# Heading\n", encoding="utf-8")

        assert read_markdown_file(path) == "# Heading\n"


def test_read_rejects_other_extensions(tmp_path: Path) -> None:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF")

    with pytest.raises(UnsupportedFileError):
        read_markdown_file(path)


def test_download_writes_document_md(tmp_path: Path) -> None:
    target = write_download("# Hi\n", tmp_path)

    assert target == tmp_path / "document.md"
    assert target.read_text(encoding="utf-8") == "# Hi\n"


def test_html_export_named_by_timestamp(tmp_path: Path) -> None:
    target = write_html_export("<p>content</p>", tmp_path, timestamp_ms=1700000000000)

    assert target.name == "1700000000000.html"
    page = target.read_text(encoding="utf-8")
    assert "<p>content</p>" in page
    assert 'contenteditable="true"' in page


def test_export_page_embeds_every_toolbar_button() -> None:
    page = build_export_html("<p>x</p>", title="Notes")

    assert "<title>Notes</title>" in page
    for name in ("p", "h1", "h2", "h3", "bold", "italic", "ul", "ol", "code"):
        assert f'data-format="{name}"' in page


def test_toolbar_markup_has_group_separators() -> None:
    assert toolbar_markup().count('class="separator"') == 2
