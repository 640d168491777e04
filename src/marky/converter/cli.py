"""``marky-docx`` command line entry point."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from marky.runtime import telemetry

from .docx_writer import ConversionError, convert_file, default_output_path

USAGE = """
Marky - Markdown to DOCX Converter

Usage:
  marky-docx <input.md> [output.docx]

Arguments:
  input.md     Path to the input Markdown file
  output.docx  Path to the output DOCX file (optional)
               If not provided, uses input filename with .docx extension

Examples:
  marky-docx document.md
  marky-docx document.md output.docx
  marky-docx ./docs/readme.md ./exports/readme.docx
"""


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="marky-docx",
        description="Convert a Markdown file to DOCX.",
        add_help=True,
    )
    parser.add_argument("input", nargs="?", help="Path to the input Markdown file")
    parser.add_argument("output", nargs="?", help="Path to the output DOCX file")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if not args.input:
        print(USAGE)
        return 0

    input_path = Path(args.input).resolve()
    output_path = Path(args.output).resolve() if args.output else default_output_path(input_path)

    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    try:
        report = convert_file(input_path, output_path, progress=print)
    except ConversionError as exc:
        telemetry.record_event(
            "converter.failed", level="error", data={"input": str(input_path), "reason": str(exc)}
        )
        print(f"Error converting file: {exc}", file=sys.stderr)
        return 1

    print(f"✓ Successfully created: {report.output}")
    print(f"  File size: {report.size_kb:.2f} KB")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry
    raise SystemExit(main())
