"""Markdown to DOCX conversion and its command line."""

from .docx_writer import (
    ConversionError,
    ConversionReport,
    DocxWriter,
    convert_file,
    default_output_path,
    extract_title,
)

__all__ = [
    "ConversionError",
    "ConversionReport",
    "DocxWriter",
    "convert_file",
    "default_output_path",
    "extract_title",
]
