"""Open a document with the reader that matches its format."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from docfingerprint.document.markdown import MarkdownDocument
from docfingerprint.document.pdf import PdfDocument
from docfingerprint.document.raw import RawDocument
from docfingerprint.document.tabular import CsvDocument, XlsxDocument
from docfingerprint.document.text import TextDocument

Document = Union[
    XlsxDocument,
    CsvDocument,
    PdfDocument,
    MarkdownDocument,
    TextDocument,
    RawDocument,
]
"""Any document this package can open; every kind carries its file path."""


def open_document(path, extension: str) -> Document:
    """Open a document, choosing the reader from the given extension."""
    return open_document_with_text_path(path, extension, None)


def open_document_with_text_path(path, extension: str, text_path=None) -> Document:
    """Open a document by extension; a PDF also loads the markdown at text_path.

    Extensions are matched without regard to case. Unknown extensions fall
    back to reading the raw bytes.
    """
    path = Path(path)
    match extension.lower():
        case "xlsx" | "xls":
            return XlsxDocument(path)
        case "csv":
            return CsvDocument(path)
        case "pdf":
            return PdfDocument.open(path, text_path)
        case "md" | "markdown":
            return MarkdownDocument.open(path)
        case "txt" | "text":
            return TextDocument.open(path)
        case _:
            return RawDocument.open(path)


def open_document_from_path(path) -> Document:
    """Open a document, taking the format from the file's own extension."""
    path = Path(path)
    suffix = path.suffix
    extension = suffix[1:] if suffix.startswith(".") else ""
    return open_document_with_text_path(path, extension, None)