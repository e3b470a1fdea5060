"""
Document Text Extraction

Converts an uploaded document into plain text.

Supported formats:
    - .pdf: text layer via pypdf (no OCR; scanned PDFs yield no text)
    - .txt, .md, .markdown: decoded as UTF-8

Unsupported types, unreadable bytes and documents without any text raise
TextExtractionError naming the file.

Example:
    >>> payload = DocumentPayload.from_path("report.pdf")
    >>> text = extract_document_text(payload)
"""

from __future__ import annotations

import logging
from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from docgraph.types import DocumentPayload

logger = logging.getLogger(__name__)

PDF_SUFFIXES = frozenset({".pdf"})
TEXT_SUFFIXES = frozenset({".txt", ".md", ".markdown"})
SUPPORTED_SUFFIXES = PDF_SUFFIXES | TEXT_SUFFIXES


class TextExtractionError(RuntimeError):
    """Raised when a document's text cannot be extracted."""

    def __init__(self, file_name: str, reason: str) -> None:
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Failed to extract text from {file_name}: {reason}")


def _clean(text: str) -> str:
    # Normalize line endings and strip trailing spaces.
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [ln.rstrip() for ln in text.split("\n")]
    return "\n".join(lines).strip()


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n\n".join(pages)


def extract_document_text(payload: DocumentPayload) -> str:
    """
    Extract plain text from a document.

    Blocking; run it in a worker thread from async code.

    Raises:
        TextExtractionError: Unsupported type, unreadable content or no text
    """
    suffix = payload.suffix
    if suffix not in SUPPORTED_SUFFIXES:
        raise TextExtractionError(payload.name, f"unsupported file type '{suffix or payload.name}'")

    try:
        data = payload.read_bytes()
    except (OSError, ValueError) as e:
        raise TextExtractionError(payload.name, str(e)) from e

    if suffix in PDF_SUFFIXES:
        try:
            text = _pdf_text(data)
        except (PyPdfError, ValueError, OSError) as e:
            raise TextExtractionError(payload.name, f"invalid PDF ({e})") from e
    else:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise TextExtractionError(payload.name, "not valid UTF-8 text") from e

    text = _clean(text)
    if not text:
        raise TextExtractionError(payload.name, "document contains no extractable text")

    logger.debug("Extracted %d characters from %s", len(text), payload.name)
    return text
