"""Tests for document text extraction."""

from io import BytesIO

import pytest
from pypdf import PdfWriter

from docgraph.ingestion.text import TextExtractionError, extract_document_text
from docgraph.types import DocumentPayload


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestPlainText:
    """Tests for .txt and .md documents."""

    def test_utf8_text(self):
        """UTF-8 text is decoded and trimmed."""
        payload = DocumentPayload(name="notes.md", content_bytes="  Café notes.\r\nLine two.  \n".encode())
        assert extract_document_text(payload) == "Café notes.\nLine two."

    def test_reads_from_path(self, tmp_path):
        """Payloads on disk are read from their path."""
        path = tmp_path / "a.txt"
        path.write_text("From disk.")
        assert extract_document_text(DocumentPayload.from_path(path)) == "From disk."

    def test_invalid_utf8(self):
        """Undecodable bytes raise TextExtractionError naming the file."""
        payload = DocumentPayload(name="bad.txt", content_bytes=b"\xff\xfe\xfa")
        with pytest.raises(TextExtractionError, match="bad.txt"):
            extract_document_text(payload)

    def test_empty_text(self):
        """Whitespace-only documents are rejected."""
        with pytest.raises(TextExtractionError, match="no extractable text"):
            extract_document_text(DocumentPayload(name="empty.txt", content_bytes=b"  \n "))


class TestPdf:
    """Tests for PDF documents."""

    def test_blank_pdf_has_no_text(self):
        """A PDF without a text layer is rejected."""
        payload = DocumentPayload(name="scan.pdf", content_bytes=_blank_pdf())
        with pytest.raises(TextExtractionError) as excinfo:
            extract_document_text(payload)
        assert excinfo.value.file_name == "scan.pdf"

    def test_corrupt_pdf(self):
        """Bytes that are not a PDF raise TextExtractionError."""
        payload = DocumentPayload(name="broken.pdf", content_bytes=b"not a pdf at all")
        with pytest.raises(TextExtractionError, match="broken.pdf"):
            extract_document_text(payload)


class TestUnsupported:
    """Tests for unsupported inputs."""

    def test_unsupported_suffix(self):
        """Unknown file types are rejected before reading."""
        with pytest.raises(TextExtractionError, match="unsupported file type"):
            extract_document_text(DocumentPayload(name="deck.pptx", content_bytes=b"x"))

    def test_message_format(self):
        """The error message names the file and reason."""
        error = TextExtractionError("a.pdf", "boom")
        assert str(error) == "Failed to extract text from a.pdf: boom"
        assert isinstance(error, RuntimeError)
