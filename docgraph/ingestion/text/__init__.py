"""
Text Extraction

Plain text from uploaded documents (PDF via pypdf, UTF-8 text files).
"""

from docgraph.ingestion.text.pdf import (
    SUPPORTED_SUFFIXES,
    TextExtractionError,
    extract_document_text,
)

__all__ = ["SUPPORTED_SUFFIXES", "TextExtractionError", "extract_document_text"]
