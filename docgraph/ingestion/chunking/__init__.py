"""
Document Chunking

Turns extracted document text into sentence-aligned chunks suitable for LLM
extraction.

Modules:
    sentences: Greedy sentence accumulation under a character budget
"""

from docgraph.ingestion.chunking.sentences import DEFAULT_MAX_CHARS, chunk_text, split_sentences

__all__ = ["DEFAULT_MAX_CHARS", "chunk_text", "split_sentences"]
