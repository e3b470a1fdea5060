"""
Sentence-Aligned Chunking

Splits plain document text into bounded, sentence-aligned segments for
per-chunk LLM extraction.

Sentences end at runs of ".", "!" or "?". Sentences accumulate greedily into
a buffer; when the next sentence (plus a two character separator budget)
would overflow `max_chars`, the buffer is flushed as a chunk. A sentence
longer than `max_chars` becomes its own oversized chunk rather than being
cut.

Example:
    >>> chunk_text("A. B. C.", max_chars=3)
    ['A.', 'B.', 'C.']
"""

from __future__ import annotations

import re

DEFAULT_MAX_CHARS = 8000

_SENTENCE_RE = re.compile(r"([^.!?]*)([.!?]+|$)")


def split_sentences(text: str) -> list[str]:
    """
    Split text into trimmed sentences, each ending with one terminal mark.

    A trailing fragment without punctuation gets a ".".
    """
    sentences: list[str] = []
    for match in _SENTENCE_RE.finditer(text):
        body = match.group(1).strip()
        if not body:
            continue
        terminator = match.group(2)[:1] or "."
        sentences.append(body + terminator)
    return sentences


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> list[str]:
    """
    Chunk text into sentence-aligned segments of at most `max_chars`.

    Args:
        text: Plain document text
        max_chars: Character budget per chunk

    Returns:
        Chunks in source order. `[text]` if no sentence could be found, so a
        document never silently disappears.
    """
    if max_chars < 1:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    chunks: list[str] = []
    current = ""

    for sentence in split_sentences(text):
        if current and len(current) + len(sentence) + 2 > max_chars:
            chunks.append(current.strip())
            current = ""
        current += sentence + " "

    if current.strip():
        chunks.append(current.strip())

    return chunks or [text]
