"""
LLM-Based Extraction

Structured extraction of typed entities and relationships from chunks.

Modules:
    extractor: Single-chunk extraction and bounded-concurrency batches

Failure Policy:
    - Transport errors and unparseable responses yield an empty result
    - A warning is logged; the batch continues
"""

from docgraph.ingestion.extraction.extractor import extract_from_chunk, extract_from_chunks

__all__ = ["extract_from_chunk", "extract_from_chunks"]
