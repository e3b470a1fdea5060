"""
Ingestion Pipeline

Document text to knowledge graph.

Modules:
    chunking: Sentence-aligned chunking
    extraction: Per-chunk structured LLM extraction
    resolution: Per-type entity name merging
    assembly: Graph consolidation
    text: Document text extraction (PDF, plain text)
    suggestions: Vocabulary suggestions for a research focus
    pipeline: End-to-end orchestration with progress reporting

Pipeline Flow:
    1. Document nodes
    2. Chunking
    3. Extraction (+ CONTAINS edges)
    4. Entity resolution
    5. Consolidation
"""

from docgraph.ingestion.pipeline import (
    ProcessingCancelledError,
    ProgressCallback,
    process_documents_to_graph,
)

__all__ = ["ProcessingCancelledError", "ProgressCallback", "process_documents_to_graph"]
