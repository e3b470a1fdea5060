"""
Convenience Functions

Top-level functions for common operations without explicit GraphBuilder
instantiation. These are designed for quick scripts and REPL usage.

Example:
    >>> from docgraph import build_graph, suggest_vocabulary
    >>> vocab = suggest_vocabulary("Semiconductor supply chains")
    >>> result = build_graph(["report.pdf"], vocab.entities, vocab.relationships)
    >>> len(result.data.nodes)
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docgraph.types import ProcessingResult, VocabularySuggestions


def build_graph(
    paths: Sequence[str | Path],
    entity_types: Sequence[str],
    relationship_types: Sequence[str],
    **kwargs: Any,
) -> "ProcessingResult":
    """
    Build a knowledge graph from files on disk.

    Args:
        paths: PDF, text or markdown files
        entity_types: Entity type vocabulary
        relationship_types: Relationship type vocabulary
        **kwargs: Configuration overrides (e.g. extraction_concurrency=4)
    """
    from docgraph.api.builder import GraphBuilder
    from docgraph.config import GraphConfig
    from docgraph.types import DocumentPayload

    builder = GraphBuilder(GraphConfig(**kwargs))
    documents = [DocumentPayload.from_path(path) for path in paths]
    return builder.build_sync(documents, entity_types, relationship_types)


def suggest_vocabulary(research_focus: str, **kwargs: Any) -> "VocabularySuggestions":
    """Suggest entity and relationship types for a research focus."""
    from docgraph.api.builder import GraphBuilder
    from docgraph.config import GraphConfig

    return GraphBuilder(GraphConfig(**kwargs)).suggest_sync(research_focus)
