"""
DocGraph - Knowledge Graphs from Documents

Extracts typed entities and relationships from PDF and text documents with
an LLM, merges name variants per entity type, and returns a consolidated
graph. Progress can be streamed as NDJSON events.

Example:
    >>> from docgraph import GraphBuilder, DocumentPayload
    >>> builder = GraphBuilder()
    >>> result = await builder.build(
    ...     [DocumentPayload.from_path("report.pdf")],
    ...     ["ORGANIZATION", "PERSON"],
    ...     ["WORKS_FOR", "ACQUIRED"],
    ... )
    >>> print(len(result.data.nodes))

Main Classes:
    GraphBuilder: Primary entry point (build, stream, suggest)
    GraphConfig: Configuration management
"""

__version__ = "0.1.0"

# Public API - lazy imports
def __getattr__(name: str):
    """Lazy import public API components."""

    if name in ("GraphBuilder", "InputValidationError"):
        from docgraph.api import builder
        return getattr(builder, name)

    if name == "GraphConfig":
        from docgraph.config.settings import GraphConfig
        return GraphConfig

    # Convenience functions
    if name in ("build_graph", "suggest_vocabulary"):
        from docgraph.api import convenience
        return getattr(convenience, name)

    # Pipeline entry points
    if name in ("process_documents_to_graph", "ProcessingCancelledError"):
        from docgraph.ingestion import pipeline
        return getattr(pipeline, name)

    # Types
    if name in (
        "DocumentPayload",
        "GraphData",
        "GraphNode",
        "GraphRelationship",
        "EntityMapping",
        "ProcessingProgress",
        "ProcessingResult",
        "VocabularySuggestions",
    ):
        from docgraph import types
        return getattr(types, name)

    raise AttributeError(f"module 'docgraph' has no attribute {name!r}")


__all__ = [
    # Main classes
    "GraphBuilder",
    "GraphConfig",
    "InputValidationError",

    # Convenience functions
    "build_graph",
    "suggest_vocabulary",

    # Pipeline
    "process_documents_to_graph",
    "ProcessingCancelledError",

    # Types
    "DocumentPayload",
    "GraphData",
    "GraphNode",
    "GraphRelationship",
    "EntityMapping",
    "ProcessingProgress",
    "ProcessingResult",
    "VocabularySuggestions",

    # Version
    "__version__",
]
