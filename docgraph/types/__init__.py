"""
Type Definitions

Pydantic models for all data structures.

Graph Models:
    - GraphNode, GraphRelationship, GraphData - Pipeline input/output
    - EntityMapping - Per-type canonical name mapping
    - ChunkExtraction - Raw per-chunk extraction output

Progress Models:
    - ProcessingProgress, ProcessingDetails - Streamed status events
    - ProcessingResult - Non-streaming result envelope

Input Models:
    - DocumentPayload - Uploaded document

LLM Output Models:
    - KnowledgeGraphExtraction, EntityMerging, VocabularySuggestions
"""

from docgraph.types.documents import DocumentPayload
from docgraph.types.graph import (
    CONTAINS_TYPE,
    DOCUMENT_TYPE,
    ChunkExtraction,
    EntityMapping,
    GraphData,
    GraphNode,
    GraphRelationship,
)
from docgraph.types.progress import (
    ProcessingDetails,
    ProcessingProgress,
    ProcessingResult,
    ProcessingStatus,
)
from docgraph.types.results import (
    CostBreakdown,
    CostDebugReport,
    CostUsageRecord,
    EntityMerging,
    ExtractedEntity,
    ExtractedRelationship,
    KnowledgeGraphExtraction,
    MergedEntity,
    StageCostBreakdown,
    VocabularySuggestions,
)

__all__ = [
    # Graph Models
    "DOCUMENT_TYPE",
    "CONTAINS_TYPE",
    "GraphNode",
    "GraphRelationship",
    "GraphData",
    "EntityMapping",
    "ChunkExtraction",
    # Progress Models
    "ProcessingStatus",
    "ProcessingDetails",
    "ProcessingProgress",
    "ProcessingResult",
    # Input Models
    "DocumentPayload",
    # LLM Output Models
    "ExtractedEntity",
    "ExtractedRelationship",
    "KnowledgeGraphExtraction",
    "MergedEntity",
    "EntityMerging",
    "VocabularySuggestions",
    # Cost Telemetry
    "CostUsageRecord",
    "StageCostBreakdown",
    "CostBreakdown",
    "CostDebugReport",
]
