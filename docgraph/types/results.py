"""
Result Types

Structured-output schemas for LLM calls and cost telemetry records.

LLM Output Models (passed to LLMProvider.generate_structured):
    - KnowledgeGraphExtraction: Entities + relationships found in one chunk
    - EntityMerging: Clusters of same-entity name variants for one type
    - VocabularySuggestions: Entity/relationship types for a research focus

Cost Telemetry Models:
    - CostUsageRecord: One provider call
    - StageCostBreakdown / CostBreakdown / CostDebugReport: Aggregates
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------------------------------------------------------
# Chunk Extraction
# -----------------------------------------------------------------------------


class ExtractedEntity(BaseModel):
    """An entity found in a chunk, named exactly as in the source text."""

    name: str = Field(..., description="The name/identifier of the entity")
    type: str = Field(..., description="The type/category of the entity")
    description: str = Field(default="", description="Brief description of the entity")


class ExtractedRelationship(BaseModel):
    """A relationship between two extracted entities."""

    source: str = Field(..., description="The source entity name")
    target: str = Field(..., description="The target entity name")
    type: str = Field(..., description="The type of relationship")
    description: str = Field(default="", description="Description of the relationship")


class KnowledgeGraphExtraction(BaseModel):
    """LLM output for one chunk."""

    entities: list[ExtractedEntity] = Field(default_factory=list)
    relationships: list[ExtractedRelationship] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Entity Merging
# -----------------------------------------------------------------------------


class MergedEntity(BaseModel):
    """A cluster of names that refer to the same real-world entity."""

    canonical_name: str = Field(
        ...,
        alias="canonicalName",
        description="The canonical/preferred name for this entity",
    )
    variations: list[str] = Field(
        default_factory=list,
        description="All variations of this entity name that should be merged",
    )
    type: str = Field(default="", description="The entity type")

    model_config = ConfigDict(populate_by_name=True)


class EntityMerging(BaseModel):
    """LLM output for merging the names of one entity type."""

    merged_entities: list[MergedEntity] = Field(
        default_factory=list,
        alias="mergedEntities",
        description="Groups of names to merge. Names with no duplicates are omitted.",
    )
    reasoning: str = Field(default="", description="Brief explanation of the merging decisions")

    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Vocabulary Suggestions
# -----------------------------------------------------------------------------


class VocabularySuggestions(BaseModel):
    """Entity and relationship types suggested for a research focus."""

    entities: list[str] = Field(
        default_factory=list, description="Suggested entity types to extract"
    )
    relationships: list[str] = Field(
        default_factory=list, description="Suggested relationship types to extract"
    )
    reasoning: str = Field(
        default="",
        description="Brief explanation of why these suggestions fit the research focus",
    )


# -----------------------------------------------------------------------------
# Cost Telemetry
# -----------------------------------------------------------------------------


class CostUsageRecord(BaseModel):
    """Token usage and estimated cost of a single provider call."""

    provider: str
    model: str
    operation: str
    stage: str = "unknown"
    unit: str | None = Field(
        default=None, description="Chunk or entity type group the call worked on"
    )
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    estimated_cost_usd: float = 0.0
    latency_ms: int = 0
    estimated: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)


class StageCostBreakdown(BaseModel):
    """Aggregated usage for one pipeline stage."""

    stage: str
    calls: int = 0
    units: int = Field(default=0, description="Distinct chunks or type groups billed")
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    estimated_cost_usd: float = 0.0
    total_latency_ms: int = 0


class CostBreakdown(BaseModel):
    """Aggregated usage across all stages."""

    total_calls: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_tokens: int = 0
    total_estimated_cost_usd: float = 0.0
    total_latency_ms: int = 0
    by_stage: list[StageCostBreakdown] = Field(default_factory=list)


class CostDebugReport(BaseModel):
    """Cost report attached to a request when cost debugging is enabled."""

    enabled: bool = False
    pricing_version: str = ""
    breakdown: CostBreakdown = Field(default_factory=CostBreakdown)
    warnings: list[str] = Field(default_factory=list)
