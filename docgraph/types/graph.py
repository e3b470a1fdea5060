"""
Graph Types

Nodes and relationships produced by the extraction pipeline.

Models:
    - GraphNode: Typed entity (or source document) in the graph
    - GraphRelationship: Typed, directed edge between two node ids
    - GraphData: Final consolidated graph
    - ChunkExtraction: Raw output of one chunk extraction
    - EntityMapping: Variant -> canonical name mapping, scoped per entity type
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DOCUMENT_TYPE = "DOCUMENT"
"""Type label of the synthesized per-file document nodes."""

CONTAINS_TYPE = "CONTAINS"
"""Relationship type linking a document node to its extracted entities."""


class GraphNode(BaseModel):
    """
    A node in the knowledge graph.

    Attributes:
        id: Entity name. Raw ids may collide across chunks until consolidation.
        type: Category label (e.g., "PERSON", "DOCUMENT")
        properties: At minimum a description; DOCUMENT nodes also carry length
    """

    id: str
    type: str
    properties: dict[str, Any] = Field(default_factory=dict)


class GraphRelationship(BaseModel):
    """
    A directed, typed edge between two node ids.

    Attributes:
        source: Source node id
        target: Target node id
        type: Relationship type (e.g., "WORKS_FOR")
        properties: At minimum a description
    """

    source: str
    target: str
    type: str
    properties: dict[str, Any] = Field(default_factory=dict)


class GraphData(BaseModel):
    """A consolidated knowledge graph."""

    nodes: list[GraphNode] = Field(default_factory=list)
    relationships: list[GraphRelationship] = Field(default_factory=list)


class EntityMapping:
    """
    Variant -> canonical name mapping, keyed by entity type.

    Lookups always carry the entity type, so a name merged within one type
    is never rewritten for a node of another type.

    Example:
        >>> mapping = EntityMapping()
        >>> mapping.add("ORGANIZATION", "OpenAI", "OpenAI Inc.")
        >>> mapping.canonical("OpenAI", "ORGANIZATION")
        'OpenAI Inc.'
        >>> mapping.canonical("OpenAI", "PRODUCT")
        'OpenAI'
    """

    def __init__(self, by_type: dict[str, dict[str, str]] | None = None) -> None:
        self._by_type: dict[str, dict[str, str]] = {
            entity_type: dict(variants) for entity_type, variants in (by_type or {}).items()
        }

    def add(self, entity_type: str, variant: str, canonical: str) -> bool:
        """
        Record that `variant` should become `canonical` within `entity_type`.

        Returns False (and records nothing) for identity entries or when the
        variant is already mapped.
        """
        if variant == canonical:
            return False
        variants = self._by_type.setdefault(entity_type, {})
        if variant in variants:
            return False
        variants[variant] = canonical
        return True

    def canonical(self, name: str, entity_type: str) -> str:
        """Resolve a name within its type; identity when unmapped."""
        return self._by_type.get(entity_type, {}).get(name, name)

    def for_type(self, entity_type: str) -> dict[str, str]:
        """Copy of the variant -> canonical entries for one type."""
        return dict(self._by_type.get(entity_type, {}))

    def items(self) -> list[tuple[str, str, str]]:
        """All entries as (entity_type, variant, canonical) tuples."""
        return [
            (entity_type, variant, canonical)
            for entity_type, variants in self._by_type.items()
            for variant, canonical in variants.items()
        ]

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {entity_type: dict(variants) for entity_type, variants in self._by_type.items()}

    def __len__(self) -> int:
        return sum(len(variants) for variants in self._by_type.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityMapping):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"EntityMapping({self.to_dict()!r})"


class ChunkExtraction(BaseModel):
    """Raw nodes and relationships extracted from one chunk."""

    nodes: list[GraphNode] = Field(default_factory=list)
    relationships: list[GraphRelationship] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.relationships
