"""
Graph Consolidator

Applies an EntityMapping to raw nodes and relationships and emits the final
graph. Pure and deterministic: no LLM calls, inputs are never mutated.

Node pass:
    Each node id resolves to its canonical id within the node's type. The
    first-seen node per canonical id is kept (its properties win); later
    variants are dropped.

Relationship pass:
    Endpoints resolve through the raw id -> canonical id table built in the
    node pass. Self-loops, edges with a missing endpoint, and repeats of an
    existing (source, type, target) triple are dropped.

Provenance pass:
    CONTAINS edges from a document to the typed node it mentioned. The target
    resolves by (id, type), so a name shared by two types links to the node
    of the type the document actually produced.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from docgraph.types import (
    CONTAINS_TYPE,
    EntityMapping,
    GraphData,
    GraphNode,
    GraphRelationship,
)

logger = logging.getLogger(__name__)


def _contains_edge(
    document_id: str,
    node: GraphNode,
    target: str | None = None,
) -> GraphRelationship:
    """CONTAINS edge from a document to an entity node (target defaults to node.id)."""
    return GraphRelationship(
        source=document_id,
        target=target if target is not None else node.id,
        type=CONTAINS_TYPE,
        properties={"description": f"Document contains this {node.type.lower()}"},
    )


def consolidate_graph(
    nodes: Sequence[GraphNode],
    relationships: Sequence[GraphRelationship],
    mapping: EntityMapping | None = None,
    *,
    provenance: Sequence[tuple[str, GraphNode]] = (),
) -> GraphData:
    """
    Build the final graph from raw extraction output.

    Args:
        nodes: Raw nodes, in extraction order
        relationships: Raw relationships, in extraction order
        mapping: Per-type variant -> canonical mapping (None = identity)
        provenance: (document id, extracted node) pairs, emitted as CONTAINS
            edges after `relationships`

    Returns:
        GraphData with unique node ids and clean, unique edges
    """
    mapping = mapping or EntityMapping()

    final_nodes: dict[str, GraphNode] = {}
    resolved_ids: dict[str, str] = {}

    for node in nodes:
        canonical_id = mapping.canonical(node.id, node.type)
        resolved_ids.setdefault(node.id, canonical_id)
        if canonical_id not in final_nodes:
            final_nodes[canonical_id] = node.model_copy(
                update={"id": canonical_id, "properties": dict(node.properties)}
            )

    final_relationships: list[GraphRelationship] = []
    seen_triples: set[tuple[str, str, str]] = set()
    dropped_self_loops = 0
    dropped_dangling = 0

    def emit(rel: GraphRelationship, source: str, target: str) -> None:
        nonlocal dropped_self_loops, dropped_dangling
        if source == target:
            dropped_self_loops += 1
            return
        if source not in final_nodes or target not in final_nodes:
            dropped_dangling += 1
            return

        triple = (source, rel.type, target)
        if triple in seen_triples:
            return
        seen_triples.add(triple)

        final_relationships.append(
            rel.model_copy(
                update={"source": source, "target": target, "properties": dict(rel.properties)}
            )
        )

    for rel in relationships:
        emit(
            rel,
            resolved_ids.get(rel.source, rel.source),
            resolved_ids.get(rel.target, rel.target),
        )

    for document_id, node in provenance:
        target = mapping.canonical(node.id, node.type)
        emit(
            _contains_edge(document_id, node, target),
            resolved_ids.get(document_id, document_id),
            target,
        )

    if dropped_self_loops or dropped_dangling:
        logger.debug(
            "Dropped %d self-loops and %d dangling relationships",
            dropped_self_loops,
            dropped_dangling,
        )

    return GraphData(nodes=list(final_nodes.values()), relationships=final_relationships)
