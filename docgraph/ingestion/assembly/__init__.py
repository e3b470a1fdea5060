"""
Graph Assembly

Deterministic consolidation of raw extraction output into the final graph.

Modules:
    consolidator: Canonical id rewrite, dedup, self-loop and dangling edge removal
"""

from docgraph.ingestion.assembly.consolidator import consolidate_graph

__all__ = ["consolidate_graph"]
