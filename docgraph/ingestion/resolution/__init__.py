"""
Entity Resolution

LLM-driven merging of entity name variants, strictly within one entity type.

Modules:
    entity_merge: Type grouping, per-group merge call, mapping assembly
"""

from docgraph.ingestion.resolution.entity_merge import group_names_by_type, resolve_entities

__all__ = ["group_names_by_type", "resolve_entities"]
