"""
Utility Functions

Helper functions used throughout the package.

Modules:
    cost_telemetry: Request-scoped LLM usage and cost collection
    token_count: tiktoken-based token estimates
    text: Vocabulary and entity name normalization
"""

from docgraph.utils.cost_telemetry import (
    CostCollector,
    telemetry_collector,
    telemetry_stage,
    telemetry_unit,
)
from docgraph.utils.text import (
    normalize_entity_type,
    normalize_relationship_type,
    normalize_vocabulary,
    strip_entity_type_suffix,
)

__all__ = [
    "CostCollector",
    "telemetry_collector",
    "telemetry_stage",
    "telemetry_unit",
    "normalize_entity_type",
    "normalize_relationship_type",
    "normalize_vocabulary",
    "strip_entity_type_suffix",
]
