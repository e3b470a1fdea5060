"""
Public API

Modules:
    builder: GraphBuilder (streaming and non-streaming graph construction)
    convenience: One-call helpers for scripts and REPL usage
"""

from docgraph.api.builder import GraphBuilder, InputValidationError, validate_inputs
from docgraph.api.convenience import build_graph, suggest_vocabulary

__all__ = [
    "GraphBuilder",
    "InputValidationError",
    "validate_inputs",
    "build_graph",
    "suggest_vocabulary",
]
