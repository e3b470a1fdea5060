"""
Configuration System

Manages configuration for DocGraph with a layered approach.

Configuration Priority (highest to lowest):
    1. Programmatic (passed to GraphConfig())
    2. Environment variables (DOCGRAPH_* prefix)
    3. Config file (GraphConfig.from_file)
    4. Built-in defaults

Modules:
    settings: GraphConfig class
    pricing: Model pricing for cost telemetry
"""

from docgraph.config.settings import GraphConfig

__all__ = ["GraphConfig"]
