"""
Web Interface

FastAPI application streaming graph construction progress as NDJSON.
"""

from docgraph.web.server import create_app, serve

__all__ = ["create_app", "serve"]
