"""
Providers

LLM provider interface and implementations.
"""

from docgraph.providers.base import LLMProvider

__all__ = ["LLMProvider", "create_llm_provider"]


def __getattr__(name: str):
    if name == "create_llm_provider":
        from docgraph.providers.llm import create_llm_provider
        return create_llm_provider
    raise AttributeError(f"module 'docgraph.providers' has no attribute {name!r}")
