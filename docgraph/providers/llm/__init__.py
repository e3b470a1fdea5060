"""
LLM Providers

Concrete LLMProvider implementations, loaded lazily so optional client
libraries are only imported when a provider is actually built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docgraph.config.settings import GraphConfig
    from docgraph.providers.base import LLMProvider


def create_llm_provider(
    config: "GraphConfig",
    *,
    fast: bool = False,
) -> "LLMProvider":
    """
    Build the configured LLM provider.

    Args:
        config: Configuration carrying provider name, model names and API keys
        fast: Use the fast model tier (vocabulary suggestions)

    Raises:
        ValueError: If the provider name is not supported
    """
    model = config.llm_model_fast if fast else config.llm_model
    if config.llm_provider == "openai":
        from docgraph.providers.llm.openai import OpenAILLMProvider
        return OpenAILLMProvider(api_key=config.openai_api_key, model=model)
    raise ValueError(f"Unsupported LLM provider: {config.llm_provider}")


def __getattr__(name: str):
    if name == "OpenAILLMProvider":
        from docgraph.providers.llm.openai import OpenAILLMProvider
        return OpenAILLMProvider
    raise AttributeError(f"module 'docgraph.providers.llm' has no attribute {name!r}")


__all__ = ["OpenAILLMProvider", "create_llm_provider"]
