"""Shared fixtures: a scripted fake LLM provider."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from docgraph.types import (
    EntityMerging,
    ExtractedEntity,
    ExtractedRelationship,
    KnowledgeGraphExtraction,
    MergedEntity,
    VocabularySuggestions,
)


def entities(*specs: tuple[str, str]) -> list[ExtractedEntity]:
    return [ExtractedEntity(name=name, type=type_, description=f"{name} desc") for name, type_ in specs]


def relationships(*specs: tuple[str, str, str]) -> list[ExtractedRelationship]:
    return [
        ExtractedRelationship(source=s, type=t, target=o, description=f"{s} {t} {o}")
        for s, t, o in specs
    ]


def merging(*clusters: tuple[str, list[str]]) -> EntityMerging:
    return EntityMerging(
        merged_entities=[
            MergedEntity(canonical_name=canonical, variations=variations)
            for canonical, variations in clusters
        ],
        reasoning="test",
    )


def make_llm(
    *,
    extract: Callable[[str], Any] | None = None,
    merge: Callable[[str], Any] | None = None,
    suggest: Any = None,
) -> MagicMock:
    """
    Build a fake LLMProvider.

    `extract` and `merge` receive the user prompt and return the parsed
    result (or raise). Unscripted calls return empty results.
    """

    async def generate_structured(prompt: str, schema: type, *, system: str | None = None):
        if schema is KnowledgeGraphExtraction:
            return extract(prompt) if extract else KnowledgeGraphExtraction()
        if schema is EntityMerging:
            return merge(prompt) if merge else EntityMerging()
        if schema is VocabularySuggestions:
            return suggest
        raise AssertionError(f"Unexpected schema {schema}")

    llm = MagicMock()
    llm.model_name = "fake-model"
    llm.generate_structured = AsyncMock(side_effect=generate_structured)
    return llm


def calls_for(llm: MagicMock, schema: type) -> list:
    """Recorded generate_structured calls for one schema."""
    return [c for c in llm.generate_structured.call_args_list if c.args[1] is schema]


@pytest.fixture
def docgraph_env(monkeypatch):
    """Clear DOCGRAPH_* and OPENAI_API_KEY so config defaults are deterministic."""
    import os

    for key in list(os.environ):
        if key.startswith("DOCGRAPH_") or key == "OPENAI_API_KEY":
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
