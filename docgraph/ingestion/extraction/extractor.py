"""
Chunk Extractor

Extracts typed entities and relationships from one text chunk with a single
structured LLM call, constrained to a caller-supplied vocabulary.

Failures never propagate: a transport error or an unparseable response
degrades to an empty ChunkExtraction and a logged warning, so one bad chunk
cannot abort a document batch.

Entity names are returned exactly as they appear in the text. Resolving
variants such as "Acme Corp." and "Acme Corporation" is left to the entity
resolver.

Example:
    >>> from docgraph.providers.llm import OpenAILLMProvider
    >>> llm = OpenAILLMProvider()
    >>> result = await extract_from_chunk(
    ...     "Ada Lovelace worked with Charles Babbage.",
    ...     ["PERSON"],
    ...     ["WORKED_WITH"],
    ...     llm,
    ... )
    >>> [n.id for n in result.nodes]
    ['Ada Lovelace', 'Charles Babbage']
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from docgraph.types import (
    ChunkExtraction,
    GraphNode,
    GraphRelationship,
    KnowledgeGraphExtraction,
)
from docgraph.utils.cost_telemetry import telemetry_unit

if TYPE_CHECKING:
    from docgraph.providers.base import LLMProvider

logger = logging.getLogger(__name__)

_THROTTLE_EVERY = 3


# -----------------------------------------------------------------------------
# System Prompts
# -----------------------------------------------------------------------------

_EXTRACTION_SYSTEM_PROMPT = """\
You are building a knowledge graph from document text.

## Your Task
Extract entities and the relationships between them from the text.

## Entity Types
{entity_types}

## Relationship Types
{relationship_types}

## Rules
- Only extract entities whose type is one of the Entity Types above
- Only extract relationships whose type is one of the Relationship Types above
- Use names exactly as they appear in the text
- Do not list the same entity or relationship twice
- Only extract relationships the text states explicitly
- Relationship source and target must be names of entities you extracted"""

_EXTRACTION_USER_TEMPLATE = """\
Extract entities and relationships from this text:

{content}"""


def _bullet_list(labels: Sequence[str]) -> str:
    return "\n".join(f"- {label}" for label in labels) or "- (any)"


# -----------------------------------------------------------------------------
# Core Extraction Functions
# -----------------------------------------------------------------------------


def _to_chunk_extraction(extraction: KnowledgeGraphExtraction) -> ChunkExtraction:
    """Convert LLM output to raw graph records, dropping blank names."""
    nodes = [
        GraphNode(
            id=entity.name.strip(),
            type=entity.type.strip(),
            properties={"description": entity.description},
        )
        for entity in extraction.entities
        if entity.name.strip()
    ]
    relationships = [
        GraphRelationship(
            source=rel.source.strip(),
            target=rel.target.strip(),
            type=rel.type.strip(),
            properties={"description": rel.description},
        )
        for rel in extraction.relationships
        if rel.source.strip() and rel.target.strip()
    ]
    return ChunkExtraction(nodes=nodes, relationships=relationships)


async def extract_from_chunk(
    text: str,
    allowed_entity_types: Sequence[str],
    allowed_relationship_types: Sequence[str],
    llm: "LLMProvider",
) -> ChunkExtraction:
    """
    Extract entities and relationships from a single chunk.

    Args:
        text: Chunk text
        allowed_entity_types: Entity type vocabulary
        allowed_relationship_types: Relationship type vocabulary
        llm: LLM provider for structured generation

    Returns:
        ChunkExtraction with raw nodes and relationships (empty on failure)
    """
    system = _EXTRACTION_SYSTEM_PROMPT.format(
        entity_types=_bullet_list(allowed_entity_types),
        relationship_types=_bullet_list(allowed_relationship_types),
    )
    prompt = _EXTRACTION_USER_TEMPLATE.format(content=text)

    try:
        extraction = await llm.generate_structured(
            prompt,
            KnowledgeGraphExtraction,
            system=system,
        )
    except Exception as e:
        logger.warning("Chunk extraction failed (%d chars): %s", len(text), e)
        return ChunkExtraction()

    if extraction is None:
        logger.warning("Chunk extraction returned no parsed result (%d chars)", len(text))
        return ChunkExtraction()

    return _to_chunk_extraction(extraction)


# -----------------------------------------------------------------------------
# Batch Extraction with Concurrency
# -----------------------------------------------------------------------------


async def extract_from_chunks(
    chunks: Sequence[str],
    allowed_entity_types: Sequence[str],
    allowed_relationship_types: Sequence[str],
    llm: "LLMProvider",
    *,
    concurrency: int = 1,
    on_chunk_done: Callable[[int, ChunkExtraction], None] | None = None,
    cancel_event: asyncio.Event | None = None,
    throttle_seconds: float = 0.0,
) -> list[ChunkExtraction | None]:
    """
    Extract from multiple chunks with bounded concurrency.

    Args:
        chunks: Chunk texts
        allowed_entity_types: Entity type vocabulary
        allowed_relationship_types: Relationship type vocabulary
        llm: LLM provider for structured generation
        concurrency: Max concurrent extractions (-1 for unlimited)
        on_chunk_done: Called with (index, result) as each chunk finishes
        cancel_event: When set, chunks not yet started are skipped
        throttle_seconds: Pause after every third completed chunk

    Returns:
        One entry per chunk in input order. Chunks skipped after cancellation
        are None.
    """
    if not chunks:
        return []

    semaphore = asyncio.Semaphore(concurrency if concurrency > 0 else len(chunks))
    completed = 0

    async def extract_one(index: int, chunk: str) -> ChunkExtraction | None:
        nonlocal completed
        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                return None
            with telemetry_unit(f"chunk {index + 1}"):
                result = await extract_from_chunk(
                    chunk,
                    allowed_entity_types,
                    allowed_relationship_types,
                    llm,
                )
            completed += 1
            if throttle_seconds > 0 and completed % _THROTTLE_EVERY == 0:
                await asyncio.sleep(throttle_seconds)
        if on_chunk_done is not None:
            on_chunk_done(index, result)
        return result

    tasks = [extract_one(i, chunk) for i, chunk in enumerate(chunks)]
    return list(await asyncio.gather(*tasks))
