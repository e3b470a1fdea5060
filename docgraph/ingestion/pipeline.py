"""
Document-to-Graph Pipeline

Orchestrates the full extraction flow for a batch of document texts:

    1. Document Nodes: one DOCUMENT node per input, before any LLM call
    2. Chunking: sentence-aligned chunks per document
    3. Extraction: one structured LLM call per chunk; every extracted entity
       is remembered with the document whose chunk produced it
    4. Resolution: per-type LLM merging of name variants
    5. Consolidation: canonical ids, dedup, self-loop and dangling edge
       removal, CONTAINS edges from each document to its typed entities

Progress is reported through an injected callback as
(percent, message, details). Reported values never decrease and the last
report of a successful run is 100.

Progress schedule (defaults):
    0       document nodes created
    0-70    chunks extracted (proportional)
    75      resolution started
    75-90   type groups merged (proportional)
    90      consolidation
    100     complete

Example:
    >>> graph = await process_documents_to_graph(
    ...     [report_text],
    ...     ["ORGANIZATION", "PERSON"],
    ...     ["WORKS_FOR"],
    ...     llm,
    ...     document_names=["annual-report"],
    ...     progress_callback=lambda pct, msg, details: print(pct, msg),
    ... )
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from docgraph.ingestion.assembly import consolidate_graph
from docgraph.ingestion.chunking import DEFAULT_MAX_CHARS, chunk_text
from docgraph.ingestion.extraction import extract_from_chunks
from docgraph.ingestion.resolution import resolve_entities
from docgraph.types import (
    DOCUMENT_TYPE,
    ChunkExtraction,
    GraphData,
    GraphNode,
    GraphRelationship,
    ProcessingDetails,
)
from docgraph.utils.cost_telemetry import EXTRACTION_STAGE, RESOLUTION_STAGE, telemetry_stage

if TYPE_CHECKING:
    from docgraph.providers.base import LLMProvider

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str, ProcessingDetails | None], None]

DEFAULT_EXTRACTION_SHARE = 70.0
_RESOLUTION_START = 75.0
_RESOLUTION_SPAN = 15.0
_CONSOLIDATION = 90.0


class ProcessingCancelledError(RuntimeError):
    """Raised when processing is abandoned through the cancel event."""

    def __init__(self, message: str = "Processing cancelled") -> None:
        super().__init__(message)


class _MonotonicProgress:
    """Wraps a progress callback so reported values never go backwards."""

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback
        self._last = 0.0

    @property
    def last(self) -> float:
        return self._last

    def __call__(
        self,
        percent: float,
        message: str,
        details: ProcessingDetails | None = None,
    ) -> None:
        self._last = max(self._last, min(100.0, max(0.0, percent)))
        if self._callback is not None:
            self._callback(self._last, message, details)


def _document_ids(count: int, names: Sequence[str] | None) -> list[str]:
    """Document node ids: given names (deduplicated) or 'Document N'."""
    ids: list[str] = []
    used: set[str] = set()
    for i in range(count):
        name = names[i].strip() if names is not None and i < len(names) and names[i] else ""
        base = name or f"Document {i + 1}"
        doc_id = base
        suffix = 2
        while doc_id in used:
            doc_id = f"{base} ({suffix})"
            suffix += 1
        used.add(doc_id)
        ids.append(doc_id)
    return ids


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ProcessingCancelledError()


async def process_documents_to_graph(
    document_texts: Sequence[str],
    allowed_entity_types: Sequence[str],
    allowed_relationship_types: Sequence[str],
    llm: "LLMProvider",
    *,
    document_names: Sequence[str] | None = None,
    progress_callback: ProgressCallback | None = None,
    chunk_max_chars: int = DEFAULT_MAX_CHARS,
    concurrency: int = 1,
    throttle_seconds: float = 0.0,
    extraction_share: float = DEFAULT_EXTRACTION_SHARE,
    cancel_event: asyncio.Event | None = None,
) -> GraphData:
    """
    Turn document texts into a consolidated knowledge graph.

    Args:
        document_texts: Plain text per document
        allowed_entity_types: Entity type vocabulary
        allowed_relationship_types: Relationship type vocabulary
        llm: LLM provider used for extraction and entity merging
        document_names: Optional names for the DOCUMENT nodes
        progress_callback: Receives (percent, message, details)
        chunk_max_chars: Character budget per chunk
        concurrency: Max concurrent chunk extractions
        throttle_seconds: Pause after every third chunk and between merge calls
        extraction_share: Progress range reserved for chunk extraction
        cancel_event: When set, no further chunks or merges are scheduled

    Returns:
        Consolidated GraphData

    Raises:
        ProcessingCancelledError: If cancel_event was set
    """
    if not 0 < extraction_share <= _RESOLUTION_START:
        raise ValueError(f"extraction_share must be in (0, {_RESOLUTION_START}]")

    report = _MonotonicProgress(progress_callback)
    total_documents = len(document_texts)

    # Step 1: document nodes
    document_ids = _document_ids(total_documents, document_names)
    document_nodes = [
        GraphNode(
            id=doc_id,
            type=DOCUMENT_TYPE,
            properties={
                "description": f"Source document with {len(text)} characters",
                "length": len(text),
            },
        )
        for doc_id, text in zip(document_ids, document_texts)
    ]
    report(
        0.0,
        f"Created {total_documents} document nodes",
        ProcessingDetails(total_documents=total_documents),
    )

    # Step 2: chunking
    work: list[tuple[int, int, str]] = []
    chunks_per_document: list[int] = []
    for doc_index, text in enumerate(document_texts):
        chunks = [c for c in chunk_text(text, chunk_max_chars) if c.strip()]
        chunks_per_document.append(len(chunks))
        work.extend((doc_index, chunk_index, chunk) for chunk_index, chunk in enumerate(chunks))
    total_chunks = len(work)
    logger.info("Processing %d documents in %d chunks", total_documents, total_chunks)

    # Step 3: extraction
    _check_cancelled(cancel_event)
    processed = 0
    entity_count = 0
    relationship_count = 0

    def on_chunk_done(index: int, result: ChunkExtraction) -> None:
        nonlocal processed, entity_count, relationship_count
        processed += 1
        entity_count += len(result.nodes)
        relationship_count += len(result.relationships)
        doc_index, chunk_index, _ = work[index]
        report(
            processed / total_chunks * extraction_share,
            f"Processing chunk {chunk_index + 1}/{chunks_per_document[doc_index]} "
            f"of {document_ids[doc_index]}",
            ProcessingDetails(
                entities=entity_count,
                relationships=relationship_count,
                document=doc_index + 1,
                chunk=chunk_index + 1,
                total_chunks=total_chunks,
                total_documents=total_documents,
            ),
        )

    with telemetry_stage(EXTRACTION_STAGE):
        results = await extract_from_chunks(
            [chunk for _, _, chunk in work],
            allowed_entity_types,
            allowed_relationship_types,
            llm,
            concurrency=concurrency,
            on_chunk_done=on_chunk_done,
            cancel_event=cancel_event,
            throttle_seconds=throttle_seconds,
        )
    _check_cancelled(cancel_event)

    # Stable merge in input order
    all_nodes: list[GraphNode] = list(document_nodes)
    all_relationships: list[GraphRelationship] = []
    provenance: list[tuple[str, GraphNode]] = []
    for (doc_index, _, _), result in zip(work, results):
        if result is None:
            continue
        all_nodes.extend(result.nodes)
        all_relationships.extend(result.relationships)
        provenance.extend((document_ids[doc_index], node) for node in result.nodes)

    entity_nodes = len(all_nodes) - len(document_nodes)
    relationship_total = len(all_relationships) + len(provenance)
    report(
        extraction_share,
        f"Extracted {entity_nodes} entities and {relationship_total} relationships",
        ProcessingDetails(
            entities=entity_nodes,
            relationships=relationship_total,
            total_chunks=total_chunks,
            total_documents=total_documents,
        ),
    )

    if entity_nodes == 0:
        logger.info("No entities extracted; returning document nodes only")
        report(
            100.0,
            "No entities found",
            ProcessingDetails(entities=0, relationships=0, total_documents=total_documents),
        )
        return GraphData(nodes=document_nodes, relationships=[])

    # Step 4: resolution
    _check_cancelled(cancel_event)
    report(_RESOLUTION_START, "Merging similar entities...")

    def on_resolution_progress(percent: float, message: str) -> None:
        report(_RESOLUTION_START + percent * _RESOLUTION_SPAN / 100, message)

    with telemetry_stage(RESOLUTION_STAGE):
        mapping = await resolve_entities(
            all_nodes,
            llm,
            progress_callback=on_resolution_progress,
            throttle_seconds=throttle_seconds,
        )
    _check_cancelled(cancel_event)

    # Step 5: consolidation
    report(_CONSOLIDATION, "Consolidating graph...")
    graph = consolidate_graph(all_nodes, all_relationships, mapping, provenance=provenance)

    logger.info(
        "Built graph with %d nodes and %d relationships (%d merges)",
        len(graph.nodes),
        len(graph.relationships),
        len(mapping),
    )
    report(
        100.0,
        f"Graph complete: {len(graph.nodes)} nodes, {len(graph.relationships)} relationships",
        ProcessingDetails(
            entities=len(graph.nodes),
            relationships=len(graph.relationships),
            total_documents=total_documents,
        ),
    )
    return graph
