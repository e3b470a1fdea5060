"""
GraphBuilder - Primary Entry Point

Turns uploaded documents into a knowledge graph, either as a stream of
progress events or as a single result.

Stream statuses, in order:
    starting    (0)       inputs accepted
    loading     (5)       files queued for text extraction
    extracting  (10-35)   one event per file
    processing  (35-100)  pipeline progress scaled into the remaining range
    complete    (100)     final graph under `data`
    error                 terminal failure under `error`

Every stream ends with exactly one `complete` or `error` event. Errors are
never raised out of `stream()` or `build()`.

Example:
    >>> builder = GraphBuilder()
    >>> async for event in builder.stream(
    ...     [DocumentPayload.from_path("report.pdf")],
    ...     ["ORGANIZATION", "PERSON"],
    ...     ["WORKS_FOR"],
    ... ):
    ...     print(event.progress, event.message)

    # Or non-streaming
    >>> result = builder.build_sync(payloads, entity_types, relationship_types)
    >>> result.data.nodes
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING, Any

from docgraph.ingestion.pipeline import ProcessingCancelledError, process_documents_to_graph
from docgraph.ingestion.suggestions import suggest_vocabulary
from docgraph.ingestion.text import TextExtractionError, extract_document_text
from docgraph.types import (
    DocumentPayload,
    ProcessingDetails,
    ProcessingProgress,
    ProcessingResult,
    VocabularySuggestions,
)
from docgraph.utils.cost_telemetry import (
    SUGGESTIONS_STAGE,
    CostCollector,
    telemetry_collector,
    telemetry_stage,
)
from docgraph.utils.text import normalize_vocabulary

if TYPE_CHECKING:
    from docgraph.config.settings import GraphConfig
    from docgraph.providers.base import LLMProvider

logger = logging.getLogger(__name__)

_LOADING_PROGRESS = 5.0
_EXTRACTING_START = 10.0
_EXTRACTING_SPAN = 25.0
_PROCESSING_START = 35.0
_PROCESSING_SPAN = 65.0


class InputValidationError(ValueError):
    """Raised when a request is rejected before any processing starts."""


def validate_inputs(
    documents: Sequence[DocumentPayload],
    entity_types: Sequence[str],
    relationship_types: Sequence[str],
) -> tuple[list[str], list[str]]:
    """
    Check a request and normalize its vocabularies.

    Returns:
        (entity_types, relationship_types) normalized and deduplicated

    Raises:
        InputValidationError: No files, or an empty vocabulary
    """
    if not documents:
        raise InputValidationError("No files provided")
    entities = normalize_vocabulary(entity_types)
    relationships = normalize_vocabulary(relationship_types, relationship=True)
    if not entities:
        raise InputValidationError("Select at least one entity type")
    if not relationships:
        raise InputValidationError("Select at least one relationship type")
    return entities, relationships


class GraphBuilder:
    """
    Builds knowledge graphs from documents.

    Args:
        config: Optional configuration. Uses defaults if not provided.
        llm: Provider for extraction and merging (built from config if None)
        suggestion_llm: Provider for vocabulary suggestions (fast tier from
            config if None)
    """

    def __init__(
        self,
        config: "GraphConfig | None" = None,
        *,
        llm: "LLMProvider | None" = None,
        suggestion_llm: "LLMProvider | None" = None,
    ) -> None:
        if config is None:
            from docgraph.config import GraphConfig
            config = GraphConfig()
        self._config = config
        self._llm = llm
        self._suggestion_llm = suggestion_llm

    @property
    def config(self) -> "GraphConfig":
        """Current configuration."""
        return self._config

    def _get_llm(self) -> "LLMProvider":
        if self._llm is None:
            from docgraph.providers.llm import create_llm_provider
            self._llm = create_llm_provider(self._config)
        return self._llm

    def _get_suggestion_llm(self) -> "LLMProvider":
        if self._suggestion_llm is None:
            from docgraph.providers.llm import create_llm_provider
            self._suggestion_llm = create_llm_provider(self._config, fast=True)
        return self._suggestion_llm

    def _new_collector(self) -> CostCollector | None:
        if not self._config.cost_debug:
            return None
        return CostCollector(warn_threshold_usd=self._config.cost_debug_warn_threshold_usd)

    # === Streaming ===

    async def stream(
        self,
        documents: Sequence[DocumentPayload],
        entity_types: Sequence[str],
        relationship_types: Sequence[str],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[ProcessingProgress]:
        """
        Process documents and yield progress events.

        Closing the iterator early sets the cancel event: chunks already
        sent to the LLM finish, nothing new is scheduled.

        Args:
            documents: Uploaded documents, in order
            entity_types: Entity type vocabulary
            relationship_types: Relationship type vocabulary
            cancel_event: Optional external cancellation signal

        Yields:
            ProcessingProgress events ending with `complete` or `error`
        """
        cancel_event = cancel_event or asyncio.Event()
        last_progress = 0.0

        def error_event(message: str) -> ProcessingProgress:
            return ProcessingProgress(
                status="error",
                progress=last_progress,
                message=message,
                error=message,
            )

        try:
            entities, relationships = validate_inputs(documents, entity_types, relationship_types)
        except InputValidationError as e:
            yield error_event(str(e))
            return

        total_files = len(documents)
        pipeline_task: asyncio.Task[Any] | None = None
        collector = self._new_collector()

        try:
            yield ProcessingProgress(
                status="starting",
                progress=0.0,
                message="Initializing processing...",
                total_files=total_files,
            )
            last_progress = _LOADING_PROGRESS
            yield ProcessingProgress(
                status="loading",
                progress=_LOADING_PROGRESS,
                message=f"Loading {total_files} file(s)...",
                total_files=total_files,
            )

            # Text extraction, one file at a time
            texts: list[str] = []
            names: list[str] = []
            skipped: list[str] = []
            for index, document in enumerate(documents):
                if cancel_event.is_set():
                    raise ProcessingCancelledError()
                last_progress = _EXTRACTING_START + index / total_files * _EXTRACTING_SPAN
                message = f"Extracting text from {document.name}..."
                if skipped:
                    message += f" (skipped: {', '.join(skipped)})"
                yield ProcessingProgress(
                    status="extracting",
                    progress=last_progress,
                    message=message,
                    current_file=document.name,
                    file_index=index + 1,
                    total_files=total_files,
                )
                try:
                    text = await asyncio.to_thread(extract_document_text, document)
                except TextExtractionError as e:
                    if not self._config.skip_failed_files:
                        yield error_event(str(e))
                        return
                    logger.warning("Skipping %s: %s", document.name, e.reason)
                    skipped.append(document.name)
                    continue
                texts.append(text)
                names.append(document.display_name)

            if not texts:
                yield error_event("No text could be extracted from the provided files")
                return

            # Pipeline, run as a task so its progress can be streamed
            queue: asyncio.Queue[ProcessingProgress] = asyncio.Queue()

            def on_progress(
                percent: float,
                message: str,
                details: ProcessingDetails | None,
            ) -> None:
                queue.put_nowait(
                    ProcessingProgress(
                        status="processing",
                        progress=_PROCESSING_START + percent * _PROCESSING_SPAN / 100,
                        message=message,
                        total_files=total_files,
                        details=details,
                    )
                )

            last_progress = _PROCESSING_START
            yield ProcessingProgress(
                status="processing",
                progress=_PROCESSING_START,
                message=f"Starting entity extraction on {len(texts)} document(s)...",
                total_files=total_files,
            )

            with telemetry_collector(collector):
                pipeline_task = asyncio.create_task(
                    process_documents_to_graph(
                        texts,
                        entities,
                        relationships,
                        self._get_llm(),
                        document_names=names,
                        progress_callback=on_progress,
                        chunk_max_chars=self._config.chunk_max_chars,
                        concurrency=self._config.extraction_concurrency,
                        throttle_seconds=self._config.throttle_seconds,
                        extraction_share=self._config.extraction_progress_share,
                        cancel_event=cancel_event,
                    )
                )

            while True:
                queue_get = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait(
                    {queue_get, pipeline_task},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if queue_get in done:
                    event = queue_get.result()
                    last_progress = max(last_progress, event.progress)
                    event.progress = last_progress
                    yield event
                    continue
                queue_get.cancel()
                break

            # Drain reports emitted right before the task finished
            while not queue.empty():
                event = queue.get_nowait()
                last_progress = max(last_progress, event.progress)
                event.progress = last_progress
                yield event

            graph = pipeline_task.result()
            yield ProcessingProgress(
                status="complete",
                progress=100.0,
                message="Processing complete",
                total_files=total_files,
                details=ProcessingDetails(
                    entities=len(graph.nodes),
                    relationships=len(graph.relationships),
                    total_documents=len(texts),
                ),
                data=graph,
                cost_debug=collector.summary() if collector is not None else None,
            )
        except (GeneratorExit, asyncio.CancelledError):
            cancel_event.set()
            raise
        except ProcessingCancelledError as e:
            logger.info("Processing cancelled")
            yield error_event(str(e))
        except Exception as e:
            logger.exception("Document processing failed")
            yield error_event(str(e) or type(e).__name__)
        finally:
            if pipeline_task is not None and not pipeline_task.done():
                cancel_event.set()
                pipeline_task.add_done_callback(_log_abandoned_task)

    # === Non-streaming ===

    async def build(
        self,
        documents: Sequence[DocumentPayload],
        entity_types: Sequence[str],
        relationship_types: Sequence[str],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ProcessingResult:
        """
        Process documents and return the final graph or an error message.

        Never raises for pipeline errors.
        """
        final: ProcessingProgress | None = None
        async for event in self.stream(
            documents,
            entity_types,
            relationship_types,
            cancel_event=cancel_event,
        ):
            if event.is_terminal:
                final = event

        if final is None or final.status == "error":
            error = final.error if final is not None else "Processing ended without a result"
            return ProcessingResult(success=False, error=error)
        return ProcessingResult(success=True, data=final.data, cost_debug=final.cost_debug)

    def build_sync(
        self,
        documents: Sequence[DocumentPayload],
        entity_types: Sequence[str],
        relationship_types: Sequence[str],
    ) -> ProcessingResult:
        """Synchronous version of build()."""
        return asyncio.run(self.build(documents, entity_types, relationship_types))

    # === Suggestions ===

    async def suggest(self, research_focus: str) -> VocabularySuggestions:
        """
        Suggest entity and relationship types for a research focus.

        Raises:
            ValueError: If research_focus is blank or the response is unusable
        """
        with telemetry_stage(SUGGESTIONS_STAGE):
            return await suggest_vocabulary(research_focus, self._get_suggestion_llm())

    def suggest_sync(self, research_focus: str) -> VocabularySuggestions:
        """Synchronous version of suggest()."""
        return asyncio.run(self.suggest(research_focus))


def _log_abandoned_task(task: asyncio.Task[Any]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None and not isinstance(exc, ProcessingCancelledError):
        logger.warning("Abandoned processing task failed: %s", exc)
