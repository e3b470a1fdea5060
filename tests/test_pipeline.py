"""Tests for the document-to-graph pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import calls_for, entities, make_llm, merging, relationships
from docgraph.ingestion.pipeline import ProcessingCancelledError, process_documents_to_graph
from docgraph.types import (
    CONTAINS_TYPE,
    DOCUMENT_TYPE,
    EntityMerging,
    KnowledgeGraphExtraction,
)
from docgraph.utils.cost_telemetry import current_stage, current_unit

TWO_CHUNK_TEXT = "First chunk text. Second chunk text."


def _openai_extraction(_prompt: str) -> KnowledgeGraphExtraction:
    return KnowledgeGraphExtraction(
        entities=entities(("OpenAI", "ORGANIZATION"), ("OpenAI Inc.", "ORGANIZATION")),
    )


class TestDocumentNodes:
    """Tests for DOCUMENT node synthesis."""

    @pytest.mark.asyncio
    async def test_document_node_properties(self):
        """Each document gets a node with description and length."""
        llm = make_llm()

        graph = await process_documents_to_graph(
            ["Hello there."], ["PERSON"], ["KNOWS"], llm, document_names=["greeting"]
        )

        assert len(graph.nodes) == 1
        node = graph.nodes[0]
        assert node.id == "greeting"
        assert node.type == DOCUMENT_TYPE
        assert node.properties == {
            "description": "Source document with 12 characters",
            "length": 12,
        }

    @pytest.mark.asyncio
    async def test_positional_and_duplicate_names(self):
        """Missing names fall back to 'Document N'; repeated names get a suffix."""
        llm = make_llm()

        graph = await process_documents_to_graph(
            ["A.", "B.", "C."],
            ["X"],
            ["Y"],
            llm,
            document_names=["report", "report"],
        )

        assert [n.id for n in graph.nodes] == ["report", "report (2)", "Document 3"]


class TestExtractionAssembly:
    """Tests for accumulation and CONTAINS edges."""

    @pytest.mark.asyncio
    async def test_variants_merge_to_one_node(self):
        """Two chunks extracting OpenAI and OpenAI Inc. yield one canonical node."""
        llm = make_llm(
            extract=_openai_extraction,
            merge=lambda _: merging(("OpenAI Inc.", ["OpenAI", "OpenAI Inc."])),
        )

        graph = await process_documents_to_graph(
            [TWO_CHUNK_TEXT],
            ["ORGANIZATION"],
            ["PARTNERS_WITH"],
            llm,
            document_names=["news"],
            chunk_max_chars=20,
        )

        orgs = [n for n in graph.nodes if n.type == "ORGANIZATION"]
        assert [n.id for n in orgs] == ["OpenAI Inc."]
        assert len(calls_for(llm, KnowledgeGraphExtraction)) == 2
        assert len(calls_for(llm, EntityMerging)) == 1
        assert [(r.source, r.type, r.target) for r in graph.relationships] == [
            ("news", CONTAINS_TYPE, "OpenAI Inc.")
        ]
        assert graph.relationships[0].properties["description"] == (
            "Document contains this organization"
        )

    @pytest.mark.asyncio
    async def test_contains_edges_link_each_document(self):
        """Entities are linked to the document whose chunk produced them."""

        def extract(prompt):
            name = "Alice" if "Alice" in prompt else "Bob"
            return KnowledgeGraphExtraction(entities=entities((name, "PERSON")))

        llm = make_llm(extract=extract)

        graph = await process_documents_to_graph(
            ["Alice writes.", "Bob reads."],
            ["PERSON"],
            ["KNOWS"],
            llm,
            document_names=["a", "b"],
        )

        assert [(r.source, r.target) for r in graph.relationships] == [
            ("a", "Alice"),
            ("b", "Bob"),
        ]

    @pytest.mark.asyncio
    async def test_contains_edges_respect_entity_type(self):
        """A name shared by two types links each document to the type it mentioned."""

        def extract(prompt):
            if "phone" in prompt:
                return KnowledgeGraphExtraction(entities=entities(("Apple", "PRODUCT")))
            return KnowledgeGraphExtraction(
                entities=entities(("Apple", "ORGANIZATION"), ("Apple Inc.", "ORGANIZATION"))
            )

        llm = make_llm(extract=extract, merge=lambda _: merging(("Apple Inc.", ["Apple"])))

        graph = await process_documents_to_graph(
            ["Apple is a phone.", "Apple Inc. filed results."],
            ["PRODUCT", "ORGANIZATION"],
            ["MAKES"],
            llm,
            document_names=["d1", "d2"],
        )

        assert [(n.id, n.type) for n in graph.nodes if n.type != DOCUMENT_TYPE] == [
            ("Apple", "PRODUCT"),
            ("Apple Inc.", "ORGANIZATION"),
        ]
        assert [(r.source, r.type, r.target) for r in graph.relationships] == [
            ("d1", CONTAINS_TYPE, "Apple"),
            ("d2", CONTAINS_TYPE, "Apple Inc."),
        ]

    @pytest.mark.asyncio
    async def test_extracted_relationships_survive(self):
        """Relationships between extracted entities appear in the output."""
        llm = make_llm(
            extract=lambda _: KnowledgeGraphExtraction(
                entities=entities(("Alice", "PERSON"), ("Acme", "ORG")),
                relationships=relationships(
                    ("Alice", "WORKS_FOR", "Acme"),
                    ("Alice", "WORKS_FOR", "Nowhere Ltd"),
                ),
            )
        )

        graph = await process_documents_to_graph(
            ["Alice works at Acme."], ["PERSON", "ORG"], ["WORKS_FOR"], llm
        )

        triples = {(r.source, r.type, r.target) for r in graph.relationships}
        assert ("Alice", "WORKS_FOR", "Acme") in triples
        assert not any(t[2] == "Nowhere Ltd" for t in triples)

    @pytest.mark.asyncio
    async def test_concurrency_preserves_order(self):
        """Parallel extraction produces the same graph as sequential."""

        async def generate_structured(prompt, schema, *, system=None):
            if schema is EntityMerging:
                return EntityMerging()
            body = prompt.rsplit("\n", 1)[-1]
            await asyncio.sleep(0.02 if body.startswith("One") else 0.0)
            return KnowledgeGraphExtraction(entities=entities((body.split()[0], "WORD")))

        def fake():
            llm = MagicMock()
            llm.generate_structured = AsyncMock(side_effect=generate_structured)
            return llm

        text = "One x. Two x. Three x. Four x."
        sequential = await process_documents_to_graph(
            [text], ["WORD"], ["R"], fake(), chunk_max_chars=5
        )
        parallel = await process_documents_to_graph(
            [text], ["WORD"], ["R"], fake(), chunk_max_chars=5, concurrency=4
        )

        assert [n.id for n in parallel.nodes] == [n.id for n in sequential.nodes]
        assert [n.id for n in parallel.nodes][1:] == ["One", "Two", "Three", "Four"]


class TestShortCircuit:
    """Tests for the no-entities path."""

    @pytest.mark.asyncio
    async def test_all_extractions_fail(self):
        """Failed extractions still yield the document node and 100% progress."""
        llm = MagicMock()
        llm.generate_structured = AsyncMock(side_effect=RuntimeError("boom"))
        reports: list[float] = []

        graph = await process_documents_to_graph(
            [TWO_CHUNK_TEXT],
            ["ORGANIZATION"],
            ["PARTNERS_WITH"],
            llm,
            progress_callback=lambda p, m, d: reports.append(p),
            chunk_max_chars=20,
        )

        assert [(n.id, n.type) for n in graph.nodes] == [("Document 1", DOCUMENT_TYPE)]
        assert graph.relationships == []
        assert reports[-1] == 100.0
        assert len(calls_for(llm, EntityMerging)) == 0


class TestProgress:
    """Tests for progress reporting."""

    @pytest.mark.asyncio
    async def test_monotonic_and_complete(self):
        """Progress starts at 0, never decreases and ends at 100."""
        llm = make_llm(
            extract=_openai_extraction,
            merge=lambda _: merging(("OpenAI Inc.", ["OpenAI"])),
        )
        reports: list[tuple[float, str, object]] = []

        await process_documents_to_graph(
            [TWO_CHUNK_TEXT, "Another doc."],
            ["ORGANIZATION"],
            ["PARTNERS_WITH"],
            llm,
            progress_callback=lambda p, m, d: reports.append((p, m, d)),
            chunk_max_chars=20,
        )

        values = [p for p, _, _ in reports]
        assert values[0] == 0.0
        assert values[-1] == 100.0
        assert values == sorted(values)
        assert 70.0 in values and 75.0 in values and 90.0 in values
        chunk_details = [d for _, m, d in reports if m.startswith("Processing chunk")]
        assert [d.chunk for d in chunk_details] == [1, 2, 1]
        assert chunk_details[-1].total_chunks == 3
        assert chunk_details[-1].document == 2

    @pytest.mark.asyncio
    async def test_telemetry_stages(self):
        """LLM calls carry stage labels and the chunk or type group they work on."""
        stages: list[tuple[str, str | None]] = []

        async def generate_structured(prompt, schema, *, system=None):
            stages.append((current_stage(), current_unit()))
            if schema is EntityMerging:
                return EntityMerging()
            return _openai_extraction(prompt)

        llm = MagicMock()
        llm.generate_structured = AsyncMock(side_effect=generate_structured)

        await process_documents_to_graph(["One sentence."], ["ORGANIZATION"], ["R"], llm)

        assert stages == [("extraction", "chunk 1"), ("resolution", "ORGANIZATION")]


class TestCancellation:
    """Tests for cooperative cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_before_start(self):
        """A pre-set cancel event stops the run before any LLM call."""
        llm = make_llm()
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(ProcessingCancelledError):
            await process_documents_to_graph(
                ["Some text."], ["A"], ["B"], llm, cancel_event=cancel
            )
        llm.generate_structured.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_mid_extraction(self):
        """No further chunks are scheduled once cancellation is observed."""
        llm = make_llm(extract=_openai_extraction)
        cancel = asyncio.Event()

        def on_progress(percent, message, details):
            if message.startswith("Processing chunk"):
                cancel.set()

        with pytest.raises(ProcessingCancelledError):
            await process_documents_to_graph(
                ["One. Two. Three."],
                ["ORGANIZATION"],
                ["B"],
                llm,
                progress_callback=on_progress,
                chunk_max_chars=4,
                cancel_event=cancel,
            )
        assert len(calls_for(llm, KnowledgeGraphExtraction)) == 1
        assert len(calls_for(llm, EntityMerging)) == 0

    @pytest.mark.asyncio
    async def test_rejects_bad_extraction_share(self):
        """Extraction share must leave room for resolution."""
        with pytest.raises(ValueError):
            await process_documents_to_graph(["A."], ["A"], ["B"], make_llm(), extraction_share=95)
