"""
HTTP Server

FastAPI app exposing the graph builder to browser clients.

Endpoints:
    POST /api/process-documents-stream  NDJSON progress stream
    POST /api/process-documents         Single JSON ProcessingResult
    POST /api/suggestions               Vocabulary suggestions
    GET  /api/health                    Liveness

The processing endpoints take multipart `files` and the vocabularies as JSON
arrays in the `X-Selected-Entities` and `X-Selected-Relationships` headers.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, File, Header, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from docgraph import __version__
from docgraph.api.builder import GraphBuilder
from docgraph.config import GraphConfig
from docgraph.types import DocumentPayload

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


class SuggestionRequest(BaseModel):
    research_focus: str = Field(..., alias="researchFocus")

    model_config = ConfigDict(populate_by_name=True)


def _parse_vocabulary_header(value: str | None, header: str) -> list[str]:
    if value is None:
        raise HTTPException(status_code=400, detail="Missing entity or relationship headers")
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"{header} is not valid JSON") from e
    if not isinstance(parsed, list) or not all(isinstance(v, str) for v in parsed):
        raise HTTPException(status_code=400, detail=f"{header} must be a JSON array of strings")
    return parsed


async def _read_uploads(files: list[UploadFile]) -> list[DocumentPayload]:
    documents: list[DocumentPayload] = []
    for upload in files:
        name = Path(upload.filename or "upload.bin").name
        documents.append(DocumentPayload(name=name, content_bytes=await upload.read()))
    return documents


def create_app(
    *,
    config: GraphConfig | None = None,
    builder: GraphBuilder | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Configuration (defaults read from environment)
        builder: Pre-built GraphBuilder (tests inject one with a fake LLM)
    """
    config = config or GraphConfig()
    builder = builder or GraphBuilder(config)

    app = FastAPI(title="DocGraph", version=__version__)

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/api/process-documents-stream")
    async def process_documents_stream(
        files: list[UploadFile] = File(default=[]),
        selected_entities: str | None = Header(default=None, alias="X-Selected-Entities"),
        selected_relationships: str | None = Header(
            default=None, alias="X-Selected-Relationships"
        ),
    ) -> StreamingResponse:
        entity_types = _parse_vocabulary_header(selected_entities, "X-Selected-Entities")
        relationship_types = _parse_vocabulary_header(
            selected_relationships, "X-Selected-Relationships"
        )
        documents = await _read_uploads(files)
        cancel_event = asyncio.Event()

        async def ndjson() -> AsyncIterator[str]:
            try:
                async for event in builder.stream(
                    documents,
                    entity_types,
                    relationship_types,
                    cancel_event=cancel_event,
                ):
                    yield event.to_json_line()
            finally:
                # Stop scheduling work once the client is gone
                cancel_event.set()

        return StreamingResponse(ndjson(), media_type=NDJSON_MEDIA_TYPE)

    @app.post("/api/process-documents")
    async def process_documents(
        files: list[UploadFile] = File(default=[]),
        selected_entities: str | None = Header(default=None, alias="X-Selected-Entities"),
        selected_relationships: str | None = Header(
            default=None, alias="X-Selected-Relationships"
        ),
    ) -> JSONResponse:
        entity_types = _parse_vocabulary_header(selected_entities, "X-Selected-Entities")
        relationship_types = _parse_vocabulary_header(
            selected_relationships, "X-Selected-Relationships"
        )
        documents = await _read_uploads(files)
        result = await builder.build(documents, entity_types, relationship_types)
        return JSONResponse(result.model_dump(mode="json", by_alias=True, exclude_none=True))

    @app.post("/api/suggestions")
    async def suggestions(request: SuggestionRequest) -> JSONResponse:
        if not request.research_focus.strip():
            raise HTTPException(status_code=400, detail="researchFocus must not be empty")
        try:
            result = await builder.suggest(request.research_focus)
        except ValueError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        except Exception as e:
            logger.exception("Vocabulary suggestion failed")
            raise HTTPException(status_code=502, detail="Failed to generate suggestions") from e
        return JSONResponse(result.model_dump(mode="json"))

    return app


def serve(config: GraphConfig | None = None, *, host: str | None = None, port: int | None = None) -> None:
    """Run the app with uvicorn."""
    import uvicorn

    load_dotenv()
    config = config or GraphConfig()
    uvicorn.run(
        create_app(config=config),
        host=host or config.server_host,
        port=port or config.server_port,
    )
