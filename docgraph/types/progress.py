"""
Progress and Result Types

Status records streamed to callers while documents are processed, and the
non-streaming result envelope.

Field names serialize in camelCase (``currentFile``, ``totalChunks``...) so
the NDJSON stream matches what browser clients already consume.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from docgraph.types.graph import GraphData
from docgraph.types.results import CostDebugReport

ProcessingStatus = Literal[
    "starting",
    "loading",
    "extracting",
    "processing",
    "complete",
    "error",
]


class ProcessingDetails(BaseModel):
    """Counters attached to a progress report."""

    entities: int | None = None
    relationships: int | None = None
    document: int | None = None
    chunk: int | None = None
    total_chunks: int | None = Field(default=None, alias="totalChunks")
    total_documents: int | None = Field(default=None, alias="totalDocuments")

    model_config = ConfigDict(populate_by_name=True)


class ProcessingProgress(BaseModel):
    """
    One event of the progress stream.

    A stream always ends with exactly one terminal event: ``complete`` carrying
    the graph under ``data``, or ``error`` carrying ``error``.
    """

    status: ProcessingStatus
    progress: float = Field(default=0.0, ge=0.0, le=100.0)
    message: str = ""
    current_file: str | None = Field(default=None, alias="currentFile")
    file_index: int | None = Field(default=None, alias="fileIndex")
    total_files: int | None = Field(default=None, alias="totalFiles")
    details: ProcessingDetails | None = None
    data: GraphData | None = None
    error: str | None = None
    cost_debug: CostDebugReport | None = Field(default=None, alias="costDebug")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_terminal(self) -> bool:
        return self.status in ("complete", "error")

    def to_json_line(self) -> str:
        """Serialize as one NDJSON line (camelCase keys, unset fields omitted)."""
        return self.model_dump_json(by_alias=True, exclude_none=True) + "\n"


class ProcessingResult(BaseModel):
    """Outcome of the non-streaming path: a graph or an error message."""

    success: bool
    data: GraphData | None = None
    error: str | None = None
    cost_debug: CostDebugReport | None = Field(default=None, alias="costDebug")

    model_config = ConfigDict(populate_by_name=True)
