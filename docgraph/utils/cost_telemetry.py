"""
Request-scoped cost telemetry for graph builds.

A GraphBuilder request attaches a CostCollector through contextvars. The
pipeline labels its LLM calls with a stage and a unit of work:

    extraction   one unit per chunk ("chunk 3")
    resolution   one unit per entity type group ("ORGANIZATION")
    suggestions  no unit

The provider reads the active labels and emits one usage record per call, so
the report can say how many chunks or type groups were billed per stage.

Example:
    >>> collector = CostCollector()
    >>> with telemetry_collector(collector), telemetry_stage(EXTRACTION_STAGE):
    ...     graph = await process_documents_to_graph(...)
    >>> collector.summary().breakdown.by_stage[0].units
    12
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

from docgraph.config.pricing import PRICING_VERSION
from docgraph.types.results import (
    CostBreakdown,
    CostDebugReport,
    CostUsageRecord,
    StageCostBreakdown,
)

EXTRACTION_STAGE = "extraction"
RESOLUTION_STAGE = "resolution"
SUGGESTIONS_STAGE = "suggestions"
UNKNOWN_STAGE = "unknown"

# Report order; stages not listed sort after these
PIPELINE_STAGES = (EXTRACTION_STAGE, RESOLUTION_STAGE, SUGGESTIONS_STAGE)

_COLLECTOR: ContextVar[CostCollector | None] = ContextVar(
    "docgraph_cost_collector",
    default=None,
)
_STAGE: ContextVar[str] = ContextVar("docgraph_cost_stage", default=UNKNOWN_STAGE)
_UNIT: ContextVar[str | None] = ContextVar("docgraph_cost_unit", default=None)

_V = TypeVar("_V")


def _stage_rank(stage: str) -> int:
    try:
        return PIPELINE_STAGES.index(stage)
    except ValueError:
        return len(PIPELINE_STAGES)


def _add_usage(target: StageCostBreakdown, record: CostUsageRecord) -> None:
    target.calls += 1
    target.input_tokens += record.input_tokens
    target.output_tokens += record.output_tokens
    target.total_tokens += record.total_tokens
    target.estimated_cost_usd += record.estimated_cost_usd
    target.total_latency_ms += record.latency_ms


class CostCollector:
    """Accumulates LLM usage records for one graph build or suggestion request."""

    def __init__(self, *, warn_threshold_usd: float | None = None) -> None:
        self._records: list[CostUsageRecord] = []
        self._warn_threshold_usd = warn_threshold_usd

    def add(self, record: CostUsageRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> list[CostUsageRecord]:
        return list(self._records)

    def summary(self) -> CostDebugReport:
        """
        Aggregate the request's records.

        Stages appear in pipeline order. `units` counts the distinct chunks or
        type groups billed in a stage.
        """
        totals = StageCostBreakdown(stage="total")
        stages: dict[str, StageCostBreakdown] = {}
        units: dict[str, set[str]] = {}
        unpriced: dict[str, set[str]] = {}

        for record in self._records:
            _add_usage(totals, record)
            stage = stages.setdefault(record.stage, StageCostBreakdown(stage=record.stage))
            _add_usage(stage, record)
            if record.unit is not None:
                units.setdefault(record.stage, set()).add(record.unit)
            if record.metadata.get("pricing_found") is False:
                unpriced.setdefault(record.model, set()).add(record.stage)

        for stage, breakdown in stages.items():
            breakdown.units = len(units.get(stage, ()))

        warnings = [
            f"Missing pricing for model '{model}' in stages {', '.join(sorted(stage_names))}. "
            "Cost shown as 0.0 for those calls."
            for model, stage_names in sorted(unpriced.items())
        ]
        if (
            self._warn_threshold_usd is not None
            and totals.estimated_cost_usd >= self._warn_threshold_usd
        ):
            warnings.append(
                f"Estimated request cost ${totals.estimated_cost_usd:.6f} exceeded threshold "
                f"${self._warn_threshold_usd:.6f}."
            )

        return CostDebugReport(
            enabled=True,
            pricing_version=PRICING_VERSION,
            breakdown=CostBreakdown(
                total_calls=totals.calls,
                total_input_tokens=totals.input_tokens,
                total_output_tokens=totals.output_tokens,
                total_tokens=totals.total_tokens,
                total_estimated_cost_usd=totals.estimated_cost_usd,
                total_latency_ms=totals.total_latency_ms,
                by_stage=sorted(stages.values(), key=lambda s: (_stage_rank(s.stage), s.stage)),
            ),
            warnings=warnings,
        )


@contextmanager
def _bind(var: ContextVar[_V], value: _V) -> Iterator[None]:
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


def telemetry_collector(collector: CostCollector | None):
    """Attach a collector for the calls made inside the block."""
    return _bind(_COLLECTOR, collector)


def telemetry_stage(stage: str):
    """Label calls made inside the block with a pipeline stage."""
    return _bind(_STAGE, stage)


def telemetry_unit(unit: str | None):
    """Label calls made inside the block with a unit of work (chunk, type group)."""
    return _bind(_UNIT, unit)


def current_stage() -> str:
    return _STAGE.get()


def current_unit() -> str | None:
    return _UNIT.get()


def record_usage(record: CostUsageRecord) -> None:
    """Add record to the active collector, if any."""
    collector = _COLLECTOR.get()
    if collector is not None:
        collector.add(record)
