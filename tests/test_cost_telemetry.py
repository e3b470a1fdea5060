"""Tests for request-scoped cost telemetry and model pricing."""

from docgraph.config.pricing import estimate_llm_cost_usd, price_for
from docgraph.types.results import CostUsageRecord
from docgraph.utils.cost_telemetry import (
    CostCollector,
    current_stage,
    current_unit,
    record_usage,
    telemetry_collector,
    telemetry_stage,
    telemetry_unit,
)


def _record(stage: str, cost: float, unit: str | None = None, **kwargs) -> CostUsageRecord:
    return CostUsageRecord(
        provider="openai",
        model=kwargs.pop("model", "gpt-4o"),
        operation="generate_structured",
        stage=stage,
        unit=unit,
        input_tokens=100,
        output_tokens=20,
        total_tokens=120,
        estimated_cost_usd=cost,
        latency_ms=15,
        **kwargs,
    )


class TestCostCollector:
    """Tests for CostCollector.summary."""

    def test_aggregates_by_stage_in_pipeline_order(self):
        """Stages follow pipeline order regardless of cost."""
        collector = CostCollector()
        collector.add(_record("suggestions", 0.5))
        collector.add(_record("resolution", 0.001, "ORGANIZATION"))
        collector.add(_record("extraction", 0.002, "chunk 1"))
        collector.add(_record("extraction", 0.002, "chunk 2"))

        report = collector.summary()

        assert report.enabled is True
        assert report.breakdown.total_calls == 4
        assert report.breakdown.total_tokens == 480
        assert [s.stage for s in report.breakdown.by_stage] == [
            "extraction",
            "resolution",
            "suggestions",
        ]
        assert report.breakdown.by_stage[0].calls == 2

    def test_counts_distinct_units(self):
        """Units count distinct chunks or type groups, not calls."""
        collector = CostCollector()
        collector.add(_record("extraction", 0.001, "chunk 1"))
        collector.add(_record("extraction", 0.001, "chunk 1"))
        collector.add(_record("extraction", 0.001, "chunk 2"))
        collector.add(_record("resolution", 0.001, "PERSON"))
        collector.add(_record("suggestions", 0.001))

        stages = {s.stage: s for s in collector.summary().breakdown.by_stage}

        assert (stages["extraction"].calls, stages["extraction"].units) == (3, 2)
        assert stages["resolution"].units == 1
        assert stages["suggestions"].units == 0

    def test_warns_on_threshold(self):
        """A total at or above the threshold adds a warning."""
        collector = CostCollector(warn_threshold_usd=0.0005)
        collector.add(_record("extraction", 0.001))

        report = collector.summary()

        assert len(report.warnings) == 1
        assert "exceeded threshold" in report.warnings[0]

    def test_one_warning_per_unpriced_model(self):
        """Unpriced calls produce one warning per model naming its stages."""
        collector = CostCollector()
        for stage in ("extraction", "resolution", "extraction"):
            collector.add(
                _record(stage, 0.0, model="mystery", metadata={"pricing_found": False})
            )

        report = collector.summary()

        assert report.warnings == [
            "Missing pricing for model 'mystery' in stages extraction, resolution. "
            "Cost shown as 0.0 for those calls."
        ]


class TestContext:
    """Tests for contextvar labels."""

    def test_record_usage_only_with_active_collector(self):
        """record_usage is a no-op outside telemetry_collector."""
        collector = CostCollector()
        record_usage(_record("extraction", 0.1))

        with telemetry_collector(collector):
            record_usage(_record("extraction", 0.1))

        assert len(collector.records) == 1

    def test_stage_and_unit_nesting(self):
        """Stage and unit labels nest and reset."""
        assert (current_stage(), current_unit()) == ("unknown", None)
        with telemetry_stage("extraction"), telemetry_unit("chunk 1"):
            assert (current_stage(), current_unit()) == ("extraction", "chunk 1")
            with telemetry_stage("resolution"), telemetry_unit("PERSON"):
                assert (current_stage(), current_unit()) == ("resolution", "PERSON")
            assert (current_stage(), current_unit()) == ("extraction", "chunk 1")
        assert (current_stage(), current_unit()) == ("unknown", None)


class TestPricing:
    """Tests for model pricing lookup."""

    def test_known_and_unknown_models(self):
        """Known models are priced; unknown models cost 0 and report unpriced."""
        cost, priced = estimate_llm_cost_usd("gpt-4o", input_tokens=1_000_000, output_tokens=0)
        assert priced is True
        assert cost == 2.5

        cost, priced = estimate_llm_cost_usd("mystery", input_tokens=1000, output_tokens=1000)
        assert priced is False
        assert cost == 0.0

    def test_snapshots_resolve_to_longest_family(self):
        """Dated snapshots and fine-tunes use their family price."""
        assert price_for("gpt-4o-2024-08-06") == price_for("gpt-4o")
        assert price_for("gpt-4o-mini-2024-07-18") == price_for("gpt-4o-mini")
        assert price_for("ft:gpt-4.1-mini:acme::abc123") == price_for("gpt-4.1-mini")
        assert price_for("GPT-4.1") == price_for("gpt-4.1")
        assert price_for("gpt-4") is None
        assert price_for("gpt-4omni") is None
