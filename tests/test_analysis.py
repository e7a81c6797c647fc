"""
Unit tests for derived cost analyses.

Tests comparison, optimization hints, growth projection and break-even search.
"""

import pytest

from agentcore_cost.core.analysis import (
    BREAK_EVEN_SEARCH_CEILING,
    batch_compute,
    compare_scenarios,
    find_break_even,
    project_growth,
    suggest_optimizations,
)
from agentcore_cost.core.catalog import BEDROCK_AGENTS_CATALOG
from agentcore_cost.core.pricing import compute_breakdown
from agentcore_cost.core.usage import UsageRecord, sanitize_usage_record, zero_usage


class TestBatchCompute:
    """Test batch pricing."""

    def test_each_scenario_priced_independently(self):
        results = batch_compute([
            {"runtime_cpu_hours": 100},
            {"runtime_cpu_hours": -5, "runtime_memory_gb_hours": 1000},
        ])

        assert len(results) == 2
        assert results[0].total_monthly_cost == 8.95
        # Negative CPU hours clamp to 0; 1000 * $0.00945 = $9.45
        assert results[1]["runtime_cpu_hours"] == 0.0
        assert results[1].total_monthly_cost == 9.45

    def test_empty_batch(self):
        assert batch_compute([]) == []


class TestCompareScenarios:
    """Test scenario comparison."""

    def test_more_expensive_comparison(self):
        result = compare_scenarios({"runtime_cpu_hours": 100}, {"runtime_cpu_hours": 200})

        # $17.90 - $8.95 = $8.95
        assert result.total_delta == 8.95
        assert result.per_field_delta["runtime_cpu_hours"] == 8.95
        assert result.per_field_delta["runtime_memory_gb_hours"] == 0.0
        assert result.percent_change == pytest.approx(100.0)
        assert result.is_more_expensive is True

    def test_cheaper_comparison(self):
        result = compare_scenarios({"runtime_cpu_hours": 200}, {"runtime_cpu_hours": 100})
        assert result.total_delta == -8.95
        assert result.percent_change == pytest.approx(-50.0)
        assert result.is_more_expensive is False

    def test_zero_baseline_percent_change(self):
        """Verify percent change is 0 when the baseline costs nothing."""
        result = compare_scenarios({}, {"runtime_cpu_hours": 100})
        assert result.percent_change == 0.0
        assert result.is_more_expensive is True

    def test_other_catalog(self):
        result = compare_scenarios(
            {"storage_gb": 10},
            {"storage_gb": 20},
            catalog=BEDROCK_AGENTS_CATALOG
        )
        assert result.total_delta == 1.0


class TestSuggestOptimizations:
    """Test optimization hints."""

    def test_no_usage_no_hints(self):
        assert suggest_optimizations(zero_usage()) == []

    def test_cpu_heavy_runtime(self):
        """Verify CPU-heavy usage triggers the CPU and category hints in order."""
        usage = sanitize_usage_record({"runtime_cpu_hours": 100})
        suggestions = suggest_optimizations(usage)

        assert len(suggestions) == 2
        assert suggestions[0].startswith("CPU costs are significantly higher than memory costs")
        assert suggestions[1] == (
            "Runtime accounts for more than 50% of your total bill. Focus optimization "
            "efforts on this service first."
        )

    def test_memory_heavy_runtime(self):
        usage = sanitize_usage_record({"runtime_cpu_hours": 1, "runtime_memory_gb_hours": 10_000})
        suggestions = suggest_optimizations(usage)
        assert suggestions[0].startswith("Memory costs are significantly higher than CPU costs")

    def test_gateway_patterns(self):
        """Verify search, indexing and identity hints."""
        usage = sanitize_usage_record({
            "gateway_api_invocations": 100,
            "gateway_search_api_invocations": 300,
            "gateway_tool_indexing": 2_000,
            "identity_token_requests": 500,
        })
        suggestions = suggest_optimizations(usage)

        assert any(s.startswith("High search API usage detected") for s in suggestions)
        assert any(s.startswith("High tool indexing volume detected") for s in suggestions)
        assert any(s.startswith("Identity token requests exceed gateway API calls") for s in suggestions)

    def test_memory_patterns(self):
        """Verify built-in storage and category hints for a memory workload."""
        usage = sanitize_usage_record({
            "memory_short_term_events": 100_000,
            "memory_long_term_storage_built_in": 10_000,
            "memory_long_term_retrievals": 20_000,
        })
        suggestions = suggest_optimizations(usage)

        # Storage $7.50 of $42.50 is under 30%; retrievals are under 2x events
        assert len(suggestions) == 2
        assert suggestions[0].startswith("Built-in memory storage is significantly higher")
        assert suggestions[1].startswith("Memory accounts for more than 50%")

    def test_storage_share_and_retrieval_ratio(self):
        usage = sanitize_usage_record({
            "memory_short_term_events": 1_000,
            "memory_long_term_storage_custom": 100_000,
            "memory_long_term_retrievals": 5_000,
        })
        suggestions = suggest_optimizations(usage)

        assert any(s.startswith("Memory storage costs represent more than 30%") for s in suggestions)
        assert any(s.startswith("High memory retrieval ratio detected") for s in suggestions)

    def test_high_total_hint_is_last(self):
        usage = sanitize_usage_record({"runtime_cpu_hours": 20_000})
        suggestions = suggest_optimizations(usage)
        assert suggestions[-1].startswith("Consider implementing usage monitoring and alerts")

    def test_accepts_plain_mapping(self):
        """Verify raw mappings are sanitized like in the other analyses."""
        record = sanitize_usage_record({"runtime_cpu_hours": 100})
        assert suggest_optimizations({"runtime_cpu_hours": 100, "bogus": 1}) == suggest_optimizations(record)
        assert suggest_optimizations({"runtime_cpu_hours": -5}) == []

    def test_plain_mapping_with_catalog(self):
        suggestions = suggest_optimizations({"storage_gb": 10}, catalog=BEDROCK_AGENTS_CATALOG)
        assert suggestions[0].startswith("Knowledge Base accounts for more than 50%")

    def test_rules_for_missing_fields_stay_quiet(self):
        """Verify a catalog without AgentCore fields only gets category hints."""
        usage = sanitize_usage_record({"storage_gb": 10}, BEDROCK_AGENTS_CATALOG)
        assert suggest_optimizations(usage) == [
            "Knowledge Base accounts for more than 50% of your total bill. Focus "
            "optimization efforts on this service first."
        ]


class TestProjectGrowth:
    """Test twelve-month projections."""

    def test_flat_projection(self):
        projection = project_growth({"runtime_cpu_hours": 100}, 0.0)

        assert len(projection.monthly_projections) == 12
        assert [p.month for p in projection.monthly_projections] == list(range(1, 13))
        assert all(p.costs.total_monthly_cost == 8.95 for p in projection.monthly_projections)
        # 12 * $8.95 = $107.40
        assert projection.total_annual_cost == pytest.approx(107.4)
        assert projection.average_monthly_cost == pytest.approx(8.95)

    def test_compound_growth(self):
        projection = project_growth({"runtime_cpu_hours": 100}, 0.1)
        months = projection.monthly_projections

        assert months[0].usage["runtime_cpu_hours"] == 100.0
        assert months[1].usage["runtime_cpu_hours"] == 110.0
        # 100 * 1.1^11 = 285.31 -> 285
        assert months[11].usage["runtime_cpu_hours"] == 285.0
        assert months[11].costs == compute_breakdown(months[11].usage)

    def test_growth_beyond_bounds_resets_field(self):
        """Verify projected values above a field maximum are sanitized to 0."""
        projection = project_growth({"runtime_cpu_hours": 100_000}, 0.1)
        assert projection.monthly_projections[0].usage["runtime_cpu_hours"] == 100_000.0
        assert projection.monthly_projections[1].usage["runtime_cpu_hours"] == 0.0

    def test_full_decline(self):
        projection = project_growth({"runtime_cpu_hours": 100}, -1.0)
        assert projection.monthly_projections[0].costs.total_monthly_cost == 8.95
        assert projection.monthly_projections[1].costs.total_monthly_cost == 0.0

    def test_huge_growth_rate_projects_zero(self):
        """Verify a growth rate whose powers overflow a float still projects."""
        projection = project_growth({"runtime_cpu_hours": 10}, 1e30)
        months = projection.monthly_projections

        assert len(months) == 12
        assert months[0].usage["runtime_cpu_hours"] == 10.0
        assert all(p.costs.total_monthly_cost == 0.0 for p in months[1:])
        # Only month 1 is priced: 10 * $0.0895 = $0.895
        assert projection.total_annual_cost == pytest.approx(0.895)

    def test_invalid_growth_rate(self):
        with pytest.raises(ValueError, match="monthly_growth_rate"):
            project_growth({}, -1.5)
        with pytest.raises(ValueError, match="monthly_growth_rate"):
            project_growth({}, float("nan"))


class TestFindBreakEven:
    """Test break-even search."""

    def test_no_fixed_costs(self):
        """Verify zero units break even when there are no fixed costs."""
        result = find_break_even(0.0, 0.05)
        assert result.break_even_units == 0

    def test_break_even_volume(self):
        """Verify the returned volume is where profit crosses zero."""
        # Marginal cost per unit: 0.1 * 0.0895 + 0.5 * 0.00945 + 0.005 / 1000 = $0.01368
        # Net per unit: $0.05 - $0.01368 = $0.03632; 100 / 0.03632 = ~2753
        result = find_break_even(100.0, 0.05)

        assert 2700 <= result.break_even_units <= 2800
        assert result.profitable_at_target_units > result.break_even_units
        assert result.fixed_costs == 100.0
        assert result.revenue_per_unit == 0.05
        assert result.target_profit == 10_000.0

    def test_profit_at_break_even(self):
        result = find_break_even(100.0, 0.05)
        units = result.break_even_units
        assert _profit(units, 100.0, 0.05) > -0.01
        assert _profit(units - 1, 100.0, 0.05) < 0.01

    def test_unreachable_target_hits_ceiling(self):
        """Verify revenue below marginal cost never breaks even."""
        result = find_break_even(100.0, 0.001)
        assert result.break_even_units == BREAK_EVEN_SEARCH_CEILING
        assert result.profitable_at_target_units == BREAK_EVEN_SEARCH_CEILING

    def test_custom_target(self):
        low = find_break_even(100.0, 0.05, target_profit=1_000.0)
        high = find_break_even(100.0, 0.05, target_profit=5_000.0)
        assert low.profitable_at_target_units < high.profitable_at_target_units


def _profit(units: int, fixed_costs: float, revenue_per_unit: float) -> float:
    usage = UsageRecord(
        catalog=zero_usage().catalog,
        values={
            **zero_usage().values,
            "runtime_cpu_hours": units * 0.1,
            "runtime_memory_gb_hours": units * 0.5,
            "gateway_api_invocations": float(units),
        }
    )
    return units * revenue_per_unit - compute_breakdown(usage).total_monthly_cost - fixed_costs
