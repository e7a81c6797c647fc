"""
Derived cost analyses.

Batch evaluation, scenario comparison, optimization hints, growth
projection and break-even search, all built on compute_breakdown.

Like the breakdown itself these are read-only and deterministic:
1. No side effects
2. Same inputs always give the same results
3. Every scenario is sanitized before it is priced
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .catalog import DEFAULT_CATALOG, PricingCatalog, RateTable
from .precision import CURRENCY_PRECISION, round_to_precision, to_decimal
from .pricing import CostBreakdown, compute_breakdown
from .usage import UsageRecord, sanitize_usage_record

UsageInput = Union[UsageRecord, Mapping[str, Any]]

MONTHS_PER_YEAR = 12
BREAK_EVEN_SEARCH_CEILING = 10_000_000
BREAK_EVEN_MAX_ITERATIONS = 50
BREAK_EVEN_TOLERANCE = 0.01
DEFAULT_TARGET_PROFIT = 10_000.0


@dataclass(frozen=True)
class ScenarioComparison:
    """Cost difference between two usage scenarios."""
    baseline: CostBreakdown
    comparison: CostBreakdown
    per_field_delta: Dict[str, float]
    total_delta: float
    percent_change: float
    is_more_expensive: bool


@dataclass(frozen=True)
class MonthlyProjection:
    """Projected usage and cost for one month."""
    month: int
    usage: UsageRecord
    costs: CostBreakdown


@dataclass(frozen=True)
class GrowthProjection:
    """Twelve months of projected costs."""
    monthly_projections: List[MonthlyProjection]
    total_annual_cost: float
    average_monthly_cost: float


@dataclass(frozen=True)
class BreakEvenResult:
    """Units needed to cover costs, and to reach a profit target."""
    break_even_units: int
    profitable_at_target_units: int
    fixed_costs: float
    revenue_per_unit: float
    target_profit: float


def batch_compute(
    scenarios: Iterable[UsageInput],
    catalog: PricingCatalog = DEFAULT_CATALOG,
    rates: Optional[RateTable] = None
) -> List[CostBreakdown]:
    """Sanitize and price each scenario independently."""
    return [
        compute_breakdown(sanitize_usage_record(scenario, catalog), rates)
        for scenario in scenarios
    ]


def compare_scenarios(
    baseline: UsageInput,
    comparison: UsageInput,
    catalog: PricingCatalog = DEFAULT_CATALOG,
    rates: Optional[RateTable] = None
) -> ScenarioComparison:
    """Compare the cost of two scenarios.

    Percent change is relative to the baseline total, and 0 when the
    baseline costs nothing.
    """
    baseline_costs = compute_breakdown(sanitize_usage_record(baseline, catalog), rates)
    comparison_costs = compute_breakdown(sanitize_usage_record(comparison, catalog), rates)

    per_field_delta = {
        key: _delta(comparison_costs[key], baseline_costs[key])
        for key in baseline_costs.costs
    }
    total_delta = _delta(comparison_costs.total_monthly_cost, baseline_costs.total_monthly_cost)

    if baseline_costs.total_monthly_cost > 0:
        percent_change = (total_delta / baseline_costs.total_monthly_cost) * 100
    else:
        percent_change = 0.0

    return ScenarioComparison(
        baseline=baseline_costs,
        comparison=comparison_costs,
        per_field_delta=per_field_delta,
        total_delta=total_delta,
        percent_change=percent_change,
        is_more_expensive=total_delta > 0
    )


def suggest_optimizations(
    usage: UsageInput,
    catalog: PricingCatalog = DEFAULT_CATALOG,
    rates: Optional[RateTable] = None
) -> List[str]:
    """Generate cost optimization hints from usage patterns.

    Rules are checked in a fixed order and each one independently adds
    its hint:
    - CPU cost > 2 * memory cost, or memory cost > 2 * CPU cost
    - Search API calls > 2 * gateway API calls
    - Tool indexing > 1,000 tools
    - Identity token requests > gateway API calls
    - Long-term memory storage > 30% of the total
    - Memory retrievals > 2 * short-term events
    - Built-in storage > 3 * custom storage
    - One service category > 50% of the total
    - Total > $1,000 per month

    Fields a catalog does not have read as 0, so their rules stay quiet.
    """
    suggestions: List[str] = []
    usage = sanitize_usage_record(usage, catalog)
    costs = compute_breakdown(usage, rates)
    total = costs.total_monthly_cost

    cpu_cost = _resource_cost(usage.catalog, costs, "cpu")
    memory_cost = _resource_cost(usage.catalog, costs, "memory")

    if cpu_cost > memory_cost * 2:
        suggestions.append(
            "CPU costs are significantly higher than memory costs. Consider optimizing "
            "CPU-intensive operations or using more memory-efficient algorithms."
        )

    if memory_cost > cpu_cost * 2:
        suggestions.append(
            "Memory costs are significantly higher than CPU costs. Consider optimizing "
            "memory usage or using more CPU-efficient processing."
        )

    if usage.get("gateway_search_api_invocations") > usage.get("gateway_api_invocations") * 2:
        suggestions.append(
            "High search API usage detected. Consider caching search results or "
            "optimizing search queries to reduce costs."
        )

    if usage.get("gateway_tool_indexing") > 1000:
        suggestions.append(
            "High tool indexing volume detected. Consider consolidating similar tools "
            "or implementing incremental indexing strategies."
        )

    if usage.get("identity_token_requests") > usage.get("gateway_api_invocations"):
        suggestions.append(
            "Identity token requests exceed gateway API calls. Consider implementing "
            "token caching or reuse strategies."
        )

    storage_cost = (
        costs.get("memory_long_term_storage_built_in")
        + costs.get("memory_long_term_storage_custom")
    )
    if storage_cost > total * 0.3:
        suggestions.append(
            "Memory storage costs represent more than 30% of your total bill. Consider "
            "optimizing memory retention policies or using more cost-effective storage strategies."
        )

    if usage.get("memory_long_term_retrievals") > usage.get("memory_short_term_events") * 2:
        suggestions.append(
            "High memory retrieval ratio detected. Consider caching frequently accessed "
            "memories or optimizing retrieval patterns."
        )

    if usage.get("memory_long_term_storage_built_in") > usage.get("memory_long_term_storage_custom") * 3:
        suggestions.append(
            "Built-in memory storage is significantly higher than custom storage. Consider "
            "migrating to custom memory strategies for cost optimization."
        )

    if total > 0:
        category_costs = _category_costs(usage.catalog, costs)
        for category, cost in category_costs.items():
            if cost > total * 0.5:
                label = category.replace("_", " ").title()
                suggestions.append(
                    f"{label} accounts for more than 50% of your total bill. Focus "
                    "optimization efforts on this service first."
                )

    if total > 1000:
        suggestions.append(
            "Consider implementing usage monitoring and alerts to track cost trends "
            "and prevent unexpected charges."
        )

    return suggestions


def project_growth(
    usage: UsageInput,
    monthly_growth_rate: float = 0.0,
    catalog: PricingCatalog = DEFAULT_CATALOG,
    rates: Optional[RateTable] = None
) -> GrowthProjection:
    """Project twelve months of costs under compound monthly growth.

    Month m uses every field scaled by (1 + rate) ** (m - 1), rounded to
    the nearest whole unit and sanitized. A multiplier too large for a
    float projects every field of that month to 0.

    Raises:
        ValueError: If the growth rate is not finite or below -1
    """
    if not math.isfinite(monthly_growth_rate) or monthly_growth_rate < -1:
        raise ValueError("monthly_growth_rate must be a finite number >= -1")

    current = sanitize_usage_record(usage, catalog)
    projections: List[MonthlyProjection] = []

    for month in range(1, MONTHS_PER_YEAR + 1):
        try:
            multiplier = (1 + monthly_growth_rate) ** (month - 1)
        except OverflowError:
            # Non-finite values are reset to 0 by sanitization
            multiplier = math.inf
        projected = {
            key: round_to_precision(value * multiplier, 0)
            for key, value in current.values.items()
        }
        projected_usage = sanitize_usage_record(projected, current.catalog)
        projections.append(MonthlyProjection(
            month=month,
            usage=projected_usage,
            costs=compute_breakdown(projected_usage, rates)
        ))

    total = sum((to_decimal(p.costs.total_monthly_cost) for p in projections), Decimal(0))
    total_annual_cost = float(total)

    return GrowthProjection(
        monthly_projections=projections,
        total_annual_cost=total_annual_cost,
        average_monthly_cost=total_annual_cost / MONTHS_PER_YEAR
    )


def find_break_even(
    fixed_costs: float,
    revenue_per_unit: float,
    target_profit: float = DEFAULT_TARGET_PROFIT,
    catalog: PricingCatalog = DEFAULT_CATALOG,
    rates: Optional[RateTable] = None
) -> BreakEvenResult:
    """Find the unit volume at which revenue covers usage and fixed costs.

    Each unit consumes the catalog's break-even profile (for AgentCore:
    0.1 vCPU-hours, 0.5 GB-hours and one gateway call). Profit is
    non-decreasing in units while revenue per unit exceeds the marginal
    cost, so a binary search over [0, 10M] converges.

    Returns:
        BreakEvenResult with units for zero profit and for target_profit.
        If a target is never reached, its units equal the search ceiling.
    """
    def profit_at(units: int) -> float:
        usage = UsageRecord(
            catalog=catalog,
            values={
                key: units * catalog.break_even_profile.get(key, 0.0)
                for key in catalog.field_keys
            }
        )
        revenue = units * revenue_per_unit
        return revenue - compute_breakdown(usage, rates).total_monthly_cost - fixed_costs

    def search(target: float) -> int:
        low = 0
        high = BREAK_EVEN_SEARCH_CEILING
        iterations = 0

        while low < high and iterations < BREAK_EVEN_MAX_ITERATIONS:
            mid = (low + high) // 2
            profit = profit_at(mid)

            if abs(profit - target) < BREAK_EVEN_TOLERANCE:
                return mid

            if profit < target:
                low = mid + 1
            else:
                high = mid

            iterations += 1

        return low

    return BreakEvenResult(
        break_even_units=search(0.0),
        profitable_at_target_units=search(target_profit),
        fixed_costs=fixed_costs,
        revenue_per_unit=revenue_per_unit,
        target_profit=target_profit
    )


def _delta(after: float, before: float) -> float:
    return round_to_precision(after - before, CURRENCY_PRECISION)


def _resource_cost(catalog: PricingCatalog, costs: CostBreakdown, resource: str) -> float:
    return sum(costs[f.key] for f in catalog.fields if f.resource == resource)


def _category_costs(catalog: PricingCatalog, costs: CostBreakdown) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for usage_field in catalog.fields:
        totals[usage_field.category] = totals.get(usage_field.category, 0.0) + costs[usage_field.key]
    return totals
