"""
Cost calculations for usage records.

Turns a UsageRecord and a RateTable into a CostBreakdown. All functions
here are pure: identical inputs give identical outputs.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

from .catalog import (
    DEFAULT_REGION,
    PricingCatalog,
    RateTable,
    UnitConvention,
    UsageField,
)
from .formatting import format_currency
from .precision import CURRENCY_PRECISION, round_to_precision, to_decimal
from .usage import UsageRecord

logger = logging.getLogger(__name__)

HIGH_COST_THRESHOLD = 100_000.0  # Monthly total that warrants a second look


@dataclass(frozen=True)
class PricingTier:
    """Marginal rate (per 1,000 units) for usage above a threshold."""
    threshold: float
    rate: float


@dataclass(frozen=True)
class CostBreakdown:
    """Per-field monthly costs and their total."""
    costs: Mapping[str, float]
    total_monthly_cost: float

    def __post_init__(self):
        object.__setattr__(self, "costs", MappingProxyType(dict(self.costs)))

    def __getitem__(self, key: str) -> float:
        return self.costs[key]

    def get(self, key: str, default: float = 0.0) -> float:
        return self.costs.get(key, default)


@dataclass(frozen=True)
class BreakdownCheck:
    """Outcome of a breakdown consistency check."""
    valid: bool
    warnings: List[str]


def cost_for_count(count: float, rate: float) -> float:
    """Cost of a count-like dimension priced per 1,000 units."""
    if count < 0:
        return 0.0
    return (count / 1000) * rate


def cost_for_amount(amount: float, rate: float) -> float:
    """Cost of a GB or hour dimension priced per unit."""
    if amount < 0:
        return 0.0
    return amount * rate


def cost_for_tool_indexing(count: float, rate: float) -> float:
    """Cost of tool indexing, priced per 100 tools."""
    if count < 0:
        return 0.0
    return (count / 100) * rate


_UNIT_COST_FUNCTIONS = {
    UnitConvention.PER_THOUSAND: cost_for_count,
    UnitConvention.LINEAR: cost_for_amount,
    UnitConvention.PER_HUNDRED: cost_for_tool_indexing,
}


def cost_for_field(usage_field: UsageField, amount: float, rate: float) -> float:
    """Apply the unit convention of a field to an amount and rate."""
    return _UNIT_COST_FUNCTIONS[usage_field.unit](amount, rate)


def compute_breakdown(
    usage: UsageRecord,
    rates: Optional[RateTable] = None,
    overrides: Optional[Mapping[str, float]] = None
) -> CostBreakdown:
    """Calculate the monthly cost breakdown for a usage record.

    Args:
        usage: Sanitized usage record
        rates: Rate table to price with (defaults to the record's catalog rates)
        overrides: Partial rate override merged over the table

    Returns:
        CostBreakdown with each cost and the total rounded to 4 decimal places

    Raises:
        ValueError: If an override names an unknown rate or is negative
    """
    table = (rates or usage.catalog.rates).with_overrides(overrides)

    costs: Dict[str, float] = {}
    total = Decimal(0)
    for usage_field in usage.catalog.fields:
        raw_cost = cost_for_field(usage_field, usage[usage_field.key], table.get_rate(usage_field.rate_key))
        cost = round_to_precision(raw_cost, CURRENCY_PRECISION)
        costs[usage_field.key] = cost
        total += to_decimal(cost)

    return CostBreakdown(
        costs=costs,
        total_monthly_cost=round_to_precision(float(total), CURRENCY_PRECISION)
    )


def tiered_cost(usage: float, tiers: Sequence[PricingTier]) -> float:
    """Calculate cost with marginal per-tier rates.

    Tiers must already be sorted by ascending threshold; the last tier
    has no upper bound. Each tier rate is per 1,000 units.
    """
    if usage <= 0 or not tiers:
        return 0.0

    total_cost = 0.0
    remaining = usage

    for index, tier in enumerate(tiers):
        next_tier = tiers[index + 1] if index + 1 < len(tiers) else None
        if next_tier is not None:
            tier_usage = min(remaining, next_tier.threshold - tier.threshold)
        else:
            tier_usage = remaining

        if tier_usage <= 0:
            break

        total_cost += (tier_usage / 1000) * tier.rate
        remaining -= tier_usage

        if remaining <= 0:
            break

    return total_cost


def validate_breakdown(
    breakdown: CostBreakdown,
    high_cost_threshold: float = HIGH_COST_THRESHOLD
) -> BreakdownCheck:
    """Check a breakdown for suspicious or impossible values.

    A total above the threshold only produces a warning. Negative, NaN
    or infinite values make the breakdown invalid.
    """
    warnings: List[str] = []
    valid = True

    total = breakdown.total_monthly_cost
    if math.isfinite(total) and total > high_cost_threshold:
        warnings.append(
            f"Total monthly cost ({format_currency(total)}) is unusually high. "
            "Please verify your usage parameters."
        )

    values = dict(breakdown.costs)
    values["total_monthly_cost"] = total

    for key, value in values.items():
        if math.isfinite(value) and value < 0:
            warnings.append(f"Negative cost detected for {key}: {format_currency(value)}")
            valid = False

    for key, value in values.items():
        if not math.isfinite(value):
            warnings.append(f"Invalid cost value for {key}: {value}")
            valid = False

    for warning in warnings:
        logger.warning(warning)

    return BreakdownCheck(valid=valid, warnings=warnings)


def get_pricing_metadata(catalog: PricingCatalog, region: str = DEFAULT_REGION) -> Dict[str, str]:
    """Provenance of a catalog's rates, for display."""
    return {
        "catalog": catalog.name,
        "last_updated": catalog.rates.last_updated,
        "source_url": catalog.rates.source_url,
        "region": region,
    }
