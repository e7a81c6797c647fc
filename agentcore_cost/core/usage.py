"""
Usage records and sanitization.

A UsageRecord is the only input the calculation engine accepts. Untrusted
data becomes one through sanitize_usage_record, which never fails.
"""

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Union

from .catalog import DEFAULT_CATALOG, PricingCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageRecord:
    """Monthly consumption counters for every field of a catalog.

    Every value is a finite number >= 0. Bounds are enforced by
    sanitization, not by construction.
    """
    catalog: PricingCatalog = field(repr=False)
    values: Mapping[str, float]

    def __post_init__(self):
        """Freeze the values and validate they match the catalog."""
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        expected = set(self.catalog.field_keys)
        actual = set(self.values)
        if actual != expected:
            missing = sorted(expected - actual)
            unknown = sorted(actual - expected)
            raise ValueError(f"Usage record fields mismatch (missing: {missing}, unknown: {unknown})")
        for key, value in self.values.items():
            if not _is_finite_number(value) or value < 0:
                raise ValueError(f"Usage value for {key} must be a finite number >= 0")

    def __getitem__(self, key: str) -> float:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.catalog.field_keys)

    def get(self, key: str, default: float = 0.0) -> float:
        return self.values.get(key, default)

    def as_dict(self) -> Dict[str, float]:
        """Field values in catalog order."""
        return {key: self.values[key] for key in self.catalog.field_keys}


def zero_usage(catalog: PricingCatalog = DEFAULT_CATALOG) -> UsageRecord:
    """Usage record with every field at zero."""
    return UsageRecord(catalog=catalog, values={key: 0.0 for key in catalog.field_keys})


def sanitize_usage_record(
    usage: Union[UsageRecord, Mapping[str, Any]],
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> UsageRecord:
    """Coerce untrusted usage data into a bounded UsageRecord.

    For each catalog field, a finite numeric input is clamped to >= 0 and
    kept if it is within the field's upper bound, otherwise reset to 0.
    Absent, non-numeric and non-finite inputs stay at 0. Unknown keys are
    ignored.

    Args:
        usage: Partial mapping of field key to value, or an existing record
        catalog: Catalog defining the fields and bounds

    Returns:
        Fully populated UsageRecord
    """
    if isinstance(usage, UsageRecord):
        catalog = usage.catalog
        usage = usage.values

    sanitized: Dict[str, float] = {}
    for usage_field in catalog.fields:
        raw_value = usage.get(usage_field.key)
        sanitized[usage_field.key] = 0.0

        if raw_value is None:
            continue
        if not _is_finite_number(raw_value):
            logger.debug("Ignoring non-numeric value for %s: %r", usage_field.key, raw_value)
            continue

        clamped = float(max(usage_field.bounds.min_value, float(raw_value)))
        if usage_field.bounds.contains(clamped):
            sanitized[usage_field.key] = clamped
        else:
            logger.debug(
                "Resetting %s to 0: %s exceeds maximum %s",
                usage_field.key, clamped, usage_field.bounds.max_value
            )

    return UsageRecord(catalog=catalog, values=sanitized)


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False
