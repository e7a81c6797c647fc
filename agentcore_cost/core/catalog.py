"""
Pricing catalogs and rate management.

A catalog is one product variant: the ordered set of billable usage fields
(with their unit convention and input bounds) plus the default rate table.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .precision import to_decimal


class UnitConvention(Enum):
    """How a usage amount is scaled before its rate is applied."""
    PER_THOUSAND = 1000  # Rate per 1,000 units
    PER_HUNDRED = 100    # Rate per 100 units
    LINEAR = 1           # Rate per GB, vCPU-hour or GB-hour


@dataclass(frozen=True)
class FieldBounds:
    """Accepted input range for a usage field."""
    min_value: float
    max_value: float
    max_decimal_places: int

    def __post_init__(self):
        """Validate bounds are consistent."""
        if self.min_value < 0:
            raise ValueError("min_value cannot be negative")
        if self.max_value < self.min_value:
            raise ValueError("max_value must be >= min_value")
        if self.max_decimal_places < 0:
            raise ValueError("max_decimal_places cannot be negative")

    def contains(self, value: float) -> bool:
        return self.min_value <= value <= self.max_value


@dataclass(frozen=True)
class UsageField:
    """One billable dimension of a catalog."""
    key: str
    label: str
    rate_key: str
    unit: UnitConvention
    bounds: FieldBounds
    category: str
    resource: Optional[str] = None  # "cpu" or "memory" for compute fields


@dataclass(frozen=True)
class RateTable:
    """Fixed per-dimension prices with provenance metadata."""
    rates: Mapping[str, float]
    last_updated: str
    source_url: str

    def __post_init__(self):
        """Freeze the rates and validate each is a finite, non-negative number."""
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))
        for key, rate in self.rates.items():
            _check_rate(key, rate)

    def get_rate(self, rate_key: str) -> float:
        """Get a single rate.

        Args:
            rate_key: Rate identifier

        Returns:
            The configured rate

        Raises:
            ValueError: If the rate key is unknown
        """
        if rate_key not in self.rates:
            raise ValueError(f"Unknown rate: {rate_key}")
        return self.rates[rate_key]

    def with_overrides(self, overrides: Optional[Mapping[str, float]]) -> "RateTable":
        """Return a new table with a partial override merged over this one.

        The receiver is never modified.

        Raises:
            ValueError: If an override names an unknown rate or is invalid
        """
        if not overrides:
            return self

        unknown_keys = set(overrides) - set(self.rates)
        if unknown_keys:
            raise ValueError(f"Unknown rate keys: {sorted(unknown_keys)}")

        merged = dict(self.rates)
        for key, rate in overrides.items():
            _check_rate(key, rate)
            merged[key] = float(rate)

        return RateTable(
            rates=merged,
            last_updated=self.last_updated,
            source_url=self.source_url
        )


@dataclass(frozen=True)
class PricingCatalog:
    """A product variant: usage fields, default rates and break-even profile."""
    name: str
    fields: Tuple[UsageField, ...]
    rates: RateTable
    break_even_profile: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        """Validate that fields and rates line up."""
        object.__setattr__(self, "break_even_profile", MappingProxyType(dict(self.break_even_profile)))
        keys = [f.key for f in self.fields]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate usage fields in catalog {self.name}")
        for usage_field in self.fields:
            if usage_field.rate_key not in self.rates.rates:
                raise ValueError(
                    f"Field {usage_field.key} references unknown rate {usage_field.rate_key}"
                )
        unknown_profile = set(self.break_even_profile) - set(keys)
        if unknown_profile:
            raise ValueError(f"Unknown break-even profile fields: {sorted(unknown_profile)}")

    @property
    def field_keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.fields)

    def get_field(self, key: str) -> UsageField:
        """Get a usage field by key.

        Raises:
            ValueError: If the field is not part of this catalog
        """
        for usage_field in self.fields:
            if usage_field.key == key:
                return usage_field
        raise ValueError(f"Unknown usage field for catalog {self.name}: {key}")


def _check_rate(key: str, rate) -> None:
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        raise ValueError(f"Rate {key} must be a number")
    if not math.isfinite(rate) or rate < 0:
        raise ValueError(f"Rate {key} must be a finite number >= 0")


# Base pricing is US East (N. Virginia)
REGIONAL_MULTIPLIERS: Dict[str, float] = {
    "us-east-1": 1.0,
    "us-west-2": 1.0,
    "eu-west-1": 1.1,
}

DEFAULT_REGION = "us-east-1"


def apply_regional_multiplier(rates: RateTable, region: str) -> RateTable:
    """Scale every rate in a table by the multiplier of a region.

    Raises:
        ValueError: If the region is not supported
    """
    if region not in REGIONAL_MULTIPLIERS:
        raise ValueError(f"Unsupported region: {region}")

    multiplier = to_decimal(REGIONAL_MULTIPLIERS[region])
    if multiplier == 1:
        return rates

    scaled = {
        key: float(to_decimal(float(rate)) * multiplier)
        for key, rate in rates.rates.items()
    }
    return RateTable(
        rates=scaled,
        last_updated=rates.last_updated,
        source_url=rates.source_url
    )


_CPU_HOURS = FieldBounds(min_value=0, max_value=100_000, max_decimal_places=2)
_MEMORY_GB_HOURS = FieldBounds(min_value=0, max_value=1_000_000, max_decimal_places=2)
_REQUEST_COUNT = FieldBounds(min_value=0, max_value=100_000_000, max_decimal_places=0)
_TOOL_COUNT = FieldBounds(min_value=0, max_value=100_000, max_decimal_places=0)
_GIGABYTES = FieldBounds(min_value=0, max_value=1_000_000, max_decimal_places=2)


# Bedrock AgentCore, us-east-1, flat-rate pricing as of 2025-01-15
AGENTCORE_RATES = RateTable(
    rates={
        "runtime_cpu_rate": 0.0895,                      # per vCPU-hour
        "runtime_memory_rate": 0.00945,                  # per GB-hour
        "browser_tool_cpu_rate": 0.0895,
        "browser_tool_memory_rate": 0.00945,
        "code_interpreter_cpu_rate": 0.0895,
        "code_interpreter_memory_rate": 0.00945,
        "gateway_api_invocation_rate": 0.005,            # per 1,000 invocations
        "gateway_search_api_rate": 0.025,                # per 1,000 invocations
        "gateway_tool_indexing_rate": 0.02,              # per 100 tools per month
        "identity_token_request_rate": 0.010,            # per 1,000 requests
        "memory_short_term_event_rate": 0.25,            # per 1,000 new events
        "memory_long_term_storage_built_in_rate": 0.75,  # per 1,000 memories per month
        "memory_long_term_storage_custom_rate": 0.25,    # per 1,000 memories per month
        "memory_long_term_retrieval_rate": 0.50,         # per 1,000 retrievals
    },
    last_updated="2025-01-15T00:00:00.000Z",
    source_url="https://aws.amazon.com/bedrock/pricing/"
)

AGENTCORE_CATALOG = PricingCatalog(
    name="agentcore",
    fields=(
        UsageField("runtime_cpu_hours", "Runtime CPU", "runtime_cpu_rate",
                   UnitConvention.LINEAR, _CPU_HOURS, "runtime", "cpu"),
        UsageField("runtime_memory_gb_hours", "Runtime Memory", "runtime_memory_rate",
                   UnitConvention.LINEAR, _MEMORY_GB_HOURS, "runtime", "memory"),
        UsageField("browser_tool_cpu_hours", "Browser Tool CPU", "browser_tool_cpu_rate",
                   UnitConvention.LINEAR, _CPU_HOURS, "browser_tool", "cpu"),
        UsageField("browser_tool_memory_gb_hours", "Browser Tool Memory", "browser_tool_memory_rate",
                   UnitConvention.LINEAR, _MEMORY_GB_HOURS, "browser_tool", "memory"),
        UsageField("code_interpreter_cpu_hours", "Code Interpreter CPU", "code_interpreter_cpu_rate",
                   UnitConvention.LINEAR, _CPU_HOURS, "code_interpreter", "cpu"),
        UsageField("code_interpreter_memory_gb_hours", "Code Interpreter Memory",
                   "code_interpreter_memory_rate",
                   UnitConvention.LINEAR, _MEMORY_GB_HOURS, "code_interpreter", "memory"),
        UsageField("gateway_api_invocations", "Gateway API Invocations", "gateway_api_invocation_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "gateway"),
        UsageField("gateway_search_api_invocations", "Gateway Search API", "gateway_search_api_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "gateway"),
        UsageField("gateway_tool_indexing", "Gateway Tool Indexing", "gateway_tool_indexing_rate",
                   UnitConvention.PER_HUNDRED, _TOOL_COUNT, "gateway"),
        UsageField("identity_token_requests", "Identity Token Requests", "identity_token_request_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "identity"),
        UsageField("memory_short_term_events", "Memory Short-Term Events", "memory_short_term_event_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "memory"),
        UsageField("memory_long_term_storage_built_in", "Memory Long-Term Storage (Built-in)",
                   "memory_long_term_storage_built_in_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "memory"),
        UsageField("memory_long_term_storage_custom", "Memory Long-Term Storage (Custom)",
                   "memory_long_term_storage_custom_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "memory"),
        UsageField("memory_long_term_retrievals", "Memory Long-Term Retrievals",
                   "memory_long_term_retrieval_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "memory"),
    ),
    rates=AGENTCORE_RATES,
    # One billable request: 0.1 vCPU-hours, 0.5 GB-hours, one gateway call
    break_even_profile={
        "runtime_cpu_hours": 0.1,
        "runtime_memory_gb_hours": 0.5,
        "gateway_api_invocations": 1.0,
    }
)

BEDROCK_AGENTS_RATES = RateTable(
    rates={
        "agent_invocation_rate": 0.00025,       # per 1,000 invocations
        "knowledge_base_query_rate": 0.0004,    # per 1,000 queries
        "action_group_execution_rate": 0.00035, # per 1,000 executions
        "storage_rate_per_gb": 0.10,            # per GB-month
        "data_ingestion_rate_per_gb": 0.20,     # per GB ingested
    },
    last_updated="2025-01-15T00:00:00.000Z",
    source_url="https://aws.amazon.com/bedrock/pricing/"
)

BEDROCK_AGENTS_CATALOG = PricingCatalog(
    name="bedrock-agents",
    fields=(
        UsageField("agent_invocations", "Agent Invocations", "agent_invocation_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "agents"),
        UsageField("knowledge_base_queries", "Knowledge Base Queries", "knowledge_base_query_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "knowledge_base"),
        UsageField("action_group_executions", "Action Group Executions", "action_group_execution_rate",
                   UnitConvention.PER_THOUSAND, _REQUEST_COUNT, "agents"),
        UsageField("storage_gb", "Knowledge Base Storage", "storage_rate_per_gb",
                   UnitConvention.LINEAR, _GIGABYTES, "knowledge_base"),
        UsageField("data_ingestion_gb", "Data Ingestion", "data_ingestion_rate_per_gb",
                   UnitConvention.LINEAR, _GIGABYTES, "knowledge_base"),
    ),
    rates=BEDROCK_AGENTS_RATES,
    break_even_profile={"agent_invocations": 1.0}
)

CATALOGS: Dict[str, PricingCatalog] = {
    AGENTCORE_CATALOG.name: AGENTCORE_CATALOG,
    BEDROCK_AGENTS_CATALOG.name: BEDROCK_AGENTS_CATALOG,
}

DEFAULT_CATALOG = AGENTCORE_CATALOG


def get_catalog(name: str) -> PricingCatalog:
    """Get a catalog by name.

    Raises:
        ValueError: If the catalog is not supported
    """
    if name not in CATALOGS:
        raise ValueError(f"Unsupported catalog: {name}")
    return CATALOGS[name]
