"""
Configuration management and loading.

Handles pricing configuration files: catalog choice, region and rate overrides.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping

import yaml

from agentcore_cost.core.catalog import (
    DEFAULT_CATALOG,
    DEFAULT_REGION,
    REGIONAL_MULTIPLIERS,
    PricingCatalog,
    RateTable,
    apply_regional_multiplier,
    get_catalog,
)
from agentcore_cost.core.pricing import HIGH_COST_THRESHOLD

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AGENTCORE_COST_CONFIG"


@dataclass(frozen=True)
class PricingConfig:
    """Complete pricing configuration."""
    catalog: PricingCatalog = DEFAULT_CATALOG
    region: str = DEFAULT_REGION
    rate_overrides: Mapping[str, float] = field(default_factory=dict)
    high_cost_threshold: float = HIGH_COST_THRESHOLD

    def __post_init__(self):
        """Validate region and threshold."""
        object.__setattr__(self, "rate_overrides", MappingProxyType(dict(self.rate_overrides)))
        if self.region not in REGIONAL_MULTIPLIERS:
            raise ValueError(f"Unsupported region: {self.region}")
        if self.high_cost_threshold <= 0:
            raise ValueError("high_cost_threshold must be > 0")

    def rate_table(self) -> RateTable:
        """Catalog rates scaled for the region, with overrides applied last."""
        regional = apply_regional_multiplier(self.catalog.rates, self.region)
        return regional.with_overrides(self.rate_overrides)


def default_pricing_config() -> PricingConfig:
    """Built-in configuration: AgentCore catalog, us-east-1, no overrides."""
    return PricingConfig()


def load_pricing_config(path: str) -> PricingConfig:
    """Load and validate pricing configuration from a YAML file.

    Unknown top-level keys and rate keys are rejected.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated PricingConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Pricing config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")

    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'catalog', 'region', 'rates', 'high_cost_threshold'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    # Parse catalog
    catalog_name = raw_config.get('catalog', DEFAULT_CATALOG.name)
    if not isinstance(catalog_name, str):
        raise ValueError("'catalog' must be a string")
    catalog = get_catalog(catalog_name)

    # Parse region
    region = raw_config.get('region', DEFAULT_REGION)
    if not isinstance(region, str):
        raise ValueError("'region' must be a string")
    if region not in REGIONAL_MULTIPLIERS:
        valid_regions = sorted(REGIONAL_MULTIPLIERS)
        raise ValueError(f"'region' must be one of: {valid_regions}")

    rate_overrides = _parse_rates(raw_config.get('rates', {}), catalog)

    # Parse high cost threshold
    threshold = raw_config.get('high_cost_threshold', HIGH_COST_THRESHOLD)
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or threshold <= 0:
        raise ValueError("'high_cost_threshold' must be > 0")

    config = PricingConfig(
        catalog=catalog,
        region=region,
        rate_overrides=rate_overrides,
        high_cost_threshold=float(threshold)
    )
    logger.info(
        "Loaded pricing config from %s (catalog=%s, region=%s, %d rate overrides)",
        path, catalog.name, region, len(rate_overrides)
    )
    return config


def _parse_rates(data, catalog: PricingCatalog) -> Dict[str, float]:
    """Parse and validate rate overrides.

    Args:
        data: Raw 'rates' section
        catalog: Catalog whose rate keys are accepted

    Returns:
        Mapping of rate key to rate

    Raises:
        ValueError: If a key is unknown or a rate is invalid
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("'rates' must be a dictionary")

    allowed_keys = set(catalog.rates.rates)
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown rate keys for catalog {catalog.name}: {unknown_keys}")

    rates = {}
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Rate '{key}' must be a number")
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Rate '{key}' must be a finite number >= 0")
        rates[key] = float(value)

    return rates
