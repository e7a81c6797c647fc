"""
Plain-text estimate reports for sharing outside the tool.
"""

from datetime import datetime
from typing import List, Optional

from .catalog import DEFAULT_REGION
from .formatting import format_currency, format_large_number
from .pricing import CostBreakdown, get_pricing_metadata
from .usage import UsageRecord


def render_estimate_report(
    usage: UsageRecord,
    breakdown: CostBreakdown,
    generated_at: Optional[datetime] = None,
    region: str = DEFAULT_REGION
) -> str:
    """Render a usage record and its breakdown as a plain-text report."""
    catalog = usage.catalog
    metadata = get_pricing_metadata(catalog, region)
    generated_at = generated_at or datetime.now()

    lines: List[str] = [
        f"Cost Estimate ({catalog.name}) - {format_currency(breakdown.total_monthly_cost)}/month",
        "",
        "USAGE",
    ]

    active_fields = [f for f in catalog.fields if usage[f.key] > 0]
    if active_fields:
        for usage_field in active_fields:
            lines.append(f"- {usage_field.label}: {format_large_number(usage[usage_field.key])}")
    else:
        lines.append("- No usage entered")

    lines.extend(["", "COSTS"])
    for usage_field in catalog.fields:
        lines.append(f"- {usage_field.label}: {format_currency(breakdown[usage_field.key])}")

    lines.extend([
        "",
        f"TOTAL MONTHLY ESTIMATE: {format_currency(breakdown.total_monthly_cost)}",
        "",
        f"Pricing last updated: {metadata['last_updated']}",
        f"Region: {metadata['region']}",
        f"Source: {metadata['source_url']}",
        f"Generated: {generated_at.isoformat(timespec='seconds')}",
    ])

    return "\n".join(lines) + "\n"
