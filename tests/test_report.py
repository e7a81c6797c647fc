"""
Unit tests for plain-text estimate reports.
"""

from datetime import datetime

from agentcore_cost.core.catalog import BEDROCK_AGENTS_CATALOG
from agentcore_cost.core.pricing import compute_breakdown
from agentcore_cost.core.report import render_estimate_report
from agentcore_cost.core.usage import sanitize_usage_record, zero_usage


GENERATED_AT = datetime(2025, 2, 1, 9, 30, 0)


class TestEstimateReport:
    """Test report rendering."""

    def test_report_sections(self):
        usage = sanitize_usage_record({"storage_gb": 10, "agent_invocations": 10_000}, BEDROCK_AGENTS_CATALOG)
        report = render_estimate_report(usage, compute_breakdown(usage), generated_at=GENERATED_AT)
        lines = report.splitlines()

        assert lines[0] == "Cost Estimate (bedrock-agents) - $1.00/month"
        assert "- Agent Invocations: 10K" in lines
        assert "- Knowledge Base Storage: 10" in lines
        assert "- Agent Invocations: $0.00" in lines
        assert "- Knowledge Base Storage: $1.00" in lines
        assert "TOTAL MONTHLY ESTIMATE: $1.00" in lines
        assert "Region: us-east-1" in lines
        assert "Generated: 2025-02-01T09:30:00" in lines
        assert report.endswith("\n")

    def test_only_active_fields_in_usage(self):
        usage = sanitize_usage_record({"storage_gb": 10}, BEDROCK_AGENTS_CATALOG)
        report = render_estimate_report(usage, compute_breakdown(usage), generated_at=GENERATED_AT)
        usage_section = report.split("COSTS")[0]

        assert "Knowledge Base Storage: 10" in usage_section
        assert "Data Ingestion" not in usage_section

    def test_no_usage(self):
        usage = zero_usage()
        report = render_estimate_report(usage, compute_breakdown(usage), generated_at=GENERATED_AT)
        assert "- No usage entered" in report
        assert "TOTAL MONTHLY ESTIMATE: $0.00" in report

    def test_pricing_provenance(self):
        usage = zero_usage()
        report = render_estimate_report(
            usage, compute_breakdown(usage), generated_at=GENERATED_AT, region="eu-west-1"
        )
        assert "Pricing last updated: 2025-01-15T00:00:00.000Z" in report
        assert "Source: https://aws.amazon.com/bedrock/pricing/" in report
        assert "Region: eu-west-1" in report
