"""
CLI interface for AgentCore Cost.

Provides command-line access to estimates, comparisons and projections.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from agentcore_cost.config.loader import (
    CONFIG_ENV_VAR,
    PricingConfig,
    default_pricing_config,
    load_pricing_config,
)
from agentcore_cost.config.logger import setup_logging
from agentcore_cost.core.analysis import (
    compare_scenarios,
    find_break_even,
    project_growth,
    suggest_optimizations,
)
from agentcore_cost.core.catalog import PricingCatalog
from agentcore_cost.core.formatting import (
    format_currency,
    format_large_number,
    format_percent_change,
)
from agentcore_cost.core.pricing import (
    CostBreakdown,
    compute_breakdown,
    get_pricing_metadata,
    validate_breakdown,
)
from agentcore_cost.core.report import render_estimate_report
from agentcore_cost.core.scenarios import SCENARIO_TEMPLATES, get_scenario_template
from agentcore_cost.core.usage import UsageRecord
from agentcore_cost.core.validation import RecordValidation, validate_record

app = typer.Typer()
console = Console()
logger = logging.getLogger(__name__)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

# Errors a user can fix by changing arguments or the config file
USER_ERRORS = (ValueError, FileNotFoundError, yaml.YAMLError)

CONFIG_OPTION_HELP = f"Pricing config YAML file (or set {CONFIG_ENV_VAR})"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging"
    )
):
    """AgentCore Cost CLI."""
    setup_logging("DEBUG" if verbose else None)
    if ctx.invoked_subcommand is None:
        console.print("AgentCore Cost - Use --help to see available commands")


@app.command()
def estimate(
    assignments: Optional[List[str]] = typer.Option(
        None,
        "--set",
        "-s",
        help="Usage value as FIELD=VALUE (repeatable)"
    ),
    scenario: Optional[str] = typer.Option(
        None,
        "--scenario",
        "-t",
        help="Start from a scenario template"
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help=CONFIG_OPTION_HELP
    ),
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        "-r",
        help="Write a plain-text estimate report to this file"
    )
):
    """
    Estimate the monthly cost of a usage profile.

    Every field is validated before pricing; all invalid fields are
    reported at once.
    """
    try:
        config = _load_config(config_path)
        validation = _validate_input(config.catalog, scenario, assignments)
        if not validation.valid:
            _display_validation_errors(validation)
            sys.exit(EXIT_CODE_FAIL)

        usage = validation.record
        rates = config.rate_table()
        breakdown = compute_breakdown(usage, rates)
        check = validate_breakdown(breakdown, config.high_cost_threshold)

        _display_breakdown(usage, breakdown)

        for warning in check.warnings:
            console.print(f"[yellow]Warning:[/] {warning}")

        suggestions = suggest_optimizations(usage, rates=rates)
        if suggestions:
            console.print("\n[bold]Optimization suggestions[/bold]")
            for suggestion in suggestions:
                console.print(f"- {suggestion}")

        if report is not None:
            report.write_text(
                render_estimate_report(usage, breakdown, region=config.region),
                encoding="utf-8"
            )
            console.print(f"\n[green]✓[/] Report written to {report}")

        sys.exit(EXIT_CODE_PASS if check.valid else EXIT_CODE_FAIL)

    except USER_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def compare(
    baseline_id: str = typer.Argument(..., help="Baseline scenario template id"),
    comparison_id: str = typer.Argument(..., help="Comparison scenario template id"),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help=CONFIG_OPTION_HELP
    )
):
    """Compare the monthly cost of two scenario templates."""
    try:
        config = _load_config(config_path)
        baseline = get_scenario_template(baseline_id)
        comparison = get_scenario_template(comparison_id)

        result = compare_scenarios(
            baseline.usage,
            comparison.usage,
            catalog=config.catalog,
            rates=config.rate_table()
        )

        table = Table(title="Scenario Comparison")
        table.add_column("Service")
        table.add_column(baseline.name, justify="right")
        table.add_column(comparison.name, justify="right")
        table.add_column("Difference", justify="right")

        for usage_field in config.catalog.fields:
            table.add_row(
                usage_field.label,
                format_currency(result.baseline[usage_field.key]),
                format_currency(result.comparison[usage_field.key]),
                format_currency(result.per_field_delta[usage_field.key])
            )
        table.add_row(
            "[bold]Total[/bold]",
            format_currency(result.baseline.total_monthly_cost),
            format_currency(result.comparison.total_monthly_cost),
            format_currency(result.total_delta)
        )
        console.print(table)

        direction = "more" if result.is_more_expensive else "less"
        console.print(
            f"\n{comparison.name} costs {format_currency(abs(result.total_delta))} {direction} per month "
            f"({format_percent_change(result.baseline.total_monthly_cost, result.comparison.total_monthly_cost)})"
        )
        sys.exit(EXIT_CODE_PASS)

    except USER_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def project(
    growth: float = typer.Option(
        0.0,
        "--growth",
        "-g",
        help="Monthly growth rate (0.1 = 10% per month)"
    ),
    assignments: Optional[List[str]] = typer.Option(
        None,
        "--set",
        "-s",
        help="Usage value as FIELD=VALUE (repeatable)"
    ),
    scenario: Optional[str] = typer.Option(
        None,
        "--scenario",
        "-t",
        help="Start from a scenario template"
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help=CONFIG_OPTION_HELP
    )
):
    """Project twelve months of cost under compound monthly growth."""
    try:
        config = _load_config(config_path)
        validation = _validate_input(config.catalog, scenario, assignments)
        if not validation.valid:
            _display_validation_errors(validation)
            sys.exit(EXIT_CODE_FAIL)

        projection = project_growth(
            validation.record,
            growth,
            catalog=config.catalog,
            rates=config.rate_table()
        )

        table = Table(title=f"12-Month Projection ({growth:.1%} monthly growth)")
        table.add_column("Month", justify="right")
        table.add_column("Monthly Cost", justify="right")
        for monthly in projection.monthly_projections:
            table.add_row(str(monthly.month), format_currency(monthly.costs.total_monthly_cost))
        console.print(table)

        console.print(f"\nTotal annual cost: {format_currency(projection.total_annual_cost)}")
        console.print(f"Average monthly cost: {format_currency(projection.average_monthly_cost)}")
        sys.exit(EXIT_CODE_PASS)

    except USER_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("break-even")
def break_even(
    fixed_costs: float = typer.Option(
        ...,
        "--fixed-costs",
        "-f",
        help="Fixed monthly costs in USD"
    ),
    revenue_per_unit: float = typer.Option(
        ...,
        "--revenue-per-unit",
        "-u",
        help="Revenue per billable request in USD"
    ),
    target_profit: float = typer.Option(
        10_000.0,
        "--target-profit",
        "-p",
        help="Monthly profit target in USD"
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help=CONFIG_OPTION_HELP
    )
):
    """Find the request volume that covers usage and fixed costs."""
    try:
        config = _load_config(config_path)
        result = find_break_even(
            fixed_costs,
            revenue_per_unit,
            target_profit=target_profit,
            catalog=config.catalog,
            rates=config.rate_table()
        )

        console.print("\n[bold]Break-Even Analysis[/bold]")
        console.print("-" * 40)
        console.print(f"Fixed monthly costs: {format_currency(result.fixed_costs)}")
        console.print(f"Revenue per request: {format_currency(result.revenue_per_unit, precision=4)}")
        console.print(f"Break-even volume: {result.break_even_units:,} requests/month")
        console.print(
            f"Volume for {format_currency(result.target_profit)} profit: "
            f"{result.profitable_at_target_units:,} requests/month"
        )
        sys.exit(EXIT_CODE_PASS)

    except USER_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def scenarios():
    """List the built-in scenario templates."""
    table = Table(title="Scenario Templates")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Requests/month", justify="right")

    for template in SCENARIO_TEMPLATES:
        table.add_row(
            template.id,
            template.name,
            template.category,
            format_large_number(template.monthly_requests)
        )
    console.print(table)


@app.command()
def rates(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help=CONFIG_OPTION_HELP
    )
):
    """Show the effective rate table."""
    try:
        config = _load_config(config_path)
        table_rates = config.rate_table()
        metadata = get_pricing_metadata(config.catalog, config.region)

        table = Table(title=f"Rates ({config.catalog.name}, {config.region})")
        table.add_column("Service")
        table.add_column("Rate", justify="right")
        table.add_column("Unit")
        for usage_field in config.catalog.fields:
            table.add_row(
                usage_field.label,
                f"${table_rates.get_rate(usage_field.rate_key):g}",
                _unit_label(usage_field.unit.value)
            )
        console.print(table)

        console.print(f"Last updated: {metadata['last_updated']}")
        console.print(f"Source: {metadata['source_url']}")
        sys.exit(EXIT_CODE_PASS)

    except USER_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


def _load_config(config_path: Optional[str]) -> PricingConfig:
    if config_path:
        return load_pricing_config(config_path)
    return default_pricing_config()


def _parse_assignments(assignments: Optional[List[str]]) -> Dict[str, str]:
    """Parse FIELD=VALUE pairs into raw field text."""
    raw: Dict[str, str] = {}
    for assignment in assignments or []:
        if "=" not in assignment:
            raise ValueError(f"Expected FIELD=VALUE, got: {assignment}")
        key, value = assignment.split("=", 1)
        raw[key.strip()] = value
    return raw


def _validate_input(
    catalog: PricingCatalog,
    scenario: Optional[str],
    assignments: Optional[List[str]]
) -> RecordValidation:
    """Merge scenario values and FIELD=VALUE overrides, then validate."""
    raw: Dict[str, str] = {}
    if scenario:
        template = get_scenario_template(scenario)
        raw.update({key: str(value) for key, value in template.usage.items()})
    raw.update(_parse_assignments(assignments))

    unknown_keys = set(raw) - set(catalog.field_keys)
    if unknown_keys:
        raise ValueError(f"Unknown usage fields for catalog {catalog.name}: {sorted(unknown_keys)}")

    logger.debug("Validating %d usage fields for catalog %s", len(raw), catalog.name)
    return validate_record(raw, catalog)


def _display_validation_errors(validation: RecordValidation) -> None:
    console.print("\n[bold red]Invalid usage input[/]")
    for key, result in validation.errors.items():
        console.print(f"- {key}: {result.message}")


def _display_breakdown(usage: UsageRecord, breakdown: CostBreakdown) -> None:
    """Display a cost breakdown in a clean, financial format."""
    table = Table(title=f"Monthly Cost Estimate ({usage.catalog.name})")
    table.add_column("Service")
    table.add_column("Usage", justify="right")
    table.add_column("Cost", justify="right")

    for usage_field in usage.catalog.fields:
        table.add_row(
            usage_field.label,
            format_large_number(usage[usage_field.key], precision=2),
            format_currency(breakdown[usage_field.key])
        )
    table.add_row("[bold]Total[/bold]", "", f"[bold]{format_currency(breakdown.total_monthly_cost)}[/bold]")

    console.print(table)


def _unit_label(divisor: int) -> str:
    return {1000: "per 1,000", 100: "per 100", 1: "per unit"}[divisor]


if __name__ == "__main__":
    app()
