"""
Number and currency presentation helpers.
"""

import math

from babel.numbers import format_decimal

from .precision import DISPLAY_PRECISION, quantize_decimal, round_to_precision, to_decimal

_LARGE_NUMBER_UNITS = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def format_currency(
    value: float,
    precision: int = DISPLAY_PRECISION,
    show_cents: bool = True,
    locale: str = "en-US"
) -> str:
    """Format a USD amount for display.

    Non-finite values render as "$0.00". Negative values put the sign
    before the currency symbol ("-$1.23"). With show_cents disabled the
    amount is rounded to whole dollars and printed without a fraction.

    Args:
        value: Amount in USD
        precision: Fraction digits when cents are shown
        show_cents: Whether to show the fractional part
        locale: BCP 47 or POSIX locale used for digit grouping

    Returns:
        Formatted currency string
    """
    if not math.isfinite(value):
        return "$0.00"

    places = precision if show_cents else 0
    amount = quantize_decimal(to_decimal(abs(float(value))), places)

    pattern = "#,##0." + "0" * places if places > 0 else "#,##0"
    formatted = format_decimal(amount, format=pattern, locale=locale.replace("-", "_"))

    sign = "-" if value < 0 else ""
    return f"{sign}${formatted}"


def format_large_number(value: float, precision: int = 1) -> str:
    """Abbreviate a number with K, M or B units (1_500_000 -> "1.5M")."""
    if not math.isfinite(value):
        return "0"

    magnitude = abs(value)
    sign = "-" if value < 0 else ""

    for scale, suffix in _LARGE_NUMBER_UNITS:
        if magnitude >= scale:
            return f"{sign}{_plain_number(round_to_precision(magnitude / scale, precision))}{suffix}"

    return f"{sign}{_plain_number(round_to_precision(magnitude, precision))}"


def format_percent_change(before: float, after: float) -> str:
    """Format percentage change with sign."""
    if before == 0:
        return "N/A"
    percent = ((after - before) / before) * 100
    return f"{'+' if percent >= 0 else ''}{percent:,.1f}%"


def _plain_number(value: float) -> str:
    # 2.0 -> "2", 1.5 -> "1.5"
    if value == int(value):
        return str(int(value))
    return repr(value)
