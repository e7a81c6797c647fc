"""
Precision helpers for cost arithmetic.

Floats are converted to Decimal through their shortest repr, so values like
1.235 round the way they read instead of the way they are stored.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

# Significant digits; enough to quantize any finite float to a few places
DECIMAL_CONTEXT_PRECISION = 400

CURRENCY_PRECISION = 4  # calculations
DISPLAY_PRECISION = 2   # display


def to_decimal(value: Union[float, int, str, Decimal, None]) -> Decimal:
    """Convert a value to Decimal without binary artifacts."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value))


def quantize_decimal(value: Decimal, places: int) -> Decimal:
    """Quantize to a number of decimal places, half away from zero."""
    quantizer = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_CONTEXT_PRECISION
        return value.quantize(quantizer, rounding=ROUND_HALF_UP)


def round_to_precision(value: float, places: int) -> float:
    """Round a float half away from zero; non-finite values pass through."""
    if not math.isfinite(value):
        return value
    return float(quantize_decimal(to_decimal(float(value)), places))
