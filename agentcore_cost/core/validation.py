"""
Input validation for usage fields.

Validation problems are returned as values, never raised: every form field
gets a FieldValidation describing whether its text is usable and why not.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from .catalog import DEFAULT_CATALOG, PricingCatalog, UsageField
from .precision import to_decimal
from .usage import UsageRecord, sanitize_usage_record


class ValidationErrorCode(Enum):
    """Reasons a field value is rejected."""
    REQUIRED = "required"
    NOT_A_NUMBER = "not_a_number"
    NEGATIVE_NUMBER = "negative_number"
    TOO_SMALL = "too_small"
    TOO_LARGE = "too_large"
    INVALID_DECIMAL_PLACES = "invalid_decimal_places"


VALIDATION_MESSAGES: Dict[ValidationErrorCode, str] = {
    ValidationErrorCode.REQUIRED: "This field is required",
    ValidationErrorCode.NOT_A_NUMBER: "Please enter a valid number",
    ValidationErrorCode.NEGATIVE_NUMBER: "Value must be zero or greater",
    ValidationErrorCode.TOO_LARGE: "Value is too large (maximum: {max})",
    ValidationErrorCode.TOO_SMALL: "Value is too small (minimum: {min})",
    ValidationErrorCode.INVALID_DECIMAL_PLACES: "Maximum {places} decimal places allowed",
}


@dataclass(frozen=True)
class FieldValidation:
    """Validation outcome for a single field."""
    valid: bool
    error: Optional[ValidationErrorCode] = None
    message: Optional[str] = None
    sanitized_value: Optional[float] = None


@dataclass(frozen=True)
class RealTimeValidation:
    """Validation outcome plus whether an interface should show the error now."""
    valid: bool
    error: Optional[ValidationErrorCode]
    message: Optional[str]
    sanitized_value: Optional[float]
    show_error: bool


@dataclass(frozen=True)
class RecordValidation:
    """Validation outcome for a whole set of fields."""
    valid: bool
    errors: Dict[str, FieldValidation] = field(default_factory=dict)
    sanitized_values: Dict[str, float] = field(default_factory=dict)
    record: Optional[UsageRecord] = None


def sanitize_numeric_text(raw: str) -> str:
    """Strip text down to digits, one decimal point and a leading minus.

    Every character other than a digit, "." or "-" is removed. Only the
    first "." survives. A "-" survives only if it was the first character
    of the input; interior minus signs are dropped.
    """
    if not isinstance(raw, str):
        return ""

    cleaned = "".join(ch for ch in raw if ch in "0123456789.-")

    decimal_index = cleaned.find(".")
    if decimal_index != -1:
        cleaned = cleaned[:decimal_index + 1] + cleaned[decimal_index + 1:].replace(".", "")

    if "-" in cleaned:
        is_negative = cleaned.startswith("-")
        cleaned = cleaned.replace("-", "")
        if is_negative:
            cleaned = "-" + cleaned

    return cleaned


def parse_numeric(raw: str) -> Optional[float]:
    """Parse text into a finite float, or None if it is not a number."""
    cleaned = sanitize_numeric_text(raw)

    if cleaned in ("", "-", "."):
        return None

    try:
        parsed = float(cleaned)
    except ValueError:
        return None

    if not math.isfinite(parsed):
        return None

    return parsed


def count_decimal_places(value: Union[float, str]) -> int:
    """Count significant fraction digits.

    Text is counted as written (after sanitization) so "0.10" has one
    place; floats are counted from their shortest representation.
    """
    if isinstance(value, str):
        cleaned = sanitize_numeric_text(value)
        if "." not in cleaned:
            return 0
        return len(cleaned.split(".", 1)[1].rstrip("0"))

    if not math.isfinite(value) or value == math.floor(value):
        return 0
    exponent = to_decimal(float(value)).normalize().as_tuple().exponent
    return max(0, -exponent)


def validate_field(
    raw: str,
    field_key: str,
    is_required: bool = False,
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> FieldValidation:
    """Validate the text of one usage field against its bounds.

    Checks run in a fixed order: required, parseable, non-negative,
    minimum, maximum, decimal places.

    Args:
        raw: Text as entered
        field_key: Usage field the text belongs to
        is_required: Whether an empty value is an error
        catalog: Catalog defining the field bounds

    Returns:
        FieldValidation with the parsed value or the first failing check

    Raises:
        ValueError: If the field is not part of the catalog
    """
    usage_field = catalog.get_field(field_key)
    is_empty = raw is None or not str(raw).strip()

    if is_empty:
        if is_required:
            return _invalid(ValidationErrorCode.REQUIRED)
        return FieldValidation(valid=True, sanitized_value=0.0)

    parsed = parse_numeric(raw)
    if parsed is None:
        return _invalid(ValidationErrorCode.NOT_A_NUMBER)

    return _check_bounds(usage_field, parsed, raw)


def validate_record(
    raw_values: Mapping[str, str],
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> RecordValidation:
    """Validate every field of a catalog without stopping at the first error.

    Missing fields count as empty, optional input and default to 0.

    Returns:
        RecordValidation listing every failing field, the values that
        passed, and a complete UsageRecord where failing fields are 0
    """
    errors: Dict[str, FieldValidation] = {}
    sanitized_values: Dict[str, float] = {}

    for key in catalog.field_keys:
        result = validate_field(raw_values.get(key) or "", key, is_required=False, catalog=catalog)
        if result.valid:
            sanitized_values[key] = result.sanitized_value or 0.0
        else:
            errors[key] = result

    return RecordValidation(
        valid=not errors,
        errors=errors,
        sanitized_values=sanitized_values,
        record=sanitize_usage_record(sanitized_values, catalog)
    )


def validate_real_time(
    text: str,
    field_key: str,
    is_required: bool = False,
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> RealTimeValidation:
    """Validate while the user types.

    An empty field is never flagged for display, even when it is required
    and therefore invalid.
    """
    result = validate_field(text, field_key, is_required, catalog)
    show_error = not result.valid and bool(text and text.strip())

    return RealTimeValidation(
        valid=result.valid,
        error=result.error,
        message=result.message,
        sanitized_value=result.sanitized_value,
        show_error=show_error
    )


def _check_bounds(usage_field: UsageField, value: float, raw: str) -> FieldValidation:
    bounds = usage_field.bounds

    # Ahead of the minimum check: every field has a minimum of 0
    if value < 0:
        return _invalid(ValidationErrorCode.NEGATIVE_NUMBER)

    if value < bounds.min_value:
        return _invalid(ValidationErrorCode.TOO_SMALL, min=_plain(bounds.min_value))

    if value > bounds.max_value:
        return _invalid(ValidationErrorCode.TOO_LARGE, max=_plain(bounds.max_value))

    if count_decimal_places(raw) > bounds.max_decimal_places:
        return _invalid(ValidationErrorCode.INVALID_DECIMAL_PLACES, places=bounds.max_decimal_places)

    return FieldValidation(valid=True, sanitized_value=value)


def _invalid(code: ValidationErrorCode, **params) -> FieldValidation:
    return FieldValidation(
        valid=False,
        error=code,
        message=VALIDATION_MESSAGES[code].format(**params)
    )


def _plain(bound: float) -> str:
    return str(int(bound)) if bound == int(bound) else str(bound)
