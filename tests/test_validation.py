"""
Unit tests for usage input validation.
"""

import pytest

from agentcore_cost.core.catalog import AGENTCORE_CATALOG, BEDROCK_AGENTS_CATALOG
from agentcore_cost.core.validation import (
    ValidationErrorCode,
    count_decimal_places,
    parse_numeric,
    sanitize_numeric_text,
    validate_field,
    validate_real_time,
    validate_record,
)


class TestNumericText:
    """Test text cleanup and parsing."""

    def test_strips_formatting(self):
        assert sanitize_numeric_text("$1,234.50") == "1234.50"
        assert sanitize_numeric_text(" 42 GB ") == "42"

    def test_keeps_first_decimal_point(self):
        assert sanitize_numeric_text("1.2.3") == "1.23"

    def test_keeps_only_leading_minus(self):
        assert sanitize_numeric_text("-12-3") == "-123"
        assert sanitize_numeric_text("12-3") == "123"

    def test_parse_numeric(self):
        assert parse_numeric("1,000") == 1000.0
        assert parse_numeric("-5") == -5.0
        assert parse_numeric(".5") == 0.5

    def test_parse_rejects_non_numbers(self):
        for text in ("", "abc", "-", ".", "-."):
            assert parse_numeric(text) is None

    def test_count_decimal_places_from_text(self):
        """Verify places are counted as written, ignoring trailing zeros."""
        assert count_decimal_places("123.456") == 3
        assert count_decimal_places("0.10") == 1
        assert count_decimal_places("100") == 0

    def test_count_decimal_places_from_float(self):
        assert count_decimal_places(0.1) == 1
        assert count_decimal_places(12.345) == 3
        assert count_decimal_places(5.0) == 0


class TestValidateField:
    """Test single-field validation and error ordering."""

    def test_valid_value(self):
        result = validate_field("123.45", "runtime_cpu_hours")
        assert result.valid is True
        assert result.sanitized_value == 123.45

    def test_too_many_decimal_places(self):
        result = validate_field("123.456", "runtime_cpu_hours")
        assert result.valid is False
        assert result.error == ValidationErrorCode.INVALID_DECIMAL_PLACES
        assert result.message == "Maximum 2 decimal places allowed"

    def test_whole_number_fields_reject_fractions(self):
        result = validate_field("10.5", "gateway_api_invocations")
        assert result.error == ValidationErrorCode.INVALID_DECIMAL_PLACES
        assert result.message == "Maximum 0 decimal places allowed"

    def test_trailing_zeros_allowed(self):
        assert validate_field("10.00", "gateway_api_invocations").valid is True

    def test_negative_value(self):
        result = validate_field("-5", "storage_gb", catalog=BEDROCK_AGENTS_CATALOG)
        assert result.error == ValidationErrorCode.NEGATIVE_NUMBER
        assert result.message == "Value must be zero or greater"

    def test_too_large(self):
        result = validate_field("100001", "runtime_cpu_hours")
        assert result.error == ValidationErrorCode.TOO_LARGE
        assert result.message == "Value is too large (maximum: 100000)"

    def test_range_checked_before_decimal_places(self):
        """Verify an out-of-range value reports TOO_LARGE even with extra places."""
        result = validate_field("200000.123", "runtime_cpu_hours")
        assert result.error == ValidationErrorCode.TOO_LARGE

    def test_not_a_number(self):
        result = validate_field("abc", "runtime_cpu_hours")
        assert result.error == ValidationErrorCode.NOT_A_NUMBER
        assert result.message == "Please enter a valid number"

    def test_empty_optional_field(self):
        result = validate_field("", "runtime_cpu_hours")
        assert result.valid is True
        assert result.sanitized_value == 0.0

    def test_empty_required_field(self):
        result = validate_field("  ", "runtime_cpu_hours", is_required=True)
        assert result.error == ValidationErrorCode.REQUIRED
        assert result.message == "This field is required"

    def test_unknown_field_raises_error(self):
        with pytest.raises(ValueError, match="Unknown usage field"):
            validate_field("1", "storage_gb")


class TestValidateRecord:
    """Test whole-record validation."""

    def test_collects_every_error(self):
        """Verify validation does not stop at the first failing field."""
        result = validate_record({
            "runtime_cpu_hours": "1.234",
            "gateway_api_invocations": "-1",
            "identity_token_requests": "5000",
        })

        assert result.valid is False
        assert set(result.errors) == {"runtime_cpu_hours", "gateway_api_invocations"}
        assert result.sanitized_values["identity_token_requests"] == 5000.0
        assert result.record["identity_token_requests"] == 5000.0
        assert result.record["runtime_cpu_hours"] == 0.0

    def test_valid_record(self):
        result = validate_record({
            "agent_invocations": "10,000",
            "storage_gb": "10",
        }, BEDROCK_AGENTS_CATALOG)

        assert result.valid is True
        assert result.errors == {}
        assert result.record.catalog is BEDROCK_AGENTS_CATALOG
        assert result.record["agent_invocations"] == 10_000.0
        assert result.record["knowledge_base_queries"] == 0.0

    def test_missing_fields_default_to_zero(self):
        result = validate_record({})
        assert result.valid is True
        assert len(result.sanitized_values) == len(AGENTCORE_CATALOG.field_keys)


class TestRealTimeValidation:
    """Test validation while typing."""

    def test_error_shown_for_typed_text(self):
        result = validate_real_time("abc", "runtime_cpu_hours")
        assert result.valid is False
        assert result.show_error is True

    def test_empty_required_field_not_shown(self):
        """Verify an empty field is invalid but not flagged yet."""
        result = validate_real_time("", "runtime_cpu_hours", is_required=True)
        assert result.valid is False
        assert result.error == ValidationErrorCode.REQUIRED
        assert result.show_error is False

    def test_valid_text(self):
        result = validate_real_time("42", "runtime_cpu_hours")
        assert result.valid is True
        assert result.show_error is False
        assert result.sanitized_value == 42.0
