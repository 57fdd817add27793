"""Tests for type casting and formatting."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from flatfile_parser.casting import (
    DEFAULT_FALSE_VALUES,
    DEFAULT_TRUE_VALUES,
    CoercionError,
    _FORMATTERS,
    _PARSERS,
    cast_value,
    coerce_value,
    format_value,
)
from flatfile_parser.config_models import FieldConfig, FieldType


def make_field(type_, **overrides) -> FieldConfig:
    return FieldConfig(name="test", position=0, type=type_, **overrides)


def test_every_field_type_has_parser_and_formatter():
    """Adding a FieldType without casting support must not go unnoticed."""
    assert set(_PARSERS) == set(FieldType)
    assert set(_FORMATTERS) == set(FieldType)


class TestText:
    def test_returns_trimmed_string(self):
        assert coerce_value("  hello  ", make_field("text")) == "hello"

    def test_whitespace_only_is_empty_string(self):
        result = cast_value("   ", make_field("text"))
        assert result.ok
        assert result.value == ""

    def test_preserves_internal_spaces(self):
        assert coerce_value("Alice Smith", make_field("text")) == "Alice Smith"


class TestInteger:
    @pytest.mark.parametrize("raw,expected", [
        ("1001", 1001),
        ("-42", -42),
        ("+7", 7),
        (" 12 ", 12),
        ("5.0", 5),
        ("1e3", 1000),
        ("3.14", 3),
        ("2.5", 3),
        ("-2.5", -3),
        ("0.4", 0),
    ])
    def test_converts_numbers(self, raw, expected):
        value = coerce_value(raw, make_field("integer"))
        assert value == expected
        assert isinstance(value, int)

    @pytest.mark.parametrize("raw", ["abc", "", "  ", "12abc", "0x1F", "1,000"])
    def test_rejects_non_integers(self, raw):
        result = cast_value(raw, make_field("integer"))
        assert not result.ok
        assert result.value is None
        assert isinstance(result.error, CoercionError)
        assert result.error.field_type == FieldType.INTEGER

    @pytest.mark.parametrize("raw", ["1e99999999", "1e4001", "9" * 4001])
    def test_rejects_oversized_numbers(self, raw):
        result = cast_value(raw, make_field("integer"))
        assert not result.ok
        assert "digits" in str(result.error)

    def test_legacy_number_type_accepts_fractions(self):
        assert coerce_value("3.14", make_field("number")) == 3

    def test_largest_accepted_number(self):
        assert coerce_value("1e3999", make_field("integer")) == 10 ** 3999

    def test_tiny_exponent_rounds_to_zero(self):
        assert coerce_value("1e-99999999", make_field("integer")) == 0

    def test_strict_variant_raises(self):
        with pytest.raises(CoercionError):
            coerce_value("abc", make_field("integer"))

    def test_coercion_error_is_value_error(self):
        with pytest.raises(ValueError):
            coerce_value("abc", make_field("integer"))


class TestDecimal:
    def test_applies_default_two_places(self):
        assert coerce_value("75000.50", make_field("decimal")) == Decimal("75000.50")

    def test_rounds_to_custom_places(self):
        assert coerce_value("3.14159", make_field("decimal", decimal_places=3)) == Decimal("3.142")

    def test_zero_places_rounds_half_up(self):
        assert coerce_value("42.9", make_field("decimal", decimal_places=0)) == Decimal("43")

    def test_half_rounds_away_from_zero(self):
        assert coerce_value("2.345", make_field("decimal")) == Decimal("2.35")
        assert coerce_value("-2.345", make_field("decimal")) == Decimal("-2.35")

    def test_negative_value(self):
        assert coerce_value("-1200.00", make_field("decimal")) == Decimal("-1200")

    @pytest.mark.parametrize("raw", ["abc", "", "NaN", "Infinity", "1.2.3"])
    def test_rejects_non_numeric(self, raw):
        assert not cast_value(raw, make_field("decimal")).ok

    def test_rejects_oversized_numbers(self):
        assert not cast_value("1e99999999", make_field("decimal")).ok

    def test_more_digits_than_default_precision(self):
        raw = "1234567890123456789012345678901234.567"
        assert coerce_value(raw, make_field("decimal")) == Decimal("1234567890123456789012345678901234.57")


class TestDate:
    @pytest.mark.parametrize("raw,fmt", [
        ("19850315", "YYYYMMDD"),
        ("15/03/1985", "DD/MM/YYYY"),
        ("03/15/1985", "MM/DD/YYYY"),
        ("1985.03.15", "YYYY.MM.DD"),
        ("15-03-1985", "DD-MM-YYYY"),
    ])
    def test_token_formats(self, raw, fmt):
        value = coerce_value(raw, make_field("date", date_format=fmt))
        assert value == datetime(1985, 3, 15, tzinfo=timezone.utc)

    def test_yyyymmdd_parts(self):
        value = coerce_value("19850315", make_field("date", date_format="YYYYMMDD"))
        assert (value.year, value.month - 1, value.day) == (1985, 2, 15)
        assert value.utcoffset() == timedelta(0)

    def test_yyyy_mm_dd_uses_iso_parser(self):
        value = coerce_value("2024-01-15", make_field("date", date_format="YYYY-MM-DD"))
        assert value == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_iso_is_default(self):
        value = coerce_value("2024-01-15T00:00:00.000Z", make_field("date"))
        assert value == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_iso_with_offset_is_normalized_to_utc(self):
        value = coerce_value("2024-01-15T02:30:00+02:00", make_field("date"))
        assert value == datetime(2024, 1, 15, 0, 30, tzinfo=timezone.utc)
        assert value.tzinfo == timezone.utc

    def test_iso_fraction_truncated_to_milliseconds(self):
        value = coerce_value("2024-01-01T00:00:00.123456Z", make_field("date"))
        assert value.microsecond == 123000

    def test_invalid_date_string(self):
        assert not cast_value("not-a-date", make_field("date")).ok

    def test_value_not_matching_format(self):
        assert not cast_value("2024-01-15", make_field("date", date_format="YYYYMMDD")).ok

    def test_basic_form_rejected_for_iso_formats(self):
        assert not cast_value("19850315", make_field("date", date_format="YYYY-MM-DD")).ok
        assert not cast_value("19850315", make_field("date")).ok

    @pytest.mark.parametrize("raw", ["19851315", "19850230", "00000315", "19850015"])
    def test_invalid_calendar_dates(self, raw):
        assert not cast_value(raw, make_field("date", date_format="YYYYMMDD")).ok

    def test_error_names_format(self):
        result = cast_value("2024-01-15", make_field("date", date_format="YYYYMMDD"))
        assert "YYYYMMDD" in str(result.error)
        assert result.error.raw == "2024-01-15"


class TestBoolean:
    @pytest.mark.parametrize("raw", ["true", "1", "y", "yes", "YES", "True", "Y"])
    def test_default_true_set(self, raw):
        assert coerce_value(raw, make_field("boolean")) is True

    @pytest.mark.parametrize("raw", ["false", "0", "n", "no", "NO", "False", "N"])
    def test_default_false_set(self, raw):
        assert coerce_value(raw, make_field("boolean")) is False

    def test_custom_true_value_is_case_insensitive(self):
        fld = make_field("boolean", true_value="Y")
        assert coerce_value("Y", fld) is True
        assert coerce_value("y", fld) is True

    def test_custom_false_value_is_case_insensitive(self):
        fld = make_field("boolean", false_value="N")
        assert coerce_value("N", fld) is False
        assert coerce_value("n", fld) is False

    def test_custom_token_replaces_default_set(self):
        fld = make_field("boolean", true_value="T", false_value="F")
        assert not cast_value("yes", fld).ok
        assert coerce_value("f", fld) is False

    @pytest.mark.parametrize("raw", ["maybe", ""])
    def test_unrecognized_value(self, raw):
        assert not cast_value(raw, make_field("boolean")).ok

    def test_default_sets_are_immutable(self):
        assert isinstance(DEFAULT_TRUE_VALUES, frozenset)
        assert isinstance(DEFAULT_FALSE_VALUES, frozenset)


class TestFormatValue:
    @pytest.mark.parametrize("type_", list(FieldType))
    def test_none_is_empty_for_every_type(self, type_):
        assert format_value(None, make_field(type_)) == ""
        assert format_value(None, make_field(type_, required=True)) == ""

    def test_integer_rounds(self):
        assert format_value(9.7, make_field("integer")) == "10"
        assert format_value(42, make_field("integer")) == "42"
        assert format_value(-2.5, make_field("integer")) == "-3"
        assert format_value(-0.4, make_field("integer")) == "0"

    def test_integer_beyond_string_conversion_limit(self):
        assert format_value(10 ** 5000, make_field("integer")) == "1" + "0" * 5000

    def test_decimal_fixed_places(self):
        assert format_value(1234.5678, make_field("decimal")) == "1234.57"
        assert format_value(Decimal("75000.5"), make_field("decimal")) == "75000.50"
        assert format_value(43, make_field("decimal", decimal_places=0)) == "43"
        assert format_value(-0.001, make_field("decimal")) == "0.00"

    def test_date_iso(self):
        value = datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert format_value(value, make_field("date")) == "2024-01-15T00:00:00.000Z"

    def test_date_iso_converts_to_utc(self):
        value = datetime(2024, 1, 15, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_value(value, make_field("date")) == "2024-01-15T00:00:00.000Z"

    @pytest.mark.parametrize("fmt,expected", [
        ("YYYYMMDD", "19850315"),
        ("DD/MM/YYYY", "15/03/1985"),
        ("MM/DD/YYYY", "03/15/1985"),
        ("YYYY-MM-DD", "1985-03-15"),
    ])
    def test_date_token_formats(self, fmt, expected):
        value = datetime(1985, 3, 15, tzinfo=timezone.utc)
        assert format_value(value, make_field("date", date_format=fmt)) == expected

    def test_plain_date_accepted(self):
        assert format_value(date(1985, 3, 5), make_field("date", date_format="YYYYMMDD")) == "19850305"

    def test_small_year_is_zero_padded(self):
        value = datetime(985, 3, 5, tzinfo=timezone.utc)
        assert format_value(value, make_field("date", date_format="DD/MM/YYYY")) == "05/03/0985"

    def test_boolean_defaults(self):
        assert format_value(True, make_field("boolean")) == "1"
        assert format_value(False, make_field("boolean")) == "0"

    def test_boolean_custom_tokens(self):
        fld = make_field("boolean", true_value="Y", false_value="N")
        assert format_value(True, fld) == "Y"
        assert format_value(False, fld) == "N"

    def test_text(self):
        assert format_value("Alice", make_field("text")) == "Alice"
