"""Unit tests for cell formatting and styling"""
from datetime import date, datetime, time
from decimal import Decimal

import pytest

from src.components.cell_formatter import (
    CellFormatter,
    FormattedCell,
    cell_style,
    format_cell,
    is_long_text,
)


class TestScalarFormatting:
    """Null, boolean and numeric cells"""

    def test_null(self):
        assert format_cell(None) == FormattedCell("NULL", "null")

    def test_booleans_are_not_numbers(self):
        assert format_cell(True) == FormattedCell("TRUE", "boolean")
        assert format_cell(False) == FormattedCell("FALSE", "boolean")

    def test_integer_grouping(self):
        assert format_cell(1234567) == FormattedCell("1,234,567", "integer")
        assert format_cell(-42) == FormattedCell("-42", "integer")

    def test_integral_float_is_integer(self):
        assert format_cell(2.0) == FormattedCell("2", "integer")

    def test_decimal_keeps_at_most_six_fraction_digits(self):
        cell = format_cell(3.14159265)
        assert cell.kind == "decimal"
        assert cell.text == "3.141593"
        assert len(cell.text.split(".")[1]) <= 6

    def test_decimal_pads_to_two_fraction_digits(self):
        assert format_cell(1234.5).text == "1,234.50"
        assert format_cell(-0.5).text == "-0.50"
        assert format_cell(Decimal("10.10")).text == "10.10"

    def test_float_noise_is_rounded_away(self):
        assert format_cell(0.1 + 0.2).text == "0.30"

    def test_tiny_decimal_rounds_to_zero(self):
        assert format_cell(1e-7) == FormattedCell("0.00", "decimal")

    def test_integral_decimal_value(self):
        assert format_cell(Decimal("1500.00")) == FormattedCell("1,500", "integer")

    def test_non_finite_floats(self):
        assert format_cell(float("nan")) == FormattedCell("NaN", "decimal")
        assert format_cell(float("inf")).text == "∞"
        assert format_cell(float("-inf")).text == "-∞"


class TestStringFormatting:
    """Date-like strings are parsed, everything else passes through"""

    def test_date_string(self):
        assert format_cell("2024-01-15") == FormattedCell("01/15/2024", "date")

    def test_datetime_string(self):
        cell = format_cell("2024-01-15 14:30:05")
        assert cell == FormattedCell("01/15/2024, 02:30:05 PM", "datetime")

    def test_iso_timestamp(self):
        cell = format_cell("2024-01-15T00:05:00")
        assert cell == FormattedCell("01/15/2024, 12:05:00 AM", "datetime")

    def test_time_string(self):
        assert format_cell("13:45:00") == FormattedCell("01:45:00 PM", "time")

    @pytest.mark.parametrize("value", ["2024-02-30", "25:61:00", "2024-01-15 99:00:00"])
    def test_invalid_dates_fall_back_to_string(self, value):
        assert format_cell(value) == FormattedCell(value, "string")

    def test_partial_date_is_plain_string(self):
        assert format_cell("2024-01-15 and more").kind == "string"

    def test_plain_string_unchanged(self):
        assert format_cell("hello, world") == FormattedCell("hello, world", "string")


class TestStructuredFormatting:
    """Native temporal values, JSON-like objects and fallbacks"""

    def test_native_datetime(self):
        cell = format_cell(datetime(2024, 1, 15, 9, 5, 3))
        assert cell == FormattedCell("01/15/2024, 09:05:03 AM", "datetime")

    def test_native_date_and_time(self):
        assert format_cell(date(2024, 1, 15)) == FormattedCell("01/15/2024", "date")
        assert format_cell(time(23, 0, 0)) == FormattedCell("11:00:00 PM", "time")

    def test_dict_pretty_printed(self):
        assert format_cell({"a": 1}) == FormattedCell('{\n  "a": 1\n}', "json")

    def test_list_pretty_printed(self):
        assert format_cell([1, 2]).text == "[\n  1,\n  2\n]"

    def test_unserializable_object_falls_back(self):
        value = {"when": datetime(2024, 1, 1)}
        cell = format_cell(value)
        assert cell.kind == "object"
        assert cell.text == str(value)

    def test_unknown_type(self):
        cell = format_cell(b"raw")
        assert cell == FormattedCell("b'raw'", "unknown")

    def test_formatting_is_idempotent(self):
        for value in [None, 3.5, "2024-01-15", {"a": [1, 2]}, True]:
            assert format_cell(value) == format_cell(value)


class TestFormatterOptions:
    """Alternative display conventions"""

    def test_24_hour_iso_dates(self):
        formatter = CellFormatter(
            date_format="{year:04d}-{month:02d}-{day:02d}",
            datetime_separator=" ",
            use_12_hour=False,
        )
        cell = format_cell("2024-01-15 14:30:05", formatter)
        assert cell.text == "2024-01-15 14:30:05"


class TestLongText:
    """Long-text detection and cell styling"""

    def test_threshold_is_strict(self):
        assert is_long_text("x" * 75) is True
        assert is_long_text("x" * 51) is True
        assert is_long_text("x" * 50) is False
        assert FormattedCell("x" * 50, "string").is_long_text is False

    def test_style_by_kind(self):
        assert cell_style(format_cell(None)).classes == ("cell-null",)
        assert cell_style(format_cell(3)).classes == ("cell-number",)
        assert cell_style(format_cell("2024-01-15")).classes == ("cell-temporal",)
        assert cell_style(format_cell("plain")).classes == ("cell-text",)

    def test_long_cell_is_clamped_until_expanded(self):
        cell = format_cell("y" * 80)
        collapsed = cell_style(cell)
        assert "cell-clamped" in collapsed.classes
        assert collapsed.title == "Double-click to expand"

        expanded = cell_style(cell, expanded=True)
        assert "cell-expanded" in expanded.classes
        assert expanded.title is None
        assert expanded.class_attr == "cell-text cell-expanded"


class TestJsonValidity:
    """Cells tagged json always carry valid JSON text"""

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_members_fall_back_to_object(self, bad):
        value = {"a": bad}
        cell = format_cell(value)
        assert cell.kind == "object"
        assert cell.text == str(value)
