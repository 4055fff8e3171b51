"""Type-aware formatting of raw result cells for display and export.

``format_cell`` classifies a value coming back from the database into a
``FormattedCell`` (display text plus a kind tag).  Classification is pure:
the same value always yields the same cell, and malformed values never
raise -- invalid dates fall back to plain strings and objects that cannot
be serialized fall back to ``str()``.
"""

import json
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional, Tuple

LONG_TEXT_THRESHOLD = 50

KIND_NULL = "null"
KIND_INTEGER = "integer"
KIND_DECIMAL = "decimal"
KIND_BOOLEAN = "boolean"
KIND_DATE = "date"
KIND_DATETIME = "datetime"
KIND_TIME = "time"
KIND_JSON = "json"
KIND_OBJECT = "object"
KIND_STRING = "string"
KIND_UNKNOWN = "unknown"

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
_DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")
_TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_TIME_PATTERN = re.compile(r"\d{2}:\d{2}:\d{2}")

_MAX_FRACTION = Decimal("0.000001")
_MIN_FRACTION_DIGITS = 2


@dataclass(frozen=True)
class FormattedCell:
    """Display text for one cell and the kind it was classified as."""

    text: str
    kind: str

    @property
    def is_long_text(self) -> bool:
        return is_long_text(self.text)


def is_long_text(text: str, threshold: int = LONG_TEXT_THRESHOLD) -> bool:
    """Long cells are clamped by default and can be expanded one at a time."""
    return len(text) > threshold


class CellFormatter:
    """Formats cells using a fixed, locale-like set of display conventions.

    The defaults reproduce US English output: ``1,234.50``, ``01/15/2024``
    and ``01/15/2024, 10:30:00 AM``.
    """

    def __init__(
        self,
        date_format: str = "{month:02d}/{day:02d}/{year:04d}",
        datetime_separator: str = ", ",
        use_12_hour: bool = True,
    ):
        self.date_format = date_format
        self.datetime_separator = datetime_separator
        self.use_12_hour = use_12_hour

    def format(self, value: Any) -> FormattedCell:
        """Classify and render a single cell value."""
        if value is None:
            return FormattedCell("NULL", KIND_NULL)

        # bool is a subclass of int, so it has to be checked first
        if isinstance(value, bool):
            return FormattedCell("TRUE" if value else "FALSE", KIND_BOOLEAN)

        if isinstance(value, (int, float, Decimal)):
            return self._format_number(value)

        if isinstance(value, str):
            return self._format_string(value)

        # datetime is a subclass of date
        if isinstance(value, datetime):
            return FormattedCell(self._datetime_text(value), KIND_DATETIME)
        if isinstance(value, date):
            return FormattedCell(self._date_text(value), KIND_DATE)
        if isinstance(value, time):
            return FormattedCell(self._time_text(value), KIND_TIME)

        if isinstance(value, (dict, list, tuple, set, frozenset)):
            try:
                return FormattedCell(
                    json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False), KIND_JSON
                )
            except (TypeError, ValueError):
                return FormattedCell(_coerce(value), KIND_OBJECT)

        return FormattedCell(_coerce(value), KIND_UNKNOWN)

    # ------------------------------------------------------------------
    # Numbers
    # ------------------------------------------------------------------

    def _format_number(self, value) -> FormattedCell:
        if isinstance(value, float) and not math.isfinite(value):
            return FormattedCell(_non_finite_text(value), KIND_DECIMAL)
        if isinstance(value, Decimal) and not value.is_finite():
            text = "NaN" if value.is_nan() else ("-∞" if value.is_signed() else "∞")
            return FormattedCell(text, KIND_DECIMAL)

        if isinstance(value, int):
            return FormattedCell(f"{value:,}", KIND_INTEGER)
        if isinstance(value, float) and value.is_integer():
            return FormattedCell(f"{int(value):,}", KIND_INTEGER)

        # repr() gives the shortest string that round-trips the float
        number = value if isinstance(value, Decimal) else Decimal(repr(value))
        if number == number.to_integral_value():
            return FormattedCell(f"{int(number):,}", KIND_INTEGER)
        return FormattedCell(_decimal_text(number), KIND_DECIMAL)

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _format_string(self, value: str) -> FormattedCell:
        if _DATETIME_PATTERN.match(value) or _TIMESTAMP_PATTERN.match(value):
            parsed = _parse(datetime.fromisoformat, value)
            if parsed is not None:
                return FormattedCell(self._datetime_text(parsed), KIND_DATETIME)
        elif _DATE_PATTERN.fullmatch(value):
            parsed = _parse(date.fromisoformat, value)
            if parsed is not None:
                return FormattedCell(self._date_text(parsed), KIND_DATE)
        elif _TIME_PATTERN.fullmatch(value):
            parsed = _parse(time.fromisoformat, value)
            if parsed is not None:
                return FormattedCell(self._time_text(parsed), KIND_TIME)

        return FormattedCell(value, KIND_STRING)

    # ------------------------------------------------------------------
    # Temporal text
    # ------------------------------------------------------------------

    def _date_text(self, value: date) -> str:
        return self.date_format.format(year=value.year, month=value.month, day=value.day)

    def _time_text(self, value) -> str:
        if not self.use_12_hour:
            return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        hour = value.hour % 12 or 12
        suffix = "AM" if value.hour < 12 else "PM"
        return f"{hour:02d}:{value.minute:02d}:{value.second:02d} {suffix}"

    def _datetime_text(self, value: datetime) -> str:
        # Aware values are shown in their own offset
        return f"{self._date_text(value)}{self.datetime_separator}{self._time_text(value)}"


def _parse(parser, value: str):
    try:
        return parser(value)
    except ValueError:
        return None


def _decimal_text(number: Decimal) -> str:
    """Group thousands and keep between 2 and 6 fraction digits."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(number.as_tuple().digits) + 8)
        try:
            rounded = number.quantize(_MAX_FRACTION, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            rounded = number
    whole, _, fraction = f"{rounded:,f}".partition(".")
    fraction = fraction.rstrip("0").ljust(_MIN_FRACTION_DIGITS, "0")
    return f"{whole}.{fraction}"


def _non_finite_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "∞" if value > 0 else "-∞"


def _coerce(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return repr(value)


_default_formatter = CellFormatter()


def format_cell(value: Any, formatter: Optional[CellFormatter] = None) -> FormattedCell:
    """Format ``value`` with ``formatter`` (US English conventions by default)."""
    return (formatter or _default_formatter).format(value)


# ------------------------------------------------------------------
# Declarative cell styling
# ------------------------------------------------------------------

_KIND_CLASSES = {
    KIND_NULL: "cell-null",
    KIND_INTEGER: "cell-number",
    KIND_DECIMAL: "cell-number",
    KIND_BOOLEAN: "cell-boolean",
    KIND_DATE: "cell-temporal",
    KIND_DATETIME: "cell-temporal",
    KIND_TIME: "cell-temporal",
    KIND_JSON: "cell-json",
}


@dataclass(frozen=True)
class CellStyle:
    """CSS classes and hover hint for a rendered cell."""

    classes: Tuple[str, ...]
    title: Optional[str] = None

    @property
    def class_attr(self) -> str:
        return " ".join(self.classes)


def cell_style(
    cell: FormattedCell,
    expanded: bool = False,
    long_text_threshold: int = LONG_TEXT_THRESHOLD,
) -> CellStyle:
    """Map a formatted cell and its expansion state to a style descriptor."""
    classes = [_KIND_CLASSES.get(cell.kind, "cell-text")]
    title = None
    if is_long_text(cell.text, long_text_threshold):
        if expanded:
            classes.append("cell-expanded")
        else:
            classes.append("cell-clamped")
            title = "Double-click to expand"
    return CellStyle(tuple(classes), title)
