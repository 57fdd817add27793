"""
Type casting utilities for the flat-file parser.

This module converts raw column text into typed values (``cast_value``) and
typed values back into column text (``format_value``). Every FieldType has
exactly one parser and one formatter.

Casting never raises for bad data: the outcome is a ``CastResult`` carrying
either the value or a ``CoercionError``. Callers choose their own policy,
collecting the error or dropping it.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Context, Decimal, getcontext
from typing import Any, Callable, Dict, FrozenSet, Optional

from flatfile_parser.config_models import FieldConfig, FieldType
from flatfile_parser.date_formats import ISO_FORMATS, compile_date_format

DEFAULT_TRUE_VALUES: FrozenSet[str] = frozenset({"true", "1", "y", "yes"})
DEFAULT_FALSE_VALUES: FrozenSet[str] = frozenset({"false", "0", "n", "no"})

# Upper bound on the digits before the point of a numeric cell
MAX_NUMBER_DIGITS = 4000

_NUMBER_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
_ISO_DATETIME_RE = re.compile(
    r'^\d{4}-\d{2}-\d{2}'
    r'(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?(?:Z|[+-]\d{2}:\d{2})?)?$'
)


class CoercionError(ValueError):
    """A raw value could not be converted to its declared field type."""

    def __init__(self, field_type: FieldType, raw: str, message: str):
        super().__init__(message)
        self.field_type = field_type
        self.raw = raw


@dataclass(frozen=True)
class CastResult:
    """Outcome of one cast: a value, or the error explaining the failure."""
    value: Any = None
    error: Optional[CoercionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "CastResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CoercionError) -> "CastResult":
        return cls(error=error)


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def _quantize(d: Decimal, places: int) -> Decimal:
    prec = max(getcontext().prec, d.adjusted() + places + 2)
    return d.quantize(_quantum(places), rounding=ROUND_HALF_UP, context=Context(prec=prec))


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value))


def _to_decimal(s: str, field: FieldConfig) -> Decimal:
    if not _NUMBER_RE.match(s):
        raise CoercionError(field.type, s, f"Cannot convert '{s}' to {field.type.value}")
    d = Decimal(s)
    if d.adjusted() >= MAX_NUMBER_DIGITS:
        raise CoercionError(
            field.type, s, f"Cannot convert '{s}' to {field.type.value}: more than {MAX_NUMBER_DIGITS} digits"
        )
    return d


def _parse_text(s: str, field: FieldConfig) -> str:
    return s


def _parse_integer(s: str, field: FieldConfig) -> int:
    d = _to_decimal(s, field)
    return int(d.to_integral_value(rounding=ROUND_HALF_UP))


def _parse_decimal(s: str, field: FieldConfig) -> Decimal:
    return _quantize(_to_decimal(s, field), field.decimal_places)


def _parse_iso_datetime(s: str, field: FieldConfig) -> datetime:
    if not _ISO_DATETIME_RE.match(s):
        raise CoercionError(field.type, s, f"Cannot parse '{s}' as date with format '{field.date_format}'")
    dt = datetime.fromisoformat(s)
    # Millisecond precision, matching what format_value writes
    dt = dt.replace(microsecond=dt.microsecond - dt.microsecond % 1000)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_date(s: str, field: FieldConfig) -> datetime:
    fmt = field.date_format
    if fmt in ISO_FORMATS:
        return _parse_iso_datetime(s, field)

    parts = compile_date_format(fmt).extract(s)
    if parts is None or not all(parts):
        raise CoercionError(field.type, s, f"Cannot parse '{s}' as date with format '{fmt}'")
    year, month, day = parts
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError as e:
        raise CoercionError(field.type, s, f"Cannot parse '{s}' as date with format '{fmt}': {e}") from e


def _parse_boolean(s: str, field: FieldConfig) -> bool:
    lower = s.lower()
    true_values = frozenset({field.true_value.lower()}) if field.true_value else DEFAULT_TRUE_VALUES
    false_values = frozenset({field.false_value.lower()}) if field.false_value else DEFAULT_FALSE_VALUES

    if lower in true_values:
        return True
    if lower in false_values:
        return False
    raise CoercionError(field.type, s, f"Cannot convert '{s}' to boolean")


_PARSERS: Dict[FieldType, Callable[[str, FieldConfig], Any]] = {
    FieldType.TEXT: _parse_text,
    FieldType.INTEGER: _parse_integer,
    FieldType.DECIMAL: _parse_decimal,
    FieldType.DATE: _parse_date,
    FieldType.BOOLEAN: _parse_boolean,
}


def cast_value(raw: str, field: FieldConfig) -> CastResult:
    """Cast a raw column value to the field's declared type.

    The value is trimmed first. Text always succeeds (an empty string is a
    valid text value); every other type fails on empty input.

    Args:
        raw: Raw column text
        field: Field definition

    Returns:
        CastResult holding the typed value or the CoercionError
    """
    s = raw.strip()
    try:
        return CastResult.success(_PARSERS[field.type](s, field))
    except CoercionError as e:
        return CastResult.failure(e)
    except (ValueError, ArithmeticError) as e:
        return CastResult.failure(
            CoercionError(field.type, s, f"Cannot convert '{s}' to {field.type.value}: {e}")
        )


def coerce_value(raw: str, field: FieldConfig) -> Any:
    """Strict variant of ``cast_value``.

    Raises:
        CoercionError: When casting fails
    """
    result = cast_value(raw, field)
    if not result.ok:
        raise result.error
    return result.value


def _format_text(value: Any, field: FieldConfig) -> str:
    return str(value)


def _format_integer(value: Any, field: FieldConfig) -> str:
    rounded = _as_decimal(value).to_integral_value(rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        return "0"
    return format(rounded, "f")


def _format_decimal(value: Any, field: FieldConfig) -> str:
    quantized = _quantize(_as_decimal(value), field.decimal_places)
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    return format(quantized, "f")


def _as_utc(value: Any) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def _format_date(value: Any, field: FieldConfig) -> str:
    dt = _as_utc(value)
    fmt = field.date_format
    if fmt == "ISO":
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return (
        fmt.replace("YYYY", f"{dt.year:04d}", 1)
        .replace("MM", f"{dt.month:02d}", 1)
        .replace("DD", f"{dt.day:02d}", 1)
    )


def _format_boolean(value: Any, field: FieldConfig) -> str:
    if value:
        return field.true_value or "1"
    return field.false_value or "0"


_FORMATTERS: Dict[FieldType, Callable[[Any, FieldConfig], str]] = {
    FieldType.TEXT: _format_text,
    FieldType.INTEGER: _format_integer,
    FieldType.DECIMAL: _format_decimal,
    FieldType.DATE: _format_date,
    FieldType.BOOLEAN: _format_boolean,
}


def format_value(value: Any, field: FieldConfig) -> str:
    """Render a typed value as column text.

    None renders as an empty string for every type, required or not.
    """
    if value is None:
        return ""
    return _FORMATTERS[field.type](value, field)
