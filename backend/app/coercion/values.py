"""Type-directed conversion of JSON cell values.

Every conversion is pure and total: failures come back as
``ConversionResult(success=False, error=...)`` so batch callers never need
per-cell exception handling.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Callable

from app.schema.column_types import ColumnType, parse_column_type

_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$")
_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off", ""})


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Outcome of coercing one value to a target column type."""

    success: bool
    new_value: Any = None
    data_loss: bool = False
    warning: str | None = None
    error: str | None = None

    @classmethod
    def converted(cls, new_value: Any, *, warning: str | None = None) -> "ConversionResult":
        return cls(success=True, new_value=new_value, warning=warning)

    @classmethod
    def lossy(cls, new_value: Any, warning: str) -> "ConversionResult":
        return cls(success=True, new_value=new_value, data_loss=True, warning=warning)

    @classmethod
    def failed(cls, error: str) -> "ConversionResult":
        return cls(success=False, error=error)


class _CoercionFailure(ValueError):
    pass


def coerce_value(value: Any, target_type: ColumnType | str) -> ConversionResult:
    """Convert ``value`` into the canonical representation for ``target_type``."""

    if value is None:
        return ConversionResult.converted(None)
    if isinstance(value, str) and value == "":
        return ConversionResult.converted("")

    column_type = parse_column_type(target_type)
    if column_type is None:
        label = target_type.value if isinstance(target_type, ColumnType) else target_type
        return ConversionResult.failed(f"Unknown column type: {label}")

    converter = _CONVERTERS[column_type]
    try:
        return converter(value)
    except _CoercionFailure as exc:
        return ConversionResult.failed(str(exc))


def is_empty_value(value: Any) -> bool:
    """True for the shapes that count as absent data."""

    return value is None or (isinstance(value, str) and value == "")


def stringify_value(value: Any) -> str:
    """Locale-independent text form of a JSON-ish value."""

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return format_iso_timestamp(value)
    if isinstance(value, date):
        return format_iso_timestamp(datetime.combine(value, time.min))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def format_iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc_moment = moment.astimezone(timezone.utc)
    return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a date-like value into an aware datetime; naive inputs are UTC."""

    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def canonical_time(text: str) -> str:
    """Zero-padded ``HH:MM:SS`` form of a time string already matching ``_TIME_RE``."""

    hours, minutes, *seconds = text.strip().split(":")
    return f"{int(hours):02d}:{minutes}:{seconds[0] if seconds else '00'}"


def _to_string(value: Any) -> ConversionResult:
    return ConversionResult.converted(stringify_value(value))


def _parse_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        if "_" in value:
            raise _CoercionFailure(f'Cannot convert "{value}" to number')
        try:
            number = float(value.strip())
        except ValueError:
            raise _CoercionFailure(f'Cannot convert "{value}" to number') from None
    else:
        raise _CoercionFailure(f"Cannot convert {_kind(value)} to number")
    if isinstance(number, float):
        if not math.isfinite(number):
            raise _CoercionFailure(f'Cannot convert "{value}" to number')
        if number.is_integer():
            return int(number)
    return number


def _to_number(value: Any) -> ConversionResult:
    return ConversionResult.converted(_parse_number(value))


def _to_integer(value: Any) -> ConversionResult:
    number = _parse_number(value)
    if isinstance(number, int):
        return ConversionResult.converted(number)
    truncated = math.trunc(number)
    return ConversionResult.lossy(truncated, f"Value {stringify_value(number)} truncated to {truncated}")


def _to_boolean(value: Any) -> ConversionResult:
    if isinstance(value, bool):
        return ConversionResult.converted(value)
    if isinstance(value, (int, float)):
        converted = value != 0
        if value in (0, 1):
            return ConversionResult.converted(converted)
        return ConversionResult.lossy(
            converted,
            f"Number {stringify_value(value)} converted to {stringify_value(converted)}",
        )
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return ConversionResult.converted(True)
        if lowered in _FALSE_WORDS:
            return ConversionResult.converted(False)
        raise _CoercionFailure(f'Cannot convert "{value}" to boolean')
    raise _CoercionFailure(f"Cannot convert {_kind(value)} to boolean")


def _to_datetime(value: Any) -> ConversionResult:
    if isinstance(value, bool) or not isinstance(value, (str, int, float, datetime, date)):
        raise _CoercionFailure(f"Cannot convert {_kind(value)} to date")
    parsed = parse_timestamp(value)
    if parsed is None:
        if isinstance(value, str):
            raise _CoercionFailure(f'Invalid date string: "{value}"')
        raise _CoercionFailure(f"Invalid timestamp: {stringify_value(value)}")
    if isinstance(value, (int, float)):
        return ConversionResult.converted(
            format_iso_timestamp(parsed),
            warning="Number interpreted as a Unix timestamp in milliseconds",
        )
    return ConversionResult.converted(format_iso_timestamp(parsed))


def _to_time(value: Any) -> ConversionResult:
    if isinstance(value, str):
        if _TIME_RE.match(value):
            return ConversionResult.converted(value)
        raise _CoercionFailure(f'Invalid time format: "{value}"')
    if isinstance(value, datetime):
        return ConversionResult.lossy(value.strftime("%H:%M:%S"), "Date part discarded")
    if isinstance(value, time):
        return ConversionResult.converted(value.strftime("%H:%M:%S"))
    raise _CoercionFailure(f"Cannot convert {_kind(value)} to time")


def _to_json(value: Any) -> ConversionResult:
    if isinstance(value, str):
        try:
            return ConversionResult.converted(json.loads(value, parse_constant=_reject_constant))
        except ValueError:
            return ConversionResult.converted(value)
    if isinstance(value, tuple):
        return ConversionResult.converted(list(value))
    return ConversionResult.converted(value)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _to_reference(value: Any) -> ConversionResult:
    if isinstance(value, (list, tuple)):
        return ConversionResult.converted([stringify_value(item) for item in value])
    return ConversionResult.converted(stringify_value(value))


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


_CONVERTERS: dict[ColumnType, Callable[[Any], ConversionResult]] = {
    ColumnType.TEXT: _to_string,
    ColumnType.STRING: _to_string,
    ColumnType.EMAIL: _to_string,
    ColumnType.URL: _to_string,
    ColumnType.NUMBER: _to_number,
    ColumnType.INTEGER: _to_integer,
    ColumnType.DECIMAL: _to_number,
    ColumnType.BOOLEAN: _to_boolean,
    ColumnType.DATE: _to_datetime,
    ColumnType.DATETIME: _to_datetime,
    ColumnType.TIME: _to_time,
    ColumnType.JSON: _to_json,
    ColumnType.REFERENCE: _to_reference,
    ColumnType.CUSTOM_ARRAY: _to_string,
}
