"""Closed column type system and filter operator vocabulary."""

from __future__ import annotations

from enum import Enum


class ColumnType(str, Enum):
    """Declared column types."""

    TEXT = "text"
    STRING = "string"
    EMAIL = "email"
    URL = "url"
    NUMBER = "number"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    JSON = "json"
    REFERENCE = "reference"
    CUSTOM_ARRAY = "customArray"


class TypeFamily(str, Enum):
    """Groups of column types that share coercion and filter behavior."""

    TEXT = "text"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    JSON = "json"
    REFERENCE = "reference"
    CUSTOM_ARRAY = "custom_array"


class FilterOperator(str, Enum):
    """Operators a filter may apply to a column."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"
    BEFORE = "before"
    AFTER = "after"
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    LAST_YEAR = "last_year"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


COLUMN_TYPE_FAMILIES: dict[ColumnType, TypeFamily] = {
    ColumnType.TEXT: TypeFamily.TEXT,
    ColumnType.STRING: TypeFamily.TEXT,
    ColumnType.EMAIL: TypeFamily.TEXT,
    ColumnType.URL: TypeFamily.TEXT,
    ColumnType.NUMBER: TypeFamily.NUMERIC,
    ColumnType.INTEGER: TypeFamily.NUMERIC,
    ColumnType.DECIMAL: TypeFamily.NUMERIC,
    ColumnType.BOOLEAN: TypeFamily.BOOLEAN,
    ColumnType.DATE: TypeFamily.DATE,
    ColumnType.DATETIME: TypeFamily.DATE,
    ColumnType.TIME: TypeFamily.TIME,
    ColumnType.JSON: TypeFamily.JSON,
    ColumnType.REFERENCE: TypeFamily.REFERENCE,
    ColumnType.CUSTOM_ARRAY: TypeFamily.CUSTOM_ARRAY,
}

EMPTINESS_OPERATORS = frozenset({FilterOperator.IS_EMPTY, FilterOperator.IS_NOT_EMPTY})
RANGE_OPERATORS = frozenset({FilterOperator.BETWEEN, FilterOperator.NOT_BETWEEN})
DATE_BUCKET_OPERATORS = frozenset(
    {
        FilterOperator.TODAY,
        FilterOperator.YESTERDAY,
        FilterOperator.THIS_WEEK,
        FilterOperator.LAST_WEEK,
        FilterOperator.THIS_MONTH,
        FilterOperator.LAST_MONTH,
        FilterOperator.THIS_YEAR,
        FilterOperator.LAST_YEAR,
    }
)
VALUELESS_OPERATORS = EMPTINESS_OPERATORS | DATE_BUCKET_OPERATORS

_COLUMN_TYPE_BY_VALUE: dict[str, ColumnType] = {member.value.lower(): member for member in ColumnType}

_COLUMN_TYPE_SYNONYMS: dict[str, ColumnType] = {
    "str": ColumnType.STRING,
    "varchar": ColumnType.STRING,
    "textarea": ColumnType.TEXT,
    "mail": ColumnType.EMAIL,
    "link": ColumnType.URL,
    "numeric": ColumnType.NUMBER,
    "int": ColumnType.INTEGER,
    "float": ColumnType.DECIMAL,
    "double": ColumnType.DECIMAL,
    "bool": ColumnType.BOOLEAN,
    "timestamp": ColumnType.DATETIME,
    "date_time": ColumnType.DATETIME,
    "custom_array": ColumnType.CUSTOM_ARRAY,
    "array": ColumnType.CUSTOM_ARRAY,
    "ref": ColumnType.REFERENCE,
}


def parse_column_type(raw_type: ColumnType | str | None) -> ColumnType | None:
    """Map a raw type label onto the closed enumeration, or ``None`` if unknown."""

    if isinstance(raw_type, ColumnType):
        return raw_type
    cleaned = _clean_text(raw_type)
    if not cleaned:
        return None
    lowered = cleaned.lower()
    return _COLUMN_TYPE_BY_VALUE.get(lowered) or _COLUMN_TYPE_SYNONYMS.get(lowered)


def parse_filter_operator(raw_operator: FilterOperator | str | None) -> FilterOperator | None:
    """Return the operator for an exact operator name, or ``None``."""

    if isinstance(raw_operator, FilterOperator):
        return raw_operator
    cleaned = _clean_text(raw_operator)
    if not cleaned:
        return None
    try:
        return FilterOperator(cleaned.lower())
    except ValueError:
        return None


def family_of(column_type: ColumnType) -> TypeFamily:
    """Return the type family of a declared column type."""

    return COLUMN_TYPE_FAMILIES[column_type]


def _clean_text(value: str | None) -> str:
    if not value:
        return ""
    return " ".join(str(value).strip().split())
