"""Closed column type system."""

from app.schema.column_types import (
    COLUMN_TYPE_FAMILIES,
    DATE_BUCKET_OPERATORS,
    EMPTINESS_OPERATORS,
    RANGE_OPERATORS,
    VALUELESS_OPERATORS,
    ColumnType,
    FilterOperator,
    TypeFamily,
    family_of,
    parse_column_type,
    parse_filter_operator,
)

__all__ = [
    "COLUMN_TYPE_FAMILIES",
    "DATE_BUCKET_OPERATORS",
    "EMPTINESS_OPERATORS",
    "RANGE_OPERATORS",
    "VALUELESS_OPERATORS",
    "ColumnType",
    "FilterOperator",
    "TypeFamily",
    "family_of",
    "parse_column_type",
    "parse_filter_operator",
]
