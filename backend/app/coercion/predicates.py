"""Operator table: which predicate each (operator, type family) pair compiles to.

Adding an operator or a type family is a change to ``PREDICATE_TABLE`` only; the
filter compiler dispatches on ``PredicateKind`` and never inspects operator names.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.coercion.values import stringify_value
from app.schema.column_types import (
    ColumnType,
    FilterOperator,
    TypeFamily,
    family_of,
    parse_column_type,
    parse_filter_operator,
)


class PredicateKind(str, Enum):
    """Predicate shapes the persistence layer knows how to evaluate."""

    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    WILDCARD = "wildcard"
    REGEX = "regex"
    RANGE = "range"
    MEMBERSHIP = "membership"
    STRUCTURAL_EQUALS = "structural_equals"
    EMPTY = "empty"
    CALENDAR_DAY = "calendar_day"
    DATE_BUCKET = "date_bucket"


class ValueFormat(str, Enum):
    """Transforms applied to a coerced comparison value."""

    RAW = "raw"
    CONTAINS_PATTERN = "contains_pattern"
    PREFIX_PATTERN = "prefix_pattern"
    SUFFIX_PATTERN = "suffix_pattern"
    JSON_DOCUMENT = "json_document"


@dataclass(frozen=True, slots=True)
class PredicateRule:
    kind: PredicateKind
    negate: bool = False
    value_format: ValueFormat = ValueFormat.RAW


_EQ = PredicateRule(PredicateKind.EQUALS)
_NEQ = PredicateRule(PredicateKind.EQUALS, negate=True)
_EMPTINESS = {
    FilterOperator.IS_EMPTY: PredicateRule(PredicateKind.EMPTY),
    FilterOperator.IS_NOT_EMPTY: PredicateRule(PredicateKind.EMPTY, negate=True),
}
_SUBSTRING = {
    FilterOperator.CONTAINS: PredicateRule(PredicateKind.WILDCARD, value_format=ValueFormat.CONTAINS_PATTERN),
    FilterOperator.NOT_CONTAINS: PredicateRule(
        PredicateKind.WILDCARD,
        negate=True,
        value_format=ValueFormat.CONTAINS_PATTERN,
    ),
}
_RANGES = {
    FilterOperator.BETWEEN: PredicateRule(PredicateKind.RANGE),
    FilterOperator.NOT_BETWEEN: PredicateRule(PredicateKind.RANGE, negate=True),
}
_DATE_BUCKET = PredicateRule(PredicateKind.DATE_BUCKET)

PREDICATE_TABLE: dict[TypeFamily, dict[FilterOperator, PredicateRule]] = {
    TypeFamily.TEXT: {
        FilterOperator.EQUALS: _EQ,
        FilterOperator.NOT_EQUALS: _NEQ,
        **_SUBSTRING,
        FilterOperator.STARTS_WITH: PredicateRule(PredicateKind.WILDCARD, value_format=ValueFormat.PREFIX_PATTERN),
        FilterOperator.ENDS_WITH: PredicateRule(PredicateKind.WILDCARD, value_format=ValueFormat.SUFFIX_PATTERN),
        FilterOperator.REGEX: PredicateRule(PredicateKind.REGEX),
        **_EMPTINESS,
    },
    TypeFamily.NUMERIC: {
        FilterOperator.EQUALS: _EQ,
        FilterOperator.NOT_EQUALS: _NEQ,
        FilterOperator.GREATER_THAN: PredicateRule(PredicateKind.GREATER_THAN),
        FilterOperator.GREATER_THAN_OR_EQUAL: PredicateRule(PredicateKind.GREATER_THAN_OR_EQUAL),
        FilterOperator.LESS_THAN: PredicateRule(PredicateKind.LESS_THAN),
        FilterOperator.LESS_THAN_OR_EQUAL: PredicateRule(PredicateKind.LESS_THAN_OR_EQUAL),
        **_RANGES,
        **_EMPTINESS,
    },
    TypeFamily.BOOLEAN: {
        FilterOperator.EQUALS: _EQ,
        FilterOperator.NOT_EQUALS: _NEQ,
        **_EMPTINESS,
    },
    TypeFamily.DATE: {
        FilterOperator.EQUALS: PredicateRule(PredicateKind.CALENDAR_DAY),
        FilterOperator.NOT_EQUALS: PredicateRule(PredicateKind.CALENDAR_DAY, negate=True),
        FilterOperator.BEFORE: PredicateRule(PredicateKind.LESS_THAN),
        FilterOperator.AFTER: PredicateRule(PredicateKind.GREATER_THAN),
        **_RANGES,
        FilterOperator.TODAY: _DATE_BUCKET,
        FilterOperator.YESTERDAY: _DATE_BUCKET,
        FilterOperator.THIS_WEEK: _DATE_BUCKET,
        FilterOperator.LAST_WEEK: _DATE_BUCKET,
        FilterOperator.THIS_MONTH: _DATE_BUCKET,
        FilterOperator.LAST_MONTH: _DATE_BUCKET,
        FilterOperator.THIS_YEAR: _DATE_BUCKET,
        FilterOperator.LAST_YEAR: _DATE_BUCKET,
        **_EMPTINESS,
    },
    TypeFamily.TIME: {
        FilterOperator.EQUALS: _EQ,
        FilterOperator.NOT_EQUALS: _NEQ,
        FilterOperator.BEFORE: PredicateRule(PredicateKind.LESS_THAN),
        FilterOperator.AFTER: PredicateRule(PredicateKind.GREATER_THAN),
        **_EMPTINESS,
    },
    TypeFamily.JSON: {
        FilterOperator.EQUALS: PredicateRule(PredicateKind.STRUCTURAL_EQUALS, value_format=ValueFormat.JSON_DOCUMENT),
        FilterOperator.NOT_EQUALS: PredicateRule(
            PredicateKind.STRUCTURAL_EQUALS,
            negate=True,
            value_format=ValueFormat.JSON_DOCUMENT,
        ),
        FilterOperator.CONTAINS: PredicateRule(PredicateKind.MEMBERSHIP, value_format=ValueFormat.JSON_DOCUMENT),
        FilterOperator.NOT_CONTAINS: PredicateRule(
            PredicateKind.MEMBERSHIP,
            negate=True,
            value_format=ValueFormat.JSON_DOCUMENT,
        ),
        **_EMPTINESS,
    },
    TypeFamily.REFERENCE: {
        FilterOperator.EQUALS: PredicateRule(PredicateKind.MEMBERSHIP, value_format=ValueFormat.JSON_DOCUMENT),
        FilterOperator.NOT_EQUALS: PredicateRule(
            PredicateKind.MEMBERSHIP,
            negate=True,
            value_format=ValueFormat.JSON_DOCUMENT,
        ),
        **_EMPTINESS,
    },
    TypeFamily.CUSTOM_ARRAY: {
        FilterOperator.EQUALS: _EQ,
        FilterOperator.NOT_EQUALS: _NEQ,
        **_SUBSTRING,
        **_EMPTINESS,
    },
}


def get_predicate_rule(
    operator: FilterOperator | str | None,
    column_type: ColumnType | str | None,
) -> PredicateRule | None:
    """Look up the predicate for an operator on a column type; ``None`` if unsupported."""

    parsed_operator = parse_filter_operator(operator)
    parsed_type = parse_column_type(column_type)
    if parsed_operator is None or parsed_type is None:
        return None
    return PREDICATE_TABLE[family_of(parsed_type)].get(parsed_operator)


def operators_for(column_type: ColumnType | str) -> list[FilterOperator]:
    parsed_type = parse_column_type(column_type)
    if parsed_type is None:
        return []
    return list(PREDICATE_TABLE[family_of(parsed_type)])


def format_comparison_value(rule: PredicateRule, value: Any) -> Any:
    """Apply the rule's value transform to an already-coerced comparison value."""

    if rule.value_format is ValueFormat.RAW:
        return value
    if rule.value_format is ValueFormat.JSON_DOCUMENT:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    escaped = escape_like(stringify_value(value))
    if rule.value_format is ValueFormat.CONTAINS_PATTERN:
        return f"%{escaped}%"
    if rule.value_format is ValueFormat.PREFIX_PATTERN:
        return f"{escaped}%"
    return f"%{escaped}"


def escape_like(text: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so user text matches literally."""

    return (
        text.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )
