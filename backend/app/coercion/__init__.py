"""Value coercion and the operator/predicate table."""

from app.coercion.predicates import (
    PREDICATE_TABLE,
    PredicateKind,
    PredicateRule,
    ValueFormat,
    escape_like,
    format_comparison_value,
    get_predicate_rule,
    operators_for,
)
from app.coercion.values import (
    ConversionResult,
    coerce_value,
    format_iso_timestamp,
    is_empty_value,
    parse_timestamp,
    stringify_value,
)

__all__ = [
    "PREDICATE_TABLE",
    "ConversionResult",
    "PredicateKind",
    "PredicateRule",
    "ValueFormat",
    "coerce_value",
    "escape_like",
    "format_comparison_value",
    "format_iso_timestamp",
    "get_predicate_rule",
    "is_empty_value",
    "operators_for",
    "parse_timestamp",
    "stringify_value",
]
