"""Compile user filters into one SQLAlchemy condition over rows.

Each column filter becomes "the row has a cell under this column satisfying P";
those existential clauses, the optional global search and the table scope are
combined with AND. Filters that cannot be compiled are dropped, never raised.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any

from sqlalchemy import and_, case, func, literal, not_, or_, select
from sqlalchemy.sql.elements import ColumnElement

from app.coercion.predicates import (
    PREDICATE_TABLE,
    PredicateKind,
    escape_like,
    format_comparison_value,
)
from app.coercion.values import (
    canonical_time,
    coerce_value,
    format_iso_timestamp,
    is_empty_value,
    parse_timestamp,
)
from app.config import get_settings
from app.db.json_ops import json_boolean, json_contains, json_number, json_text
from app.filtering.date_ranges import calendar_day_range, resolve_date_bucket, resolve_timezone
from app.models.cell import Cell
from app.models.row import Row
from app.schema.column_types import (
    RANGE_OPERATORS,
    VALUELESS_OPERATORS,
    ColumnType,
    TypeFamily,
    family_of,
    parse_column_type,
    parse_filter_operator,
)
from app.schemas.filters import FilterConfig

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"
_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Named groups and conditionals compile in Python but not as PostgreSQL AREs.
_UNPORTABLE_REGEX_RE = re.compile(r"\(\?P|\(\?\(")


@dataclass(slots=True)
class CompiledFilters:
    condition: ColumnElement[bool]
    applied_filters: int
    dropped_filters: int


class _DroppedFilter(ValueError):
    pass


def compile_filters(
    table_id: int,
    global_search: str | None,
    filters: Iterable[FilterConfig],
    *,
    now: datetime | None = None,
    zone: tzinfo | None = None,
) -> CompiledFilters:
    """Build the composite row condition for a table query."""

    if zone is None:
        zone = resolve_timezone(get_settings().filter_timezone)
    if now is None:
        now = datetime.now(timezone.utc)

    clauses: list[ColumnElement[bool]] = [Row.table_id == table_id]
    search_clause = compile_global_search(global_search)
    if search_clause is not None:
        clauses.append(search_clause)

    applied = 0
    dropped = 0
    for config in filters:
        clause = compile_filter(config, now=now, zone=zone)
        if clause is None:
            dropped += 1
            continue
        applied += 1
        clauses.append(clause)

    return CompiledFilters(condition=and_(*clauses), applied_filters=applied, dropped_filters=dropped)


def compile_global_search(global_search: str | None) -> ColumnElement[bool] | None:
    """Row-level existential substring match across every cell of the row."""

    if global_search is None:
        return None
    term = global_search.strip()
    if not term:
        return None
    pattern = f"%{escape_like(term, _LIKE_ESCAPE)}%"
    return (
        select(Cell.id)
        .where(Cell.row_id == Row.id, json_text(Cell.value).ilike(pattern, escape=_LIKE_ESCAPE))
        .exists()
    )


def compile_filter(config: FilterConfig, *, now: datetime, zone: tzinfo) -> ColumnElement[bool] | None:
    """Compile one filter to an existential clause, or ``None`` when it is dropped."""

    try:
        predicate = _build_predicate(config, now=now, zone=zone)
    except _DroppedFilter as exc:
        logger.debug(
            "filters.dropped column_id=%s operator=%s column_type=%s reason=%s",
            config.column_id,
            config.operator,
            config.column_type,
            exc,
        )
        return None
    return (
        select(Cell.id)
        .where(Cell.row_id == Row.id, Cell.column_id == config.column_id, predicate)
        .exists()
    )


def _build_predicate(config: FilterConfig, *, now: datetime, zone: tzinfo) -> ColumnElement[bool]:
    if config.column_id is None:
        raise _DroppedFilter("missing column")
    operator = parse_filter_operator(config.operator)
    if operator is None:
        raise _DroppedFilter("unknown operator")
    column_type = parse_column_type(config.column_type)
    if column_type is None:
        raise _DroppedFilter("unknown column type")
    family = family_of(column_type)
    rule = PREDICATE_TABLE[family].get(operator)
    if rule is None:
        raise _DroppedFilter("operator not supported for column type")

    if operator not in VALUELESS_OPERATORS and config.value is None:
        raise _DroppedFilter("missing value")
    if operator in RANGE_OPERATORS and config.second_value is None:
        raise _DroppedFilter("missing second value")

    predicate = _PREDICATE_BUILDERS[rule.kind](config, operator, column_type, rule, now, zone)
    if rule.negate:
        return not_(predicate)
    return predicate


def _operand(value: Any, column_type: ColumnType) -> Any:
    result = coerce_value(value, column_type)
    if not result.success:
        raise _DroppedFilter(result.error or "value coercion failed")
    if family_of(column_type) is not TypeFamily.TEXT and is_empty_value(result.new_value):
        raise _DroppedFilter("empty value")
    if family_of(column_type) is TypeFamily.TIME:
        return canonical_time(result.new_value)
    return result.new_value


def _date_operand(value: Any, column_type: ColumnType, zone: tzinfo) -> tuple[datetime, bool]:
    """Resolve a date filter value to an instant and whether it named a whole day.

    Date-only and naive values are wall-clock time in ``zone``; values carrying an
    offset keep it.
    """

    moment = parse_timestamp(_operand(value, column_type))
    if moment is None:
        raise _DroppedFilter("unparsable date")
    if not isinstance(value, str):
        return moment, False
    text = value.strip()
    local = datetime.fromisoformat(text)
    if local.tzinfo is not None:
        return moment, False
    return local.replace(tzinfo=zone), _DATE_ONLY_RE.match(text) is not None


def _typed_cell_value(family: TypeFamily) -> ColumnElement[Any]:
    if family is TypeFamily.NUMERIC:
        return json_number(Cell.value)
    if family is TypeFamily.BOOLEAN:
        return json_boolean(Cell.value)
    if family is TypeFamily.TIME:
        return _canonical_time_text(json_text(Cell.value))
    return json_text(Cell.value)


def _canonical_time_text(text_value: ColumnElement[Any]) -> ColumnElement[Any]:
    """SQL counterpart of ``canonical_time``: ``9:30`` reads as ``09:30:00``."""

    padded = case((func.substr(text_value, 2, 1) == ":", literal("0").concat(text_value)), else_=text_value)
    return case((func.length(padded) == 5, padded.concat(":00")), else_=padded)


def _equals(config, operator, column_type, rule, now, zone):
    return _typed_cell_value(family_of(column_type)) == _operand(config.value, column_type)


def _comparison(config, operator, column_type, rule, now, zone):
    target = _typed_cell_value(family_of(column_type))
    if family_of(column_type) is TypeFamily.DATE:
        operand = format_iso_timestamp(_date_operand(config.value, column_type, zone)[0])
    else:
        operand = _operand(config.value, column_type)
    if rule.kind is PredicateKind.GREATER_THAN:
        return target > operand
    if rule.kind is PredicateKind.GREATER_THAN_OR_EQUAL:
        return target >= operand
    if rule.kind is PredicateKind.LESS_THAN:
        return target < operand
    return target <= operand


def _wildcard(config, operator, column_type, rule, now, zone):
    pattern = format_comparison_value(rule, _operand(config.value, column_type))
    return json_text(Cell.value).ilike(pattern, escape=_LIKE_ESCAPE)


def _regex(config, operator, column_type, rule, now, zone):
    pattern = _operand(config.value, column_type)
    if _UNPORTABLE_REGEX_RE.search(pattern):
        raise _DroppedFilter("unsupported regular expression syntax")
    try:
        re.compile(pattern)
    except re.error as exc:
        raise _DroppedFilter(f"invalid regular expression: {exc}") from None
    return json_text(Cell.value).regexp_match(pattern)


def _range(config, operator, column_type, rule, now, zone):
    if family_of(column_type) is TypeFamily.DATE:
        return _date_range(config, column_type, zone)
    low = _operand(config.value, column_type)
    high = _operand(config.second_value, column_type)
    return _typed_cell_value(family_of(column_type)).between(low, high)


def _date_range(config: FilterConfig, column_type: ColumnType, zone: tzinfo) -> ColumnElement[bool]:
    low, _ = _date_operand(config.value, column_type, zone)
    high, whole_day = _date_operand(config.second_value, column_type, zone)
    if whole_day:
        # A date-only upper bound covers that whole day.
        return _timestamp_window(low, calendar_day_range(high, zone)[1])
    return json_text(Cell.value).between(format_iso_timestamp(low), format_iso_timestamp(high))


def _membership(config, operator, column_type, rule, now, zone):
    document = format_comparison_value(rule, _operand(config.value, column_type))
    return json_contains(Cell.value, literal(document))


def _structural_equals(config, operator, column_type, rule, now, zone):
    document = literal(format_comparison_value(rule, _operand(config.value, column_type)))
    return and_(json_contains(Cell.value, document), json_contains(document, Cell.value))


def _empty(config, operator, column_type, rule, now, zone):
    text_value = json_text(Cell.value)
    return or_(Cell.value.is_(None), text_value.is_(None), text_value == "")


def _calendar_day(config, operator, column_type, rule, now, zone):
    moment, _ = _date_operand(config.value, column_type, zone)
    return _timestamp_window(*calendar_day_range(moment, zone))


def _date_bucket(config, operator, column_type, rule, now, zone):
    return _timestamp_window(*resolve_date_bucket(operator, now.astimezone(zone)))


def _timestamp_window(start: datetime, end: datetime) -> ColumnElement[bool]:
    text_value = json_text(Cell.value)
    return and_(text_value >= format_iso_timestamp(start), text_value < format_iso_timestamp(end))


_PREDICATE_BUILDERS = {
    PredicateKind.EQUALS: _equals,
    PredicateKind.GREATER_THAN: _comparison,
    PredicateKind.GREATER_THAN_OR_EQUAL: _comparison,
    PredicateKind.LESS_THAN: _comparison,
    PredicateKind.LESS_THAN_OR_EQUAL: _comparison,
    PredicateKind.WILDCARD: _wildcard,
    PredicateKind.REGEX: _regex,
    PredicateKind.RANGE: _range,
    PredicateKind.MEMBERSHIP: _membership,
    PredicateKind.STRUCTURAL_EQUALS: _structural_equals,
    PredicateKind.EMPTY: _empty,
    PredicateKind.CALENDAR_DAY: _calendar_day,
    PredicateKind.DATE_BUCKET: _date_bucket,
}
