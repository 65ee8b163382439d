"""Calendar-aligned date ranges for relative date filters.

Every range is start-inclusive and end-exclusive. Boundaries are computed in the
zone of the ``now`` passed in; weeks start on Sunday.
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.schema.column_types import FilterOperator


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the named IANA zone, falling back to UTC for blank or unknown names."""

    if not name or not name.strip():
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def resolve_date_bucket(operator: FilterOperator, now: datetime) -> tuple[datetime, datetime]:
    """Return ``(start, end)`` of the relative bucket named by ``operator``."""

    today = _start_of_day(now)
    if operator is FilterOperator.TODAY:
        return today, today + timedelta(days=1)
    if operator is FilterOperator.YESTERDAY:
        return today - timedelta(days=1), today
    if operator in (FilterOperator.THIS_WEEK, FilterOperator.LAST_WEEK):
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        if operator is FilterOperator.LAST_WEEK:
            return week_start - timedelta(days=7), week_start
        return week_start, week_start + timedelta(days=7)
    if operator in (FilterOperator.THIS_MONTH, FilterOperator.LAST_MONTH):
        month_start = today.replace(day=1)
        if operator is FilterOperator.LAST_MONTH:
            return _shift_month(month_start, -1), month_start
        return month_start, _shift_month(month_start, 1)
    if operator in (FilterOperator.THIS_YEAR, FilterOperator.LAST_YEAR):
        year_start = today.replace(month=1, day=1)
        if operator is FilterOperator.LAST_YEAR:
            return year_start.replace(year=year_start.year - 1), year_start
        return year_start, year_start.replace(year=year_start.year + 1)
    raise ValueError(f"{operator.value} is not a relative date operator")


def calendar_day_range(moment: datetime, zone: tzinfo) -> tuple[datetime, datetime]:
    """Return the day in ``zone`` that contains ``moment``."""

    start = _start_of_day(moment.astimezone(zone))
    return start, start + timedelta(days=1)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _shift_month(month_start: datetime, months: int) -> datetime:
    index = month_start.year * 12 + (month_start.month - 1) + months
    return month_start.replace(year=index // 12, month=index % 12 + 1)
