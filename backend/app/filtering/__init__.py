"""Filter compilation over the row/cell storage model."""

from app.filtering.compiler import CompiledFilters, compile_filter, compile_filters, compile_global_search
from app.filtering.date_ranges import calendar_day_range, resolve_date_bucket, resolve_timezone

__all__ = [
    "CompiledFilters",
    "calendar_day_range",
    "compile_filter",
    "compile_filters",
    "compile_global_search",
    "resolve_date_bucket",
    "resolve_timezone",
]
