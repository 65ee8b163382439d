"""Filtered row query services."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.config import get_settings
from app.filtering.compiler import compile_filters
from app.filtering.date_ranges import resolve_timezone
from app.models.column import Column
from app.models.row import Row
from app.models.table import Table
from app.schemas.filters import FilterConfig, RowPage, RowQueryRequest, RowRead

logger = logging.getLogger(__name__)


def query_rows(
    db: Session,
    table_id: int,
    request: RowQueryRequest,
    *,
    now: datetime | None = None,
) -> RowPage | None:
    """Return one page of a table's rows matching the request filters."""

    settings = get_settings()
    if db.scalar(select(Table.id).where(Table.id == table_id)) is None:
        return None

    column_types = dict(db.execute(select(Column.id, Column.type).where(Column.table_id == table_id)).all())
    filters, foreign = _bind_filters_to_columns(request.filters, column_types)

    compiled = compile_filters(
        table_id,
        request.global_search,
        filters,
        now=now,
        zone=resolve_timezone(settings.filter_timezone),
    )

    page_size = min(request.page_size, settings.row_query_max_page_size)
    offset = (request.page - 1) * page_size
    order = Row.id.desc() if request.sort_order == "desc" else Row.id.asc()

    total = int(db.scalar(select(func.count()).select_from(Row).where(compiled.condition)) or 0)
    rows = db.scalars(
        select(Row)
        .where(compiled.condition)
        .options(selectinload(Row.cells))
        .order_by(order)
        .limit(page_size)
        .offset(offset)
    ).all()

    dropped = compiled.dropped_filters + foreign
    if dropped:
        logger.info(
            "rows.query_filters_dropped table_id=%s dropped=%s applied=%s",
            table_id,
            dropped,
            compiled.applied_filters,
        )

    return RowPage(
        items=[RowRead.model_validate(row) for row in rows],
        total=total,
        page=request.page,
        page_size=page_size,
        has_more=offset + len(rows) < total,
        applied_filters=compiled.applied_filters,
        dropped_filters=dropped,
    )


def _bind_filters_to_columns(
    filters: list[FilterConfig],
    column_types: dict[int, str],
) -> tuple[list[FilterConfig], int]:
    """Keep filters on this table's columns, typed by the column's declared type."""

    bound: list[FilterConfig] = []
    foreign = 0
    for config in filters:
        if config.column_id is not None and config.column_id not in column_types:
            foreign += 1
            continue
        if config.column_id is not None:
            config = config.model_copy(update={"column_type": column_types[config.column_id]})
        bound.append(config)
    return bound, foreign
