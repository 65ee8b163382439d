"""Transactional column type migration.

A type change rewrites every cell of the column under the caller's failure
policy and updates the declared type in the same transaction. Either all of it
commits or none of it does.
"""

from __future__ import annotations

import logging
import threading
from time import perf_counter
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.coercion.values import coerce_value, is_empty_value
from app.config import Settings, get_settings
from app.models.cell import Cell
from app.models.column import Column
from app.models.column_type_change_log import ColumnTypeChangeLog
from app.schema.column_types import ColumnType, parse_column_type
from app.schemas.columns import (
    CellConversionLogEntry,
    ColumnRead,
    TypeChangeOptions,
    TypeChangeResult,
    TypeChangeStats,
)
from app.services.cell_batches import iter_cell_batches

logger = logging.getLogger(__name__)

TRANSACTION_FAILED = "TRANSACTION_FAILED"
INVALID_COLUMN_TYPE = "INVALID_COLUMN_TYPE"


class TypeChangeError(RuntimeError):
    """Raised when a column type change cannot be applied."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class _MigrationAborted(RuntimeError):
    def __init__(self, message: str, details: dict[str, Any]) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


def execute_type_change(
    db: Session,
    column_id: int,
    new_type: ColumnType | str,
    options: TypeChangeOptions,
    *,
    settings: Settings | None = None,
    cancel_event: threading.Event | None = None,
) -> TypeChangeResult:
    """Convert every cell of a column to ``new_type`` and commit the new type."""

    settings = settings or get_settings()
    target_type = parse_column_type(new_type)
    if target_type is None:
        raise TypeChangeError(
            INVALID_COLUMN_TYPE,
            f"Unknown column type: {new_type}",
            {"column_id": column_id, "new_type": str(new_type)},
        )

    started = perf_counter()
    deadline = started + settings.type_change_timeout_seconds
    try:
        _apply_transaction_timeouts(db, settings)
        column = db.scalar(select(Column).where(Column.id == column_id).with_for_update())
        if column is None:
            raise _MigrationAborted(f"Column {column_id} not found", {"column_id": column_id})
        old_type = column.type

        logger.info(
            "columns.type_change_started column_id=%s old_type=%s new_type=%s user_id=%s",
            column_id,
            old_type,
            target_type.value,
            options.user_id,
        )

        stats = TypeChangeStats()
        log: list[CellConversionLogEntry] = []
        for batch in iter_cell_batches(db, column_id, settings.type_change_batch_size):
            _check_interrupts(started, deadline, cancel_event, stats)
            for cell in batch:
                entry = _convert_cell(db, cell, target_type, options, stats)
                if entry is not None:
                    log.append(entry)
            db.flush()

        if stats.failed:
            raise _MigrationAborted(
                f"{stats.failed} cells failed conversion and no handling strategy was specified",
                {
                    "column_id": column_id,
                    "failed": stats.failed,
                    "sample_failures": [
                        entry.model_dump(mode="json") for entry in log if entry.status == "failed"
                    ][:5],
                },
            )

        column.type = target_type.value
        db.flush()
        duration_ms = (perf_counter() - started) * 1000.0
        _write_audit_record(db, column, old_type, target_type, options, stats, log, duration_ms, settings)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception(
            "columns.type_change_failed column_id=%s new_type=%s elapsed_ms=%.2f",
            column_id,
            target_type.value,
            (perf_counter() - started) * 1000.0,
        )
        if isinstance(exc, _MigrationAborted):
            raise TypeChangeError(TRANSACTION_FAILED, exc.message, exc.details) from exc
        raise TypeChangeError(
            TRANSACTION_FAILED,
            f"Column type change failed: {exc}",
            {"column_id": column_id, "cause": type(exc).__name__},
        ) from exc

    db.refresh(column)
    logger.info(
        (
            "columns.type_change_completed column_id=%s old_type=%s new_type=%s total=%d "
            "converted=%d lossy=%d deleted=%d nullified=%d duration_ms=%.2f"
        ),
        column_id,
        old_type,
        target_type.value,
        stats.total,
        stats.converted,
        stats.lossy,
        stats.deleted,
        stats.nullified,
        duration_ms,
    )
    return TypeChangeResult(
        success=True,
        column=ColumnRead.model_validate(column),
        stats=stats,
        log=log,
        duration_ms=duration_ms,
    )


def _apply_transaction_timeouts(db: Session, settings: Settings) -> None:
    if db.get_bind().dialect.name != "postgresql":
        return
    # SET does not accept bind parameters.
    db.execute(text(f"SET LOCAL lock_timeout = '{int(settings.type_change_lock_timeout_seconds)}s'"))
    db.execute(text(f"SET LOCAL statement_timeout = '{int(settings.type_change_timeout_seconds)}s'"))


def _check_interrupts(
    started: float,
    deadline: float,
    cancel_event: threading.Event | None,
    stats: TypeChangeStats,
) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise _MigrationAborted("Column type change was cancelled", {"processed": stats.total})
    now = perf_counter()
    if now > deadline:
        raise _MigrationAborted(
            "Column type change timed out",
            {"processed": stats.total, "elapsed_ms": round((now - started) * 1000.0, 2)},
        )


def _convert_cell(
    db: Session,
    cell: Cell,
    target_type: ColumnType,
    options: TypeChangeOptions,
    stats: TypeChangeStats,
) -> CellConversionLogEntry | None:
    stats.total += 1
    old_value = cell.value
    if is_empty_value(old_value):
        stats.converted += 1
        return None

    result = coerce_value(old_value, target_type)
    if result.success:
        cell.value = result.new_value
        stats.converted += 1
        if result.data_loss:
            stats.lossy += 1
            status = "lossy"
        else:
            status = "success"
        return CellConversionLogEntry(
            cell_id=cell.id,
            row_id=cell.row_id,
            old_value=old_value,
            new_value=result.new_value,
            status=status,
            warning=result.warning,
        )

    if options.delete_incompatible:
        db.delete(cell)
        stats.deleted += 1
        status = "deleted"
    elif options.convert_to_null:
        cell.value = None
        stats.nullified += 1
        status = "nullified"
    else:
        stats.failed += 1
        status = "failed"
    return CellConversionLogEntry(
        cell_id=cell.id,
        row_id=cell.row_id,
        old_value=old_value,
        status=status,
        error=result.error,
    )


def _write_audit_record(
    db: Session,
    column: Column,
    old_type: str,
    target_type: ColumnType,
    options: TypeChangeOptions,
    stats: TypeChangeStats,
    log: list[CellConversionLogEntry],
    duration_ms: float,
    settings: Settings,
) -> None:
    """Persist the audit record in a savepoint; failures are logged and ignored."""

    try:
        with db.begin_nested():
            db.add(_build_audit_record(column, old_type, target_type, options, stats, log, duration_ms, settings))
    except SQLAlchemyError:
        logger.warning(
            "columns.type_change_audit_failed column_id=%s old_type=%s new_type=%s",
            column.id,
            old_type,
            target_type.value,
            exc_info=True,
        )


def _build_audit_record(
    column: Column,
    old_type: str,
    target_type: ColumnType,
    options: TypeChangeOptions,
    stats: TypeChangeStats,
    log: list[CellConversionLogEntry],
    duration_ms: float,
    settings: Settings,
) -> ColumnTypeChangeLog:
    return ColumnTypeChangeLog(
        column_id=column.id,
        table_id=column.table_id,
        old_type=old_type,
        new_type=target_type.value,
        user_id=options.user_id,
        stats_json=stats.model_dump(),
        entries_json=[entry.model_dump(mode="json") for entry in log[: settings.type_change_log_limit]],
        duration_ms=duration_ms,
    )
