"""Pre-flight analysis for column type changes."""

from __future__ import annotations

import math

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.coercion.values import coerce_value, is_empty_value
from app.config import Settings, get_settings
from app.models.column import Column
from app.schema.column_types import ColumnType, parse_column_type
from app.schemas.columns import (
    CellConversionSample,
    DurationEstimate,
    TypeChangeAnalysis,
    TypeChangeOptions,
    TypeChangeValidation,
)
from app.services.cell_batches import iter_cell_batches
from app.services.column_type_change import INVALID_COLUMN_TYPE, TypeChangeError

SAMPLE_LIMIT = 5


def analyze_type_change(
    db: Session,
    column_id: int,
    new_type: ColumnType | str,
    *,
    settings: Settings | None = None,
) -> TypeChangeAnalysis | None:
    """Predict how many cells would convert, lose precision, or fail. Read-only."""

    settings = settings or get_settings()
    target_type = parse_column_type(new_type)
    if target_type is None:
        raise TypeChangeError(
            INVALID_COLUMN_TYPE,
            f"Unknown column type: {new_type}",
            {"column_id": column_id, "new_type": str(new_type)},
        )

    column = db.scalar(select(Column).where(Column.id == column_id))
    if column is None:
        return None

    total = empty = convertible = lossy = failing = 0
    sample_failures: list[CellConversionSample] = []
    sample_lossy: list[CellConversionSample] = []
    for batch in iter_cell_batches(db, column_id, settings.type_change_batch_size):
        for cell in batch:
            total += 1
            if is_empty_value(cell.value):
                empty += 1
                convertible += 1
                continue
            result = coerce_value(cell.value, target_type)
            if not result.success:
                failing += 1
                if len(sample_failures) < SAMPLE_LIMIT:
                    sample_failures.append(
                        CellConversionSample(cell_id=cell.id, row_id=cell.row_id, value=cell.value, message=result.error)
                    )
                continue
            convertible += 1
            if result.data_loss:
                lossy += 1
                if len(sample_lossy) < SAMPLE_LIMIT:
                    sample_lossy.append(
                        CellConversionSample(
                            cell_id=cell.id,
                            row_id=cell.row_id,
                            value=cell.value,
                            new_value=result.new_value,
                            message=result.warning,
                        )
                    )

    return TypeChangeAnalysis(
        column_id=column.id,
        old_type=column.type,
        new_type=target_type.value,
        total_cells=total,
        empty_cells=empty,
        convertible_cells=convertible,
        lossy_cells=lossy,
        failing_cells=failing,
        sample_failures=sample_failures,
        sample_lossy=sample_lossy,
        estimate=estimate_type_change_duration(total, cells_per_second=settings.type_change_cells_per_second),
    )


def validate_type_change_options(
    options: TypeChangeOptions,
    *,
    failing_count: int,
    lossy_count: int,
) -> TypeChangeValidation:
    """Report every policy problem for the predicted failure and loss counts."""

    errors: list[str] = []
    if failing_count > 0:
        if options.delete_incompatible and options.convert_to_null:
            errors.append(
                f"{failing_count} cells cannot be converted: choose either deleting "
                "incompatible cells or converting them to null, not both"
            )
        elif not options.delete_incompatible and not options.convert_to_null:
            errors.append(
                f"{failing_count} cells cannot be converted: choose whether to delete "
                "incompatible cells or convert them to null"
            )
    if lossy_count > 0 and not options.accept_loss:
        errors.append(f"{lossy_count} cells will lose precision: data loss must be accepted")
    if not options.confirmed:
        errors.append("The type change must be confirmed")
    return TypeChangeValidation(valid=not errors, errors=errors)


def estimate_type_change_duration(cell_count: int, *, cells_per_second: int = 100) -> DurationEstimate:
    """Human-readable duration estimate at a fixed conversion throughput."""

    if cells_per_second < 1:
        raise ValueError("cells_per_second must be positive")
    seconds = math.ceil(max(cell_count, 0) / cells_per_second)
    if seconds < 1:
        display_text = "Less than 1 second"
    elif seconds < 60:
        display_text = f"About {seconds} second{'s' if seconds != 1 else ''}"
    elif seconds < 3600:
        minutes = math.ceil(seconds / 60)
        display_text = f"About {minutes} minute{'s' if minutes != 1 else ''}"
    else:
        display_text = f"About {seconds / 3600:.1f} hours"
    return DurationEstimate(seconds=seconds, display_text=display_text)
