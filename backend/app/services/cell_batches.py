"""Keyset-paginated iteration over a column's cells."""

from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.cell import Cell


def iter_cell_batches(db: Session, column_id: int, batch_size: int) -> Iterator[list[Cell]]:
    """Yield the column's cells in id order, ``batch_size`` at a time.

    Pages are keyed on the last seen id, so deleting or rewriting cells of an
    already yielded batch does not shift later pages.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be positive")

    last_id = 0
    while True:
        batch = list(
            db.scalars(
                select(Cell)
                .where(Cell.column_id == column_id, Cell.id > last_id)
                .order_by(Cell.id.asc())
                .limit(batch_size)
            ).all()
        )
        if not batch:
            return
        last_id = batch[-1].id
        yield batch
        if len(batch) < batch_size:
            return
