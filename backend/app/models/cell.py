"""Cell ORM model."""

from typing import Any

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin
from app.models.cell_value_type import CELL_VALUE_COLUMN_TYPE


class Cell(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """JSON value at the intersection of one row and one column."""

    __tablename__ = "cells"
    __table_args__ = (Index("ix_cells_column_id_id", "column_id", "id"),)

    row_id: Mapped[int] = mapped_column(ForeignKey("rows.id", ondelete="CASCADE"), index=True, nullable=False)
    column_id: Mapped[int] = mapped_column(ForeignKey("columns.id", ondelete="CASCADE"), index=True, nullable=False)
    value: Mapped[Any] = mapped_column(CELL_VALUE_COLUMN_TYPE, nullable=True)

    row: Mapped["Row"] = relationship(back_populates="cells")
    column: Mapped["Column"] = relationship(back_populates="cells")
