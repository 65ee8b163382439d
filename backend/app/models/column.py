"""Column ORM model."""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class Column(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Typed column; ``type`` holds a ``ColumnType`` value."""

    __tablename__ = "columns"

    table_id: Mapped[int] = mapped_column(ForeignKey("tables.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reference_table_id: Mapped[int | None] = mapped_column(
        ForeignKey("tables.id", ondelete="SET NULL"),
        nullable=True,
    )

    table: Mapped["Table"] = relationship(back_populates="columns", foreign_keys=[table_id])
    cells: Mapped[list["Cell"]] = relationship(back_populates="column", passive_deletes=True)
