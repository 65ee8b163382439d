"""Row ORM model."""

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class Row(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """One table row; values live in its cells."""

    __tablename__ = "rows"

    table_id: Mapped[int] = mapped_column(ForeignKey("tables.id", ondelete="CASCADE"), index=True, nullable=False)

    table: Mapped["Table"] = relationship(back_populates="rows")
    cells: Mapped[list["Cell"]] = relationship(
        back_populates="row",
        cascade="all, delete-orphan",
        order_by="Cell.column_id",
    )
