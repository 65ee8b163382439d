"""Table ORM model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class Table(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Tenant-owned spreadsheet-like table."""

    __tablename__ = "tables"

    tenant_id: Mapped[int] = mapped_column(index=True, nullable=False)
    database_id: Mapped[int] = mapped_column(index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    columns: Mapped[list["Column"]] = relationship(
        back_populates="table",
        cascade="all, delete-orphan",
        foreign_keys="Column.table_id",
        order_by="Column.position",
    )
    rows: Mapped[list["Row"]] = relationship(back_populates="table", cascade="all, delete-orphan")
