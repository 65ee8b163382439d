"""Column type change audit log model."""

from sqlalchemy import JSON, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class ColumnTypeChangeLog(Base, IdMixin, CreatedAtMixin):
    """Informational record of one committed column type migration."""

    __tablename__ = "column_type_change_logs"

    column_id: Mapped[int] = mapped_column(index=True, nullable=False)
    table_id: Mapped[int] = mapped_column(index=True, nullable=False)
    old_type: Mapped[str] = mapped_column(String(32), nullable=False)
    new_type: Mapped[str] = mapped_column(String(32), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stats_json: Mapped[dict[str, int]] = mapped_column(JSON, default=dict, nullable=False)
    entries_json: Mapped[list[dict[str, object]]] = mapped_column(JSON, default=list, nullable=False)
    duration_ms: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
