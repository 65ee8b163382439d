"""SQLAlchemy metadata registry import for Alembic."""

from app.models import Cell, Column, ColumnTypeChangeLog, Row, Table
from app.models.base import Base

__all__ = ["Base", "Table", "Column", "Row", "Cell", "ColumnTypeChangeLog"]
