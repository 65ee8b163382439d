"""ORM models package exports."""

from app.models.cell import Cell
from app.models.column import Column
from app.models.column_type_change_log import ColumnTypeChangeLog
from app.models.row import Row
from app.models.table import Table

__all__ = [
    "Table",
    "Column",
    "Row",
    "Cell",
    "ColumnTypeChangeLog",
]
