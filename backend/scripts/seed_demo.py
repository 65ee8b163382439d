"""Seed a demo table with one column per type family.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import delete

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.coercion.values import coerce_value
from app.db.session import SessionLocal
from app.models.cell import Cell
from app.models.column import Column
from app.models.row import Row
from app.models.table import Table
from app.schema.column_types import ColumnType


DEFAULT_TABLE_NAME = "Inventory demo"
DEFAULT_TENANT_ID = 1
DEFAULT_DATABASE_ID = 1

DEMO_COLUMNS: list[tuple[str, ColumnType]] = [
    ("Name", ColumnType.TEXT),
    ("Quantity", ColumnType.INTEGER),
    ("Price", ColumnType.DECIMAL),
    ("In stock", ColumnType.BOOLEAN),
    ("Restocked at", ColumnType.DATETIME),
    ("Pickup time", ColumnType.TIME),
    ("Attributes", ColumnType.JSON),
    ("Supplier", ColumnType.REFERENCE),
    ("Tags", ColumnType.CUSTOM_ARRAY),
]

DEMO_ROWS: list[tuple[object, ...]] = [
    ("Desk lamp", "12", 29.5, "yes", "2026-10-01T09:30:00Z", "09:30", '{"color": "black"}', "17", "office,light"),
    ("Notebook", 140, "3.25", True, "2026-10-12", "14:00", {"pages": 96}, ["17", "21"], "paper"),
    ("Monitor arm", 4, 89, "off", 1760000000000, "17:45:00", {"color": "silver", "vesa": [75, 100]}, 21, ""),
    ("Cable tray", None, "", "no", None, None, None, None, None),
]


def reset_table(db, tenant_id: int, table_name: str) -> None:
    """Remove an earlier copy of the demo table."""

    db.execute(delete(Table).where(Table.tenant_id == tenant_id, Table.name == table_name))
    db.commit()


def seed_table(db, tenant_id: int, database_id: int, table_name: str) -> Table:
    """Create the demo table, its columns, and coerced cell values."""

    table = Table(tenant_id=tenant_id, database_id=database_id, name=table_name)
    db.add(table)
    db.flush()

    columns = [
        Column(table_id=table.id, name=name, type=column_type.value, position=position)
        for position, (name, column_type) in enumerate(DEMO_COLUMNS)
    ]
    db.add_all(columns)
    db.flush()

    for values in DEMO_ROWS:
        row = Row(table_id=table.id)
        db.add(row)
        db.flush()
        for column, (_, column_type), raw in zip(columns, DEMO_COLUMNS, values):
            result = coerce_value(raw, column_type)
            db.add(Cell(row_id=row.id, column_id=column.id, value=result.new_value if result.success else None))

    db.commit()
    db.refresh(table)
    return table


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed a demo table with one column per type family.")
    parser.add_argument("--table-name", default=DEFAULT_TABLE_NAME, help=f"Table name (default: {DEFAULT_TABLE_NAME})")
    parser.add_argument("--tenant-id", type=int, default=DEFAULT_TENANT_ID)
    parser.add_argument("--database-id", type=int, default=DEFAULT_DATABASE_ID)
    parser.add_argument(
        "--no-reset",
        action="store_true",
        help="Do not delete an existing table with the same name before seeding.",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()

    with SessionLocal() as db:
        if not args.no_reset:
            reset_table(db, args.tenant_id, args.table_name)
        table = seed_table(db, args.tenant_id, args.database_id, args.table_name)
        column_ids = {column.name: column.id for column in table.columns}

    print("Seed complete")
    print(f"table_id={table.id}")
    print(f"columns_created={len(column_ids)}")
    print(f"rows_created={len(DEMO_ROWS)}")
    print()
    print("Inspect:")
    print(f"  POST /tables/{table.id}/rows/query")
    print(f"  GET /columns/{column_ids['Price']}/type-change/analysis?new_type=integer")


if __name__ == "__main__":
    main()
