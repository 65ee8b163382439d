"""initial schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "tables",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("database_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tables_tenant_id", "tables", ["tenant_id"], unique=False)
    op.create_index("ix_tables_database_id", "tables", ["database_id"], unique=False)

    op.create_table(
        "columns",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("table_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reference_table_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["table_id"], ["tables.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reference_table_id"], ["tables.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_columns_table_id", "columns", ["table_id"], unique=False)

    op.create_table(
        "rows",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("table_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["table_id"], ["tables.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rows_table_id", "rows", ["table_id"], unique=False)

    op.create_table(
        "cells",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("row_id", sa.Integer(), nullable=False),
        sa.Column("column_id", sa.Integer(), nullable=False),
        sa.Column("value", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["row_id"], ["rows.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["column_id"], ["columns.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cells_row_id", "cells", ["row_id"], unique=False)
    op.create_index("ix_cells_column_id", "cells", ["column_id"], unique=False)
    op.create_index("ix_cells_column_id_id", "cells", ["column_id", "id"], unique=False)

    op.create_table(
        "column_type_change_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("column_id", sa.Integer(), nullable=False),
        sa.Column("table_id", sa.Integer(), nullable=False),
        sa.Column("old_type", sa.String(length=32), nullable=False),
        sa.Column("new_type", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("stats_json", sa.JSON(), nullable=False),
        sa.Column("entries_json", sa.JSON(), nullable=False),
        sa.Column("duration_ms", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_column_type_change_logs_column_id", "column_type_change_logs", ["column_id"], unique=False)
    op.create_index("ix_column_type_change_logs_table_id", "column_type_change_logs", ["table_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_column_type_change_logs_table_id", table_name="column_type_change_logs")
    op.drop_index("ix_column_type_change_logs_column_id", table_name="column_type_change_logs")
    op.drop_table("column_type_change_logs")
    op.drop_index("ix_cells_column_id_id", table_name="cells")
    op.drop_index("ix_cells_column_id", table_name="cells")
    op.drop_index("ix_cells_row_id", table_name="cells")
    op.drop_table("cells")
    op.drop_index("ix_rows_table_id", table_name="rows")
    op.drop_table("rows")
    op.drop_index("ix_columns_table_id", table_name="columns")
    op.drop_table("columns")
    op.drop_index("ix_tables_database_id", table_name="tables")
    op.drop_index("ix_tables_tenant_id", table_name="tables")
    op.drop_table("tables")
