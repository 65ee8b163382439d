"""Shared cell value column type configuration."""

from __future__ import annotations

import json

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator


class SQLiteJSONText(TypeDecorator):
    """JSON serialized into a TEXT-affinity column.

    SQLite gives a column declared ``JSON`` numeric affinity, which turns a stored
    ``5`` into an INTEGER the JSON result processor cannot decode.
    """

    impl = Text
    cache_ok = True
    should_evaluate_none = True

    def process_bind_param(self, value, dialect):
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return json.loads(value)


CELL_VALUE_COLUMN_TYPE = (
    JSON(none_as_null=False)
    .with_variant(JSONB(none_as_null=False), "postgresql")
    .with_variant(SQLiteJSONText(), "sqlite")
)
