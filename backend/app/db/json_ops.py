"""Dialect-aware SQL constructs over root-level JSON cell values.

Cells store a single JSON document per row/column. Filtering needs that document
viewed as text, as a number, as a boolean, or tested for structural containment.
Each construct renders PostgreSQL JSONB operators there and SQLite JSON1 functions
everywhere else; SQLite gets a Python ``json_contains`` function registered on
connect because JSON1 has no containment operator.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import Boolean, Float, Text


class json_text(FunctionElement):
    """Root JSON value as text; NULL for SQL NULL and JSON null."""

    type = Text()
    name = "json_text"
    inherit_cache = True


class json_number(FunctionElement):
    """Root JSON value as a float when it is a JSON number, otherwise NULL."""

    type = Float()
    name = "json_number"
    inherit_cache = True


class json_boolean(FunctionElement):
    """Root JSON value as a boolean when it is a JSON boolean, otherwise NULL."""

    type = Boolean()
    name = "json_boolean"
    inherit_cache = True


class json_contains(FunctionElement):
    """True when the first JSON document structurally contains the second."""

    type = Boolean()
    name = "json_contains"
    inherit_cache = True


def _render_args(element: FunctionElement, compiler, **kw) -> list[str]:
    return [compiler.process(clause, **kw) for clause in element.clauses.clauses]


@compiles(json_text)
def _json_text_sqlite(element, compiler, **kw) -> str:
    (expr,) = _render_args(element, compiler, **kw)
    return (
        f"CASE json_type({expr}) WHEN 'true' THEN 'true' WHEN 'false' THEN 'false' "
        f"ELSE CAST(json_extract({expr}, '$') AS TEXT) END"
    )


@compiles(json_text, "postgresql")
def _json_text_postgresql(element, compiler, **kw) -> str:
    (expr,) = _render_args(element, compiler, **kw)
    return f"(CAST({expr} AS JSONB) #>> '{{}}')"


@compiles(json_number)
def _json_number_sqlite(element, compiler, **kw) -> str:
    (expr,) = _render_args(element, compiler, **kw)
    return f"CASE WHEN json_type({expr}) IN ('integer', 'real') THEN json_extract({expr}, '$') END"


@compiles(json_number, "postgresql")
def _json_number_postgresql(element, compiler, **kw) -> str:
    (expr,) = _render_args(element, compiler, **kw)
    return (
        f"CASE WHEN jsonb_typeof(CAST({expr} AS JSONB)) = 'number' "
        f"THEN CAST((CAST({expr} AS JSONB) #>> '{{}}') AS DOUBLE PRECISION) END"
    )


@compiles(json_boolean)
def _json_boolean_sqlite(element, compiler, **kw) -> str:
    (expr,) = _render_args(element, compiler, **kw)
    return f"CASE json_type({expr}) WHEN 'true' THEN 1 WHEN 'false' THEN 0 END"


@compiles(json_boolean, "postgresql")
def _json_boolean_postgresql(element, compiler, **kw) -> str:
    (expr,) = _render_args(element, compiler, **kw)
    return (
        f"CASE WHEN jsonb_typeof(CAST({expr} AS JSONB)) = 'boolean' "
        f"THEN CAST((CAST({expr} AS JSONB) #>> '{{}}') AS BOOLEAN) END"
    )


@compiles(json_contains)
def _json_contains_sqlite(element, compiler, **kw) -> str:
    container, contained = _render_args(element, compiler, **kw)
    return f"json_contains({container}, {contained})"


@compiles(json_contains, "postgresql")
def _json_contains_postgresql(element, compiler, **kw) -> str:
    container, contained = _render_args(element, compiler, **kw)
    return f"(CAST({container} AS JSONB) @> CAST({contained} AS JSONB))"


def json_document_contains(container: Any, contained: Any) -> bool:
    """Python rendition of JSONB ``@>`` used by the SQLite function."""

    if isinstance(container, dict):
        if not isinstance(contained, dict):
            return False
        return all(
            key in container and _contains_nested(container[key], value)
            for key, value in contained.items()
        )
    if isinstance(container, list):
        if isinstance(contained, list):
            return all(
                any(_contains_nested(item, wanted) for item in container) for wanted in contained
            )
        # A top-level array contains a bare primitive that appears among its elements.
        if isinstance(contained, dict):
            return False
        return any(_same_scalar(item, contained) for item in container)
    return _same_scalar(container, contained)


def _contains_nested(container: Any, contained: Any) -> bool:
    if isinstance(container, list) and not isinstance(contained, list):
        return False
    return json_document_contains(container, contained)


def _same_scalar(left: Any, right: Any) -> bool:
    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def _sqlite_json_contains(container_text: str | None, contained_text: str | None) -> int | None:
    if container_text is None or contained_text is None:
        return None
    try:
        container = json.loads(container_text)
        contained = json.loads(contained_text)
    except (TypeError, ValueError):
        return 0
    return int(json_document_contains(container, contained))


@event.listens_for(Engine, "connect")
def _register_sqlite_json_functions(dbapi_connection, _connection_record) -> None:
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function(
            "json_contains",
            2,
            _sqlite_json_contains,
            deterministic=True,
        )
