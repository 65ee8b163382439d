"""Row query and filter schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FilterConfig(BaseModel):
    """One user-authored column filter.

    Fields are optional on purpose: malformed filters reach the compiler and are
    dropped there instead of failing the whole request.
    """

    column_id: int | None = None
    column_type: str | None = None
    operator: str | None = None
    value: Any = None
    second_value: Any = None


class RowQueryRequest(BaseModel):
    global_search: str | None = None
    filters: list[FilterConfig] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1)
    sort_order: Literal["asc", "desc"] = "asc"


class CellRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    row_id: int
    column_id: int
    value: Any = None


class RowRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_id: int
    created_at: datetime
    cells: list[CellRead] = Field(default_factory=list)


class RowPage(BaseModel):
    """One page of rows matching a compiled filter condition."""

    items: list[RowRead] = Field(default_factory=list)
    total: int
    page: int
    page_size: int
    has_more: bool
    applied_filters: int
    dropped_filters: int
