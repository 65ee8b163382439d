"""Column and column type change schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ColumnRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_id: int
    name: str
    type: str
    position: int
    required: bool


class TypeChangeOptions(BaseModel):
    """Caller policy for cells that fail or lose precision during a type change."""

    delete_incompatible: bool = False
    convert_to_null: bool = False
    accept_loss: bool = False
    confirmed: bool = False
    user_id: str | None = None


class TypeChangeRequest(BaseModel):
    new_type: str = Field(min_length=1)
    options: TypeChangeOptions = Field(default_factory=TypeChangeOptions)


class TypeChangeStats(BaseModel):
    total: int = 0
    converted: int = 0
    deleted: int = 0
    nullified: int = 0
    lossy: int = 0
    failed: int = 0


class CellConversionLogEntry(BaseModel):
    cell_id: int
    row_id: int
    old_value: Any = None
    new_value: Any = None
    status: Literal["success", "lossy", "deleted", "nullified", "failed"]
    warning: str | None = None
    error: str | None = None


class TypeChangeResult(BaseModel):
    success: bool = True
    column: ColumnRead
    stats: TypeChangeStats
    log: list[CellConversionLogEntry] = Field(default_factory=list)
    duration_ms: float


class DurationEstimate(BaseModel):
    seconds: int
    display_text: str


class CellConversionSample(BaseModel):
    cell_id: int
    row_id: int
    value: Any = None
    new_value: Any = None
    message: str | None = None


class TypeChangeAnalysis(BaseModel):
    """Dry-run prediction of how a column's cells would fare under a new type."""

    column_id: int
    old_type: str
    new_type: str
    total_cells: int
    empty_cells: int
    convertible_cells: int
    lossy_cells: int
    failing_cells: int
    sample_failures: list[CellConversionSample] = Field(default_factory=list)
    sample_lossy: list[CellConversionSample] = Field(default_factory=list)
    estimate: DurationEstimate


class TypeChangeValidation(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
