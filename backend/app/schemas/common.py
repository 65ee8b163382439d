"""Common API response schemas."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Consistent JSON envelope for API responses."""

    data: T


class ErrorPayload(BaseModel):
    """Machine-readable failure carried in ``detail`` of error responses."""

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ApiError(BaseModel):
    detail: ErrorPayload


class ValidationErrors(BaseModel):
    errors: list[str]


class ApiValidationError(BaseModel):
    detail: ValidationErrors
