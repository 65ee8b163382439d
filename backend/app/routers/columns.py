"""Column type change routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.columns import TypeChangeAnalysis, TypeChangeRequest, TypeChangeResult
from app.schemas.common import ApiError, ApiResponse, ApiValidationError
from app.services.column_type_analysis import analyze_type_change, validate_type_change_options
from app.services.column_type_change import INVALID_COLUMN_TYPE, TypeChangeError, execute_type_change

router = APIRouter(prefix="/columns")


def _raise_type_change_error(exc: TypeChangeError) -> None:
    status_code = 422 if exc.code == INVALID_COLUMN_TYPE else 409
    raise HTTPException(status_code=status_code, detail=exc.to_dict()) from exc


@router.get(
    "/{column_id}/type-change/analysis",
    response_model=ApiResponse[TypeChangeAnalysis],
    responses={422: {"model": ApiError}},
)
def get_type_change_analysis(
    column_id: int = Path(..., ge=1),
    new_type: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[TypeChangeAnalysis]:
    """Predict conversion outcomes for a column type change without applying it."""

    try:
        analysis = analyze_type_change(db, column_id, new_type)
    except TypeChangeError as exc:
        _raise_type_change_error(exc)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Column not found")
    return ApiResponse(data=analysis)


@router.post(
    "/{column_id}/type-change",
    response_model=ApiResponse[TypeChangeResult],
    responses={409: {"model": ApiError}, 422: {"model": ApiValidationError}},
)
def change_column_type(
    payload: TypeChangeRequest,
    column_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[TypeChangeResult]:
    """Validate the caller's policy against a fresh analysis, then migrate the column."""

    try:
        analysis = analyze_type_change(db, column_id, payload.new_type)
        if analysis is None:
            raise HTTPException(status_code=404, detail="Column not found")
        validation = validate_type_change_options(
            payload.options,
            failing_count=analysis.failing_cells,
            lossy_count=analysis.lossy_cells,
        )
        if not validation.valid:
            raise HTTPException(status_code=422, detail={"errors": validation.errors})
        result = execute_type_change(db, column_id, payload.new_type, payload.options)
    except TypeChangeError as exc:
        _raise_type_change_error(exc)
    return ApiResponse(data=result)
