"""Filtered row query routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.filters import RowPage, RowQueryRequest
from app.services.rows import query_rows

router = APIRouter(prefix="/tables")


@router.post("/{table_id}/rows/query", response_model=ApiResponse[RowPage])
def post_row_query(
    payload: RowQueryRequest,
    table_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[RowPage]:
    """Return table rows matching the global search and column filters."""

    page = query_rows(db, table_id, payload)
    if page is None:
        raise HTTPException(status_code=404, detail="Table not found")
    return ApiResponse(data=page)
