from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.stock import StockLogListItem
from app.services.stock_log_service import list_stock_logs

router = APIRouter(prefix="/stock-log", tags=["Stock Log"])


@router.get("", response_model=List[StockLogListItem])
def stock_log(
    medication_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Accepted stock adjustments across all medications, newest first."""
    return list_stock_logs(
        db,
        medication_id=medication_id,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
