from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.stock import StockSummary
from app.services.dashboard_service import stock_summary

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stock-summary", response_model=StockSummary)
def stock_levels(
    as_of: Optional[date] = Query(None, description="Evaluate expiry as of this date"),
    db: Session = Depends(get_db),
):
    return stock_summary(db, as_of=as_of)
