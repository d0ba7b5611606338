from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.alert import AlertRead
from app.services.alert_service import get_alerts

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=List[AlertRead])
def list_alerts(
    as_of: Optional[date] = Query(None, description="Evaluate expiry as of this date (default today)"),
    db: Session = Depends(get_db),
):
    return [alert.as_dict() for alert in get_alerts(db, as_of=as_of)]
