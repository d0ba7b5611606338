from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.adjustments import preview_adjustment
from app.core.errors import StockControlError
from app.dependencies import get_db, require_auth
from app.schemas.medication import (
    ExpiringMedication,
    InventoryPage,
    MedicationCreate,
    MedicationPage,
    MedicationRead,
    MedicationUpdate,
)
from app.schemas.stock import (
    ExpiryStatusRead,
    StockAdjustmentPreview,
    StockAdjustmentRequest,
    StockAdjustmentResult,
    StockLogListItem,
    StockStatusRead,
    StockTrends,
)
from app.services import medication_service, stock_log_service, stock_service

router = APIRouter(prefix="/medications", tags=["Medications"])


def _raise_http(exc: StockControlError):
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("", response_model=MedicationPage)
def list_medications(
    search: Optional[str] = Query(None, description="Name contains"),
    low_stock: bool = Query(False, description="Only 0 < quantity <= min stock level"),
    out_of_stock: bool = Query(False, description="Only quantity == 0"),
    limit: int = Query(20, ge=1, le=100),
    cursor: Optional[int] = Query(None, description="Return ids below this cursor"),
    db: Session = Depends(get_db),
):
    return medication_service.list_medications(
        db,
        search=search,
        low_stock=low_stock,
        out_of_stock=out_of_stock,
        limit=limit,
        cursor=cursor,
    )


@router.post("", response_model=MedicationRead, status_code=201)
def create_medication(
    payload: MedicationCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    try:
        return medication_service.create_medication(db, payload)
    except StockControlError as exc:
        _raise_http(exc)


@router.get("/inventory", response_model=InventoryPage)
def inventory(
    as_of: Optional[date] = Query(None, description="Classify expiry as of this date"),
    limit: int = Query(50, ge=1, le=100),
    cursor: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return medication_service.inventory_overview(db, as_of=as_of, limit=limit, cursor=cursor)


@router.get("/expiring-soon", response_model=List[ExpiringMedication])
def expiring_soon(
    days: int = Query(30, ge=1, le=365),
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return medication_service.expiring_soon(db, days=days, as_of=as_of)


@router.get("/{medication_id}", response_model=MedicationRead)
def get_medication(medication_id: int, db: Session = Depends(get_db)):
    try:
        return medication_service.get_medication(db, medication_id)
    except StockControlError as exc:
        _raise_http(exc)


@router.patch("/{medication_id}", response_model=MedicationRead)
def update_medication(
    medication_id: int,
    payload: MedicationUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    try:
        return medication_service.update_medication(db, medication_id, payload)
    except StockControlError as exc:
        _raise_http(exc)


@router.delete("/{medication_id}")
def deactivate_medication(
    medication_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    try:
        medication_service.deactivate_medication(db, medication_id)
    except StockControlError as exc:
        _raise_http(exc)
    return {"success": True}


@router.post("/{medication_id}/adjustments", response_model=StockAdjustmentResult)
def adjust_stock(
    medication_id: int,
    payload: StockAdjustmentRequest,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    try:
        outcome = stock_service.apply_adjustment(
            db,
            medication_id,
            payload.adjustment_type,
            payload.adjustment_quantity,
            reason=payload.reason,
        )
    except StockControlError as exc:
        _raise_http(exc)
    return StockAdjustmentResult(**asdict(outcome))


@router.get("/{medication_id}/adjustments/preview", response_model=StockAdjustmentPreview)
def preview_stock_adjustment(
    medication_id: int,
    adjustment_type: str = Query(...),
    adjustment_quantity: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        snapshot = stock_service.read_stock_snapshot(db, medication_id)
    except StockControlError as exc:
        _raise_http(exc)
    return preview_adjustment(snapshot.quantity, adjustment_type, adjustment_quantity)


@router.get("/{medication_id}/stock-status", response_model=StockStatusRead)
def stock_status(medication_id: int, db: Session = Depends(get_db)):
    try:
        return stock_service.describe_stock(db, medication_id)
    except StockControlError as exc:
        _raise_http(exc)


@router.get("/{medication_id}/expiry-status", response_model=ExpiryStatusRead)
def expiry_status(
    medication_id: int,
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        return stock_service.describe_expiry(db, medication_id, as_of=as_of)
    except StockControlError as exc:
        _raise_http(exc)


@router.get("/{medication_id}/stock-log", response_model=List[StockLogListItem])
def medication_stock_log(
    medication_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    try:
        medication_service.get_medication(db, medication_id)
    except StockControlError as exc:
        _raise_http(exc)
    return stock_log_service.list_stock_logs(
        db,
        medication_id=medication_id,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )


@router.get("/{medication_id}/stock-trends", response_model=StockTrends)
def medication_stock_trends(
    medication_id: int,
    days: Optional[int] = Query(None, ge=1, le=365),
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        medication_service.get_medication(db, medication_id)
    except StockControlError as exc:
        _raise_http(exc)
    return stock_log_service.stock_trends(db, medication_id, days=days, as_of=as_of)


__all__ = ["router"]
