import logging
from datetime import date

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.constants import ADJUST_ADD, EXPIRING_SOON, INITIAL_STOCK_REASON, LOW_STOCK, OUT_OF_STOCK
from app.core.dates import normalize_date
from app.core.errors import MedicationNotFound, SupplierNotFound
from app.core.expiry_rules import classify_expiry, days_until_expiry
from app.core.stock_rules import classify_stock
from app.models.medication import Medication
from app.models.stock_log import StockLogEntry
from app.models.supplier import MedicationSupplier
from app.schemas.medication import MedicationCreate, MedicationUpdate

logger = logging.getLogger(__name__)


def _ensure_supplier(db, supplier_id):
    if supplier_id is not None and db.get(MedicationSupplier, supplier_id) is None:
        raise SupplierNotFound(supplier_id)


def add_medication(db: Session, payload: MedicationCreate) -> Medication:
    """Insert a medication and its opening stock log entry (flush, no commit)."""
    _ensure_supplier(db, payload.supplier_id)
    values = payload.model_dump(exclude={"quantity"})
    if values.get("min_stock_level") is None:
        values["min_stock_level"] = get_settings().DEFAULT_MIN_STOCK_LEVEL

    medication = Medication(**values, quantity=payload.quantity, is_active=True, version=0)
    db.add(medication)
    db.flush()

    # The opening balance is logged so the stock log always sums to quantity.
    if payload.quantity > 0:
        db.add(
            StockLogEntry(
                medication_id=medication.id,
                change_type=ADJUST_ADD,
                quantity_changed=payload.quantity,
                previous_quantity=0,
                new_quantity=payload.quantity,
                reason=INITIAL_STOCK_REASON,
            )
        )
        db.flush()
    return medication


def create_medication(db: Session, payload: MedicationCreate) -> Medication:
    try:
        medication = add_medication(db, payload)
        db.commit()
    except (SupplierNotFound, SQLAlchemyError):
        db.rollback()
        raise
    db.refresh(medication)
    logger.info("Registered medication %s (%s)", medication.id, medication.name)
    return medication


def get_medication(db: Session, medication_id: int) -> Medication:
    medication = db.get(Medication, medication_id)
    if medication is None:
        raise MedicationNotFound(medication_id)
    return medication


def list_medications(
    db: Session,
    search: str | None = None,
    low_stock: bool = False,
    out_of_stock: bool = False,
    limit: int = 20,
    cursor: int | None = None,
) -> dict:
    conditions = []
    if search:
        conditions.append(Medication.name.ilike(f"%{search}%"))
    if low_stock:
        conditions.append(Medication.quantity <= Medication.min_stock_level)
        conditions.append(Medication.quantity > 0)
    if out_of_stock:
        conditions.append(Medication.quantity == 0)
    if cursor is not None:
        conditions.append(Medication.id < cursor)

    query = select(Medication)
    if conditions:
        query = query.where(and_(*conditions))
    rows = db.execute(query.order_by(Medication.id.desc()).limit(limit + 1)).scalars().all()
    return _paginate(list(rows), limit)


def _paginate(rows, limit):
    has_next_page = len(rows) > limit
    data = rows[:limit] if has_next_page else rows
    next_cursor = data[-1].id if has_next_page and data else None
    return {"data": data, "next_cursor": next_cursor, "has_next_page": has_next_page}


def update_medication(db: Session, medication_id: int, payload: MedicationUpdate) -> Medication:
    medication = get_medication(db, medication_id)
    values = payload.model_dump(exclude_unset=True)
    if "supplier_id" in values:
        _ensure_supplier(db, values["supplier_id"])
    for key, value in values.items():
        setattr(medication, key, value)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(medication)
    return medication


def deactivate_medication(db: Session, medication_id: int) -> Medication:
    medication = get_medication(db, medication_id)
    medication.is_active = False
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Deactivated medication %s", medication_id)
    return medication


def describe_inventory_item(medication: Medication, today: date, window_days: int) -> dict:
    stock_status = classify_stock(medication.quantity, medication.min_stock_level)
    expiry_status = classify_expiry(medication.expiry_date, today, window_days)
    item = {
        column.name: getattr(medication, column.name)
        for column in Medication.__table__.columns
    }
    item.update(
        stock_status=stock_status,
        expiry_status=expiry_status,
        days_until_expiry=days_until_expiry(medication.expiry_date, today),
        is_low_stock=stock_status == LOW_STOCK,
        is_out_of_stock=stock_status == OUT_OF_STOCK,
        is_expiring_soon=expiry_status == EXPIRING_SOON,
    )
    return item


def inventory_overview(db: Session, as_of=None, limit: int = 50, cursor: int | None = None) -> dict:
    today = normalize_date(as_of) or date.today()
    window_days = get_settings().EXPIRY_ALERT_DAYS
    query = select(Medication).where(Medication.is_active.is_(True))
    if cursor is not None:
        query = query.where(Medication.id < cursor)
    rows = db.execute(query.order_by(Medication.id.desc()).limit(limit + 1)).scalars().all()
    page = _paginate(list(rows), limit)
    page["data"] = [describe_inventory_item(med, today, window_days) for med in page["data"]]
    return page


def expiring_soon(db: Session, days: int = 30, as_of=None) -> list[dict]:
    today = normalize_date(as_of) or date.today()
    medications = (
        db.execute(
            select(Medication)
            .where(Medication.is_active.is_(True), Medication.expiry_date.is_not(None))
            .order_by(Medication.expiry_date, Medication.id)
        )
        .scalars()
        .all()
    )
    results = []
    for medication in medications:
        remaining = days_until_expiry(medication.expiry_date, today)
        if remaining is None or remaining < 0 or remaining > days:
            continue
        item = {
            column.name: getattr(medication, column.name)
            for column in Medication.__table__.columns
        }
        item["days_until_expiry"] = remaining
        results.append(item)
    return results


__all__ = [
    "add_medication",
    "create_medication",
    "deactivate_medication",
    "describe_inventory_item",
    "expiring_soon",
    "get_medication",
    "inventory_overview",
    "list_medications",
    "update_medication",
]
