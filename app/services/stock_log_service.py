from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.dates import normalize_date
from app.models.medication import Medication
from app.models.stock_log import StockLogEntry


def _start_of_day(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _end_of_day(value: date) -> datetime:
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def list_stock_logs(
    db: Session,
    medication_id: int | None = None,
    start_date=None,
    end_date=None,
    skip: int = 0,
    limit: int = 100,
):
    """Stock log entries newest first, with the medication name attached."""
    query = select(StockLogEntry, Medication.name.label("medication_name")).join(
        Medication,
        Medication.id == StockLogEntry.medication_id,
    )
    if medication_id is not None:
        query = query.where(StockLogEntry.medication_id == medication_id)

    start_date = normalize_date(start_date)
    end_date = normalize_date(end_date)
    if start_date:
        query = query.where(StockLogEntry.created_at >= _start_of_day(start_date))
    if end_date:
        query = query.where(StockLogEntry.created_at <= _end_of_day(end_date))

    rows = db.execute(
        query.order_by(StockLogEntry.created_at.desc(), StockLogEntry.id.desc())
        .offset(skip)
        .limit(limit)
    ).all()

    entries = []
    for entry, medication_name in rows:
        item = {
            "id": entry.id,
            "medication_id": entry.medication_id,
            "change_type": entry.change_type,
            "quantity_changed": entry.quantity_changed,
            "previous_quantity": entry.previous_quantity,
            "new_quantity": entry.new_quantity,
            "reason": entry.reason,
            "created_at": entry.created_at,
            "medication_name": medication_name,
        }
        entries.append(item)
    return entries


def stock_trends(db: Session, medication_id: int, days: int | None = None, as_of=None) -> dict:
    """Daily net stock change for one medication over the trailing window."""
    if days is None:
        days = get_settings().STOCK_TREND_DAYS
    today = normalize_date(as_of) or datetime.now(timezone.utc).date()
    window_start = _start_of_day(today - timedelta(days=days))

    logs = (
        db.execute(
            select(StockLogEntry)
            .where(
                StockLogEntry.medication_id == medication_id,
                StockLogEntry.created_at >= window_start,
                StockLogEntry.created_at <= _end_of_day(today),
            )
            .order_by(StockLogEntry.created_at.desc(), StockLogEntry.id.desc())
        )
        .scalars()
        .all()
    )

    daily_changes: dict[str, int] = {}
    for log in logs:
        if log.created_at is None or log.quantity_changed is None:
            continue
        day_key = log.created_at.date().isoformat()
        daily_changes[day_key] = daily_changes.get(day_key, 0) + log.quantity_changed

    return {
        "medication_id": medication_id,
        "days": days,
        "total_changes": len(logs),
        "daily_changes": daily_changes,
        "logs": list(logs),
    }


__all__ = ["list_stock_logs", "stock_trends"]
