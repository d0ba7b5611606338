from datetime import date

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.constants import EXPIRED, EXPIRING_SOON, IN_STOCK, LOW_STOCK, OUT_OF_STOCK
from app.core.dates import normalize_date
from app.core.expiry_rules import classify_expiry
from app.core.stock_rules import classify_stock
from app.services.alert_service import load_active_medications


def summarize_stock(medications, today, window_days):
    stock_counts = {IN_STOCK: 0, LOW_STOCK: 0, OUT_OF_STOCK: 0}
    expiry_counts = {EXPIRING_SOON: 0, EXPIRED: 0}
    total = 0
    for medication in medications:
        if not medication.is_active:
            continue
        total += 1
        stock_counts[classify_stock(medication.quantity, medication.min_stock_level)] += 1
        expiry_status = classify_expiry(medication.expiry_date, today, window_days)
        if expiry_status in expiry_counts:
            expiry_counts[expiry_status] += 1
    return {
        "as_of": today,
        "total_medications": total,
        "in_stock": stock_counts[IN_STOCK],
        "low_stock": stock_counts[LOW_STOCK],
        "out_of_stock": stock_counts[OUT_OF_STOCK],
        "expiring_soon": expiry_counts[EXPIRING_SOON],
        "expired": expiry_counts[EXPIRED],
    }


def stock_summary(db: Session, as_of=None) -> dict:
    today = normalize_date(as_of) or date.today()
    return summarize_stock(
        load_active_medications(db),
        today,
        get_settings().EXPIRY_ALERT_DAYS,
    )


__all__ = ["stock_summary", "summarize_stock"]
