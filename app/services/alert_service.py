import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.constants import (
    DEFAULT_EXPIRY_WINDOW_DAYS,
    EXPIRING_SOON,
    LOW_STOCK,
    OUT_OF_STOCK,
)
from app.core.dates import normalize_date
from app.core.expiry_rules import classify_expiry, days_until_expiry
from app.core.stock_rules import classify_stock
from app.models.medication import Medication

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertEntry:
    medication_id: int
    name: str
    alert_type: str
    message: str
    quantity: int
    min_stock_level: int
    expiry_date: Optional[date] = None
    days_until_expiry: Optional[int] = None

    def as_dict(self):
        return asdict(self)


def _stock_alert(medication):
    status = classify_stock(medication.quantity, medication.min_stock_level)
    if status == OUT_OF_STOCK:
        message = "Out of stock: stock depleted"
    elif status == LOW_STOCK:
        message = "Low stock: {} remaining (threshold: {})".format(
            medication.quantity,
            medication.min_stock_level,
        )
    else:
        return None
    return AlertEntry(
        medication_id=medication.id,
        name=medication.name,
        alert_type=status,
        message=message,
        quantity=medication.quantity,
        min_stock_level=medication.min_stock_level,
        expiry_date=medication.expiry_date,
    )


def _expiry_alert(medication, today, window_days):
    # Already expired stock is not alerted here, only stock about to expire.
    if classify_expiry(medication.expiry_date, today, window_days) != EXPIRING_SOON:
        return None
    days = days_until_expiry(medication.expiry_date, today)
    return AlertEntry(
        medication_id=medication.id,
        name=medication.name,
        alert_type=EXPIRING_SOON,
        message="Expires in {} days".format(days),
        quantity=medication.quantity,
        min_stock_level=medication.min_stock_level,
        expiry_date=medication.expiry_date,
        days_until_expiry=days,
    )


def scan_alerts(medications, today, window_days=DEFAULT_EXPIRY_WINDOW_DAYS):
    """Stock and expiry alerts for a snapshot of medications.

    Inactive records are skipped. Stock and expiry are independent, so one
    medication can yield two alerts. Output is ordered by medication id
    then alert type, which keeps repeated scans of the same data identical.
    """
    today = normalize_date(today)
    alerts = []
    for medication in medications:
        if not medication.is_active:
            continue
        stock_alert = _stock_alert(medication)
        if stock_alert:
            alerts.append(stock_alert)
        expiry_alert = _expiry_alert(medication, today, window_days)
        if expiry_alert:
            alerts.append(expiry_alert)
    alerts.sort(key=lambda alert: (alert.medication_id, alert.alert_type))
    return alerts


def load_active_medications(db: Session):
    return (
        db.execute(
            select(Medication)
            .where(Medication.is_active.is_(True))
            .order_by(Medication.id)
        )
        .scalars()
        .all()
    )


def get_alerts(db: Session, as_of=None):
    today = normalize_date(as_of) or date.today()
    medications = load_active_medications(db)
    alerts = scan_alerts(
        medications,
        today,
        window_days=get_settings().EXPIRY_ALERT_DAYS,
    )
    logger.info(
        "Alert scan as of %s: %s alerts across %s active medications",
        today,
        len(alerts),
        len(medications),
    )
    return alerts


__all__ = ["AlertEntry", "get_alerts", "load_active_medications", "scan_alerts"]
