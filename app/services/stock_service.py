"""Quantity ledger: the only code path that writes ``Medication.quantity``.

Every adjustment is a read-compute-write against one medication row. The
write is a compare-and-swap on ``(version, quantity)`` so two requests that
read the same stock cannot both apply; the loser gets
``ConcurrentModification`` and is retried once against a fresh read. The
stock log row is inserted in the same transaction as the quantity update.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.adjustments import compute_adjustment
from app.core.dates import normalize_date
from app.core.errors import ConcurrentModification, MedicationNotFound, StockControlError
from app.core.expiry_rules import classify_expiry, days_until_expiry
from app.core.stock_rules import classify_stock
from app.models.medication import Medication
from app.models.stock_log import StockLogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockSnapshot:
    medication_id: int
    quantity: int
    min_stock_level: int
    version: int


@dataclass(frozen=True)
class AdjustmentOutcome:
    medication_id: int
    adjustment_type: str
    previous_quantity: int
    new_quantity: int
    quantity_changed: int
    stock_status: str
    log_id: int


def read_stock_snapshot(db: Session, medication_id: int) -> StockSnapshot:
    # Column select, not the ORM entity, so a cached instance in the
    # session identity map can never hand back a stale quantity.
    row = db.execute(
        select(
            Medication.quantity,
            Medication.min_stock_level,
            Medication.version,
            Medication.is_active,
        ).where(Medication.id == medication_id)
    ).first()
    if row is None or not row.is_active:
        raise MedicationNotFound(medication_id)
    return StockSnapshot(
        medication_id=medication_id,
        quantity=row.quantity,
        min_stock_level=row.min_stock_level,
        version=row.version,
    )


def _write_quantity(db: Session, snapshot: StockSnapshot, new_quantity: int) -> None:
    result = db.execute(
        update(Medication)
        .where(
            Medication.id == snapshot.medication_id,
            Medication.version == snapshot.version,
            Medication.quantity == snapshot.quantity,
        )
        .values(
            quantity=new_quantity,
            version=snapshot.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConcurrentModification(snapshot.medication_id)

    loaded = db.identity_map.get(db.identity_key(Medication, snapshot.medication_id))
    if loaded is not None:
        db.expire(loaded, ["quantity", "version", "updated_at"])


def record_adjustment(
    db: Session,
    medication_id: int,
    adjustment_type: str,
    adjustment_quantity,
    reason: str | None = None,
) -> AdjustmentOutcome:
    """Apply one adjustment inside the caller's transaction (flush, no commit)."""
    snapshot = read_stock_snapshot(db, medication_id)
    new_quantity = compute_adjustment(snapshot.quantity, adjustment_type, adjustment_quantity)

    _write_quantity(db, snapshot, new_quantity)
    entry = StockLogEntry(
        medication_id=medication_id,
        change_type=adjustment_type,
        quantity_changed=new_quantity - snapshot.quantity,
        previous_quantity=snapshot.quantity,
        new_quantity=new_quantity,
        reason=reason,
    )
    db.add(entry)
    db.flush()

    return AdjustmentOutcome(
        medication_id=medication_id,
        adjustment_type=adjustment_type,
        previous_quantity=snapshot.quantity,
        new_quantity=new_quantity,
        quantity_changed=entry.quantity_changed,
        stock_status=classify_stock(new_quantity, snapshot.min_stock_level),
        log_id=entry.id,
    )


def _apply_once(db, medication_id, adjustment_type, adjustment_quantity, reason):
    try:
        outcome = record_adjustment(
            db,
            medication_id,
            adjustment_type,
            adjustment_quantity,
            reason=reason,
        )
        db.commit()
    except (StockControlError, SQLAlchemyError):
        db.rollback()
        raise
    return outcome


def apply_adjustment(
    db: Session,
    medication_id: int,
    adjustment_type: str,
    adjustment_quantity,
    reason: str | None = None,
) -> AdjustmentOutcome:
    """Validate, apply and log one stock adjustment as a single commit.

    Raises ``InvalidAdjustment``, ``InvalidAdjustmentType``,
    ``InsufficientStock``, ``MedicationNotFound`` or, when the row kept
    changing underneath us, ``ConcurrentModification``.
    """
    max_retries = max(0, get_settings().ADJUSTMENT_MAX_RETRIES)
    attempt = 0
    while True:
        attempt += 1
        try:
            outcome = _apply_once(db, medication_id, adjustment_type, adjustment_quantity, reason)
        except ConcurrentModification:
            if attempt > max_retries:
                logger.warning(
                    "Giving up on stock adjustment for medication %s after %s attempts",
                    medication_id,
                    attempt,
                    extra={"medication_id": medication_id, "attempt": attempt},
                )
                raise
            logger.warning(
                "Stock for medication %s changed during adjustment; retrying",
                medication_id,
                extra={"medication_id": medication_id, "attempt": attempt},
            )
            continue
        except StockControlError as exc:
            logger.info(
                "Rejected %s adjustment for medication %s: %s",
                adjustment_type,
                medication_id,
                exc,
                extra={"medication_id": medication_id, "adjustment_type": adjustment_type},
            )
            raise

        logger.info(
            "Stock adjusted for medication %s: %s %s -> %s",
            medication_id,
            adjustment_type,
            outcome.previous_quantity,
            outcome.new_quantity,
            extra={
                "medication_id": medication_id,
                "adjustment_type": adjustment_type,
                "quantity_changed": outcome.quantity_changed,
            },
        )
        return outcome


def get_stock_status(db: Session, medication_id: int) -> str:
    return describe_stock(db, medication_id)["stock_status"]


def describe_stock(db: Session, medication_id: int) -> dict:
    snapshot = read_stock_snapshot(db, medication_id)
    return {
        "medication_id": medication_id,
        "quantity": snapshot.quantity,
        "min_stock_level": snapshot.min_stock_level,
        "stock_status": classify_stock(snapshot.quantity, snapshot.min_stock_level),
    }


def _load_active(db, medication_id):
    medication = db.get(Medication, medication_id)
    if medication is None or not medication.is_active:
        raise MedicationNotFound(medication_id)
    return medication


def get_expiry_status(db: Session, medication_id: int, as_of: date | None = None) -> str | None:
    medication = _load_active(db, medication_id)
    today = normalize_date(as_of) or date.today()
    return classify_expiry(
        medication.expiry_date,
        today,
        window_days=get_settings().EXPIRY_ALERT_DAYS,
    )


def describe_expiry(db: Session, medication_id: int, as_of: date | None = None) -> dict:
    medication = _load_active(db, medication_id)
    today = normalize_date(as_of) or date.today()
    return {
        "medication_id": medication.id,
        "expiry_date": medication.expiry_date,
        "as_of": today,
        "days_until_expiry": days_until_expiry(medication.expiry_date, today),
        "expiry_status": classify_expiry(
            medication.expiry_date,
            today,
            window_days=get_settings().EXPIRY_ALERT_DAYS,
        ),
    }


__all__ = [
    "AdjustmentOutcome",
    "StockSnapshot",
    "apply_adjustment",
    "describe_expiry",
    "describe_stock",
    "get_expiry_status",
    "get_stock_status",
    "read_stock_snapshot",
    "record_adjustment",
]
