import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import SupplierNotFound
from app.models.medication import Medication
from app.models.supplier import MedicationSupplier
from app.schemas.supplier import SupplierCreate, SupplierUpdate

logger = logging.getLogger(__name__)


def _commit(db):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def create_supplier(db: Session, payload: SupplierCreate) -> MedicationSupplier:
    supplier = MedicationSupplier(**payload.model_dump())
    db.add(supplier)
    _commit(db)
    db.refresh(supplier)
    return supplier


def get_supplier(db: Session, supplier_id: int) -> MedicationSupplier:
    supplier = db.get(MedicationSupplier, supplier_id)
    if supplier is None:
        raise SupplierNotFound(supplier_id)
    return supplier


def find_supplier_by_name(db: Session, name: str) -> MedicationSupplier | None:
    """Case-insensitive match on the trimmed name; oldest supplier wins."""
    return (
        db.execute(
            select(MedicationSupplier)
            .where(func.lower(MedicationSupplier.name) == name.strip().lower())
            .order_by(MedicationSupplier.id)
        )
        .scalars()
        .first()
    )


def list_suppliers(db: Session) -> list[MedicationSupplier]:
    rows = db.execute(
        select(MedicationSupplier).order_by(
            MedicationSupplier.created_at.desc(),
            MedicationSupplier.id.desc(),
        )
    ).scalars()
    return list(rows)


def update_supplier(db: Session, supplier_id: int, payload: SupplierUpdate) -> MedicationSupplier:
    supplier = get_supplier(db, supplier_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(supplier, key, value)
    _commit(db)
    db.refresh(supplier)
    return supplier


def delete_supplier(db: Session, supplier_id: int) -> None:
    """Remove a supplier; medications that referenced it keep their stock."""
    supplier = get_supplier(db, supplier_id)
    db.execute(
        update(Medication)
        .where(Medication.supplier_id == supplier_id)
        .values(supplier_id=None)
        .execution_options(synchronize_session="evaluate")
    )
    db.delete(supplier)
    _commit(db)
    logger.info("Deleted supplier %s", supplier_id)


__all__ = [
    "create_supplier",
    "delete_supplier",
    "find_supplier_by_name",
    "get_supplier",
    "list_suppliers",
    "update_supplier",
]
