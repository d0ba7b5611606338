import argparse
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy import delete, select

from app.core.logging import setup_logging
from app.database import Base, SessionLocal, engine, ensure_sqlite_schema
from app.models import Medication, MedicationSupplier, StockLogEntry, import_all_models
from app.schemas.medication import MedicationCreate
from app.services.medication_service import add_medication


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample medication stock.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing medications, suppliers and stock log before seeding.",
    )
    return parser.parse_args()


def sample_medications(supplier_id):
    today = date.today()
    return [
        MedicationCreate(
            name="Amoxicillin",
            generic_name="Amoxicillin trihydrate",
            dosage="500mg",
            form="capsule",
            manufacturer="GSK",
            batch_number="AMX-2401",
            expiry_date=today + timedelta(days=240),
            quantity=120,
            min_stock_level=30,
            unit_price=Decimal("0.45"),
            supplier_id=supplier_id,
        ),
        MedicationCreate(
            name="Paracetamol",
            dosage="500mg",
            form="tablet",
            batch_number="PCM-2317",
            expiry_date=today + timedelta(days=21),
            quantity=8,
            min_stock_level=50,
            unit_price=Decimal("0.05"),
            supplier_id=supplier_id,
        ),
        MedicationCreate(
            name="Salbutamol Inhaler",
            dosage="100mcg",
            form="inhaler",
            batch_number="SAL-0912",
            quantity=0,
            min_stock_level=5,
            unit_price=Decimal("3.20"),
        ),
    ]


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()

    db = SessionLocal()
    try:
        if args.reset:
            db.execute(delete(StockLogEntry))
            db.execute(delete(Medication))
            db.execute(delete(MedicationSupplier))
            db.commit()

        has_medication = db.execute(select(Medication.id).limit(1)).first()
        if has_medication:
            print("Seed skipped: medications already exist.")
            return

        supplier = MedicationSupplier(
            name="Central Medical Stores",
            contact_info="orders@cms.example",
            address="12 Warehouse Rd",
        )
        db.add(supplier)
        db.flush()

        for payload in sample_medications(supplier.id):
            add_medication(db, payload)
        db.commit()
        print("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
