from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from app.database.base import Base


class Medication(Base):
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    generic_name = Column(String)
    dosage = Column(String)
    form = Column(String)  # tablet, capsule, syrup, injection
    manufacturer = Column(String)
    batch_number = Column(String)
    expiry_date = Column(Date)

    # Written only by the stock ledger; see app.services.stock_service.
    quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=10)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    supplier_id = Column(Integer, ForeignKey("medication_suppliers.id", ondelete="SET NULL"))

    # Bumped on every quantity write; the ledger's compare-and-swap key.
    version = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    supplier = relationship("MedicationSupplier", back_populates="medications")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_medications_quantity_non_negative"),
        CheckConstraint("min_stock_level >= 0", name="ck_medications_min_stock_non_negative"),
        CheckConstraint("unit_price >= 0", name="ck_medications_unit_price_non_negative"),
        Index("idx_medications_active_name", "is_active", "name"),
        Index("idx_medications_expiry", "expiry_date"),
    )


__all__ = ["Medication"]
