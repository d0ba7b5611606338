from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from app.database.base import Base


class StockLogEntry(Base):
    """One accepted stock adjustment. Rows are inserted, never changed."""

    __tablename__ = "medication_stock_log"

    id = Column(Integer, primary_key=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)

    change_type = Column(String(20), nullable=False)
    quantity_changed = Column(Integer, nullable=False)
    previous_quantity = Column(Integer)
    new_quantity = Column(Integer)
    reason = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_stock_log_medication_created", "medication_id", "created_at"),
    )


__all__ = ["StockLogEntry"]
