from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class StockAdjustmentRequest(BaseModel):
    # Plain str/int so the ledger reports the specific adjustment error.
    adjustment_type: str = Field(
        validation_alias=AliasChoices("adjustment_type", "adjustmentType"),
    )
    adjustment_quantity: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("adjustment_quantity", "adjustmentQuantity"),
    )
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class StockAdjustmentResult(BaseModel):
    medication_id: int
    adjustment_type: str
    previous_quantity: int
    new_quantity: int
    quantity_changed: int
    stock_status: str
    log_id: int


class StockAdjustmentPreview(BaseModel):
    current_quantity: int
    new_quantity: int
    allowed: bool
    error: Optional[str] = None


class StockStatusRead(BaseModel):
    medication_id: int
    quantity: int
    min_stock_level: int
    stock_status: str


class ExpiryStatusRead(BaseModel):
    medication_id: int
    expiry_date: Optional[date] = None
    as_of: date
    days_until_expiry: Optional[int] = None
    expiry_status: Optional[str] = None


class StockLogRead(BaseModel):
    id: int
    medication_id: int
    change_type: str
    quantity_changed: int
    previous_quantity: Optional[int] = None
    new_quantity: Optional[int] = None
    reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockLogListItem(StockLogRead):
    medication_name: Optional[str] = None


class StockTrends(BaseModel):
    medication_id: int
    days: int
    total_changes: int
    daily_changes: Dict[str, int] = Field(default_factory=dict)
    logs: List[StockLogRead] = Field(default_factory=list)


class StockSummary(BaseModel):
    as_of: date
    total_medications: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    expiring_soon: int
    expired: int
