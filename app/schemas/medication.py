from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import MAX_STOCK_QUANTITY


class MedicationBase(BaseModel):
    name: str = Field(min_length=1)
    generic_name: Optional[str] = None
    dosage: Optional[str] = None
    form: Optional[str] = None
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    min_stock_level: Optional[int] = Field(default=None, ge=0, le=MAX_STOCK_QUANTITY)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    supplier_id: Optional[int] = None


class MedicationCreate(MedicationBase):
    quantity: int = Field(default=0, ge=0, le=MAX_STOCK_QUANTITY)


class MedicationUpdate(BaseModel):
    """Metadata edit. Stock changes go through the adjustments endpoint."""

    name: Optional[str] = Field(default=None, min_length=1)
    generic_name: Optional[str] = None
    dosage: Optional[str] = None
    form: Optional[str] = None
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    min_stock_level: Optional[int] = Field(default=None, ge=0, le=MAX_STOCK_QUANTITY)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    supplier_id: Optional[int] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "min_stock_level", "unit_price", "is_active")
    @classmethod
    def reject_null(cls, value, info):
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class MedicationRead(MedicationBase):
    id: int
    quantity: int
    min_stock_level: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MedicationPage(BaseModel):
    data: List[MedicationRead]
    next_cursor: Optional[int] = None
    has_next_page: bool = False


class InventoryItem(MedicationRead):
    stock_status: str
    expiry_status: Optional[str] = None
    days_until_expiry: Optional[int] = None
    is_low_stock: bool
    is_out_of_stock: bool
    is_expiring_soon: bool


class InventoryPage(BaseModel):
    data: List[InventoryItem]
    next_cursor: Optional[int] = None
    has_next_page: bool = False


class ExpiringMedication(MedicationRead):
    days_until_expiry: int
