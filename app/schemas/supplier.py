from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SupplierBase(BaseModel):
    name: str = Field(min_length=1)
    contact_info: Optional[str] = None
    address: Optional[str] = None


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    contact_info: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, value):
        if value is None:
            raise ValueError("name cannot be null")
        return value


class SupplierRead(SupplierBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
