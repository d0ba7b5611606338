from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AlertRead(BaseModel):
    medication_id: int
    name: str
    alert_type: str
    message: str
    quantity: int
    min_stock_level: int
    expiry_date: Optional[date] = None
    days_until_expiry: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
