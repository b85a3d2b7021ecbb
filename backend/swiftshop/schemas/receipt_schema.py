from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutIn(BaseModel):
    payment_method: str = Field(..., min_length=1)


class ReceiptLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    sku: str
    name: Optional[str] = None
    quantity: int
    price_cents: int
    line_total_cents: int


class ReceiptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    receipt_number: str
    user_id: str
    total_cents: int
    payment_method: str
    created_at: datetime
    lines: List[ReceiptLineOut]
