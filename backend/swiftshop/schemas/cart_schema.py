from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from swiftshop.db import SQL_INT_MAX


class AddLineIn(BaseModel):
    sku: str
    qty: int = Field(..., le=SQL_INT_MAX)


class SetQuantityIn(BaseModel):
    qty: int = Field(..., le=SQL_INT_MAX)


class CartLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    sku: str
    quantity: int
    name: Optional[str] = None
    unit_price_cents: int
    line_total_cents: int
    available: bool
    in_stock: bool


class CartOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    user_id: str
    lines: List[CartLineOut]
    total_cents: int
