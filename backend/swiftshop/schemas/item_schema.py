from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from swiftshop.db import SQL_INT_MAX


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    sku: str
    name: str
    description: Optional[str] = None
    price_cents: int
    stock: int
    active: bool


class ItemPage(BaseModel):
    items: List[ItemOut]
    total: int


class ItemUpsertIn(BaseModel):
    name: str = Field(..., min_length=1)
    price_cents: int = Field(..., ge=0, le=SQL_INT_MAX)
    stock: int = Field(0, ge=0, le=SQL_INT_MAX)
    description: Optional[str] = None
    active: bool = True


class StockAdjustIn(BaseModel):
    delta: int = Field(..., ge=-SQL_INT_MAX, le=SQL_INT_MAX)
