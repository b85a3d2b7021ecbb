from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from swiftshop.api.deps import http_error
from swiftshop.db import get_db
from swiftshop.errors import ShopError
from swiftshop.schemas.item_schema import ItemOut, ItemUpsertIn, StockAdjustIn
from swiftshop.services.inventory_service import InventoryService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.put("/items/{sku}", summary="Create or update an item", response_model=ItemOut)
def upsert_item(sku: str, payload: ItemUpsertIn, db: Session = Depends(get_db)):
    svc = InventoryService(db)
    try:
        item = svc.upsert_item(
            sku=sku,
            name=payload.name,
            price_cents=payload.price_cents,
            stock=payload.stock,
            description=payload.description,
            active=payload.active,
        )
    except ShopError as e:
        raise http_error(e)
    return ItemOut.model_validate(item)


@router.post("/items/{sku}/stock", summary="Adjust stock by a delta", response_model=ItemOut)
def adjust_stock(sku: str, payload: StockAdjustIn, db: Session = Depends(get_db)):
    svc = InventoryService(db)
    try:
        item = svc.adjust_stock(sku, payload.delta)
    except ShopError as e:
        raise http_error(e)
    return ItemOut.model_validate(item)
