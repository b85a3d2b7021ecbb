from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from swiftshop.db import get_db
from swiftshop.repositories.item_repo import ItemRepository
from swiftshop.schemas.item_schema import ItemOut, ItemPage

router = APIRouter(tags=["catalogue"])


@router.get("", summary="List products", response_model=ItemPage)
def list_products(
    q: Optional[str] = Query(None, description="search term"),
    in_stock: Optional[bool] = Query(None, description="only items with (or without) stock"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    repo = ItemRepository(db)
    items, total = repo.list(q=q, in_stock=in_stock, page=page, size=size)
    return {"items": [ItemOut.model_validate(it) for it in items], "total": total}


@router.get("/{sku}", summary="Get product by SKU", response_model=ItemOut)
def get_product(sku: str, db: Session = Depends(get_db)):
    repo = ItemRepository(db)
    it = repo.get(sku)
    if not it:
        raise HTTPException(status_code=404, detail="Product not found")
    return ItemOut.model_validate(it)
