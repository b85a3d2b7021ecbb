from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from swiftshop.api.deps import current_user_id, http_error
from swiftshop.db import get_db
from swiftshop.errors import ShopError
from swiftshop.schemas.cart_schema import AddLineIn, CartOut, SetQuantityIn
from swiftshop.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", summary="Get cart", response_model=CartOut)
def get_cart(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    return CartService(db).get_cart(user_id)


@router.post("/items", summary="Add item to cart", response_model=CartOut)
def add_line(
    payload: AddLineIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        svc.add_line(user_id, payload.sku, payload.qty)
    except ShopError as e:
        raise http_error(e)
    return svc.get_cart(user_id)


@router.put("/items/{sku}", summary="Set line quantity (0 removes)", response_model=CartOut)
def set_quantity(
    sku: str,
    payload: SetQuantityIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        svc.set_quantity(user_id, sku, payload.qty)
    except ShopError as e:
        raise http_error(e)
    return svc.get_cart(user_id)


@router.delete("/items/{sku}", summary="Remove line", response_model=CartOut)
def remove_line(
    sku: str,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    svc.remove_line(user_id, sku)
    return svc.get_cart(user_id)
