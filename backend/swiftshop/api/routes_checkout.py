import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from swiftshop.api.deps import current_user_id, http_error
from swiftshop.db import get_db
from swiftshop.errors import ShopError
from swiftshop.schemas.receipt_schema import CheckoutIn, ReceiptOut
from swiftshop.services.checkout_service import CheckoutService

router = APIRouter(tags=["checkout"])
log = logging.getLogger(__name__)


@router.post("", summary="Check out the cart", status_code=201, response_model=ReceiptOut)
def checkout(
    payload: CheckoutIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    svc = CheckoutService(db)
    try:
        receipt = svc.checkout(user_id, payload.payment_method, idempotency_key=idempotency_key)
    except ShopError as e:
        raise http_error(e)
    except Exception as e:
        log.exception("checkout failed for user=%s", user_id)
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return ReceiptOut.model_validate(receipt)
