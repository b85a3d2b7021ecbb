from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from swiftshop.api.deps import current_user_id
from swiftshop.db import get_db
from swiftshop.repositories.receipt_repo import ReceiptRepository
from swiftshop.schemas.receipt_schema import ReceiptOut

router = APIRouter(tags=["receipts"])


@router.get("", summary="List my receipts", response_model=List[ReceiptOut])
def list_receipts(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    repo = ReceiptRepository(db)
    return [ReceiptOut.model_validate(r) for r in repo.list_by_user(user_id)]


@router.get("/{receipt_id}", summary="Get one of my receipts", response_model=ReceiptOut)
def get_receipt(
    receipt_id: int,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    r = ReceiptRepository(db).get(receipt_id)
    # other users' receipts are indistinguishable from missing ones
    if not r or r.user_id != user_id:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return ReceiptOut.model_validate(r)
