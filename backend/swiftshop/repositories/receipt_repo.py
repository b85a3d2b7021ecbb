from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from swiftshop.models.receipt import Receipt


class ReceiptRepository:
    """Append-only receipt log. Receipts are never updated or deleted."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, receipt: Receipt) -> Receipt:
        self.db.add(receipt)
        self.db.flush()
        return receipt

    def get(self, receipt_id: int) -> Optional[Receipt]:
        return (
            self.db.query(Receipt)
            .options(selectinload(Receipt.lines))
            .filter(Receipt.id == receipt_id)
            .first()
        )

    def list_by_user(self, user_id: str) -> List[Receipt]:
        return (
            self.db.query(Receipt)
            .options(selectinload(Receipt.lines))
            .filter(Receipt.user_id == user_id)
            .order_by(Receipt.created_at.desc(), Receipt.id.desc())
            .all()
        )
